"""Contains exceptions raised by GitLab clients."""


class GitLabError(Exception):
    """Base class for errors reported by a GitLab client."""

    pass


class GitLabRequestError(GitLabError):
    """Raised when the GitLab API rejects a request with a non-success status."""

    def __init__(self, status_code: int, message: str, method: str | None = None, url: str | None = None) -> None:
        """Initializes the exception with the response status and GitLab's error message."""
        # GitLab messages usually carry the status already (e.g. "404 Project Not Found").
        if not message.startswith(str(status_code)):
            message = f"{status_code} {message}"
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.method = method
        self.url = url


class GitLabNotFoundError(GitLabRequestError):
    """Raised when the requested GitLab resource does not exist."""

    pass
