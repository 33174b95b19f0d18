"""Contains exceptions raised while synchronizing projects."""


class MutationError(Exception):
    """Raised when GitLab rejects a create, update, protect or unprotect call for a project."""

    def __init__(self, step: str, name: str, message: str) -> None:
        """Initializes the exception with the failed step, the project and GitLab's message."""
        super().__init__(f"Failed to {step} for project {name}: {message}")
        self.step = step
        self.name = name
        self.message = message
