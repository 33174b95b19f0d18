"""GitLab client adapter for the GitLab REST v4 API, built on httpx."""

from typing import Any, Self

import httpx
import structlog

from gitlab_ops_manager.schemas.project import ProtectedAccessLevel
from gitlab_ops_manager.utils.gitlab import encode_path_parameter, split_project_path

from .abc import GitLabClientBase
from .client import get_gitlab_client
from .exceptions import GitLabNotFoundError, GitLabRequestError

logger = structlog.get_logger(__name__)


def extract_error_message(response: httpx.Response) -> str:
    """Extract GitLab's error message from a failed response.

    GitLab reports errors as ``{"message": "..."}``, ``{"message": {"field": ["..."]}}``
    or ``{"error": "..."}``. Anything else falls back to the response text.
    """
    try:
        error_data = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if not isinstance(error_data, dict):
        return str(error_data)
    message = error_data.get("message", error_data.get("error"))
    if isinstance(message, dict):
        return "; ".join(
            f"{field}: {', '.join(map(str, errors)) if isinstance(errors, list) else errors}" for field, errors in message.items()
        )
    if isinstance(message, list):
        return "; ".join(map(str, message))
    if message is None:
        return response.text or response.reason_phrase
    return str(message)


class GitLabAdapter(GitLabClientBase):
    """GitLab client adapter for the GitLab REST v4 API."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        """Initialize the GitLab client adapter with an already-initialized httpx client."""
        self.client = client

    @classmethod
    async def create(cls, gitlab_host: str, gitlab_token: str, timeout: float = 30.0) -> Self:
        """Create a new GitLab client adapter.

        Args:
            gitlab_host: GitLab host name, optionally with a scheme
            gitlab_token: Personal, project or group access token
            timeout: Per-request timeout in seconds

        Returns:
            Configured GitLabAdapter instance
        """
        client = get_gitlab_client(gitlab_host=gitlab_host, gitlab_token=gitlab_token, timeout=timeout)
        logger.info("Creating client for GitLab instance", gitlab_api_url=str(client.base_url), timeout=timeout)
        return cls(client)

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Issue a request and return the decoded JSON body, if any.

        Raises:
            GitLabNotFoundError: If GitLab answers 404 Not Found.
            GitLabRequestError: If GitLab answers with any other non-success status, or
                with a success status and a body that is not JSON.
        """
        response = await self.client.request(method, path, **kwargs)
        logger.debug("GitLab API request", method=method, url=str(response.url), status_code=response.status_code)
        if not response.is_success:
            message = extract_error_message(response)
            error_class = GitLabNotFoundError if response.status_code == httpx.codes.NOT_FOUND else GitLabRequestError
            raise error_class(response.status_code, message, method=method, url=str(response.url))
        if response.status_code == httpx.codes.NO_CONTENT or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise GitLabRequestError(
                response.status_code,
                f"Malformed JSON response: {response.text[:200]!r}",
                method=method,
                url=str(response.url),
            ) from exc

    # Project CRUD
    async def get_project(self, name: str) -> dict[str, Any]:
        """Get a project by its full path."""
        return await self._request("GET", f"/projects/{encode_path_parameter(name)}")

    async def get_namespace(self, namespace: str) -> dict[str, Any]:
        """Get a group or user namespace by its full path."""
        return await self._request("GET", f"/namespaces/{encode_path_parameter(namespace)}")

    async def create_project(self, name: str, attributes: dict[str, Any]) -> dict[str, Any]:
        """Create a project at the given full path.

        When the path is namespaced, the namespace is looked up first so the
        project is created inside it rather than in the token owner's namespace.
        """
        namespace, path = split_project_path(name)
        payload: dict[str, Any] = {"path": path, "name": path, **attributes}
        if namespace is not None:
            namespace_data = await self.get_namespace(namespace)
            payload["namespace_id"] = namespace_data["id"]
        return await self._request("POST", "/projects", json=payload)

    async def update_project(self, name: str, attributes: dict[str, Any]) -> dict[str, Any]:
        """Update the attributes of the project at the given full path."""
        return await self._request("PUT", f"/projects/{encode_path_parameter(name)}", json=attributes)

    # Protected branch operations
    async def unprotect_branch(self, name: str, branch: str) -> None:
        """Remove the protection rule for a branch of a project."""
        await self._request(
            "DELETE",
            f"/projects/{encode_path_parameter(name)}/protected_branches/{encode_path_parameter(branch)}",
        )

    async def protect_branch(
        self,
        name: str,
        branch: str,
        push_access_level: ProtectedAccessLevel,
        merge_access_level: ProtectedAccessLevel,
    ) -> dict[str, Any]:
        """Protect a branch of a project with the given push and merge access levels."""
        return await self._request(
            "POST",
            f"/projects/{encode_path_parameter(name)}/protected_branches",
            json={
                "name": branch,
                "push_access_level": push_access_level.access_level,
                "merge_access_level": merge_access_level.access_level,
            },
        )
