"""Base ABC for GitLab clients."""

from abc import ABC, abstractmethod
from typing import Any

from gitlab_ops_manager.schemas.project import ProtectedAccessLevel


class GitLabClientBase(ABC):
    """Base ABC for GitLab clients.

    Implementations must raise GitLabNotFoundError when a project (or a
    protection rule) does not exist, and GitLabRequestError for any other
    rejected request. Transport failures may surface as httpx.HTTPError.
    """

    # Project CRUD
    @abstractmethod
    async def get_project(self, name: str) -> dict[str, Any]:
        """Get a project by its full path."""
        pass

    @abstractmethod
    async def create_project(self, name: str, attributes: dict[str, Any]) -> dict[str, Any]:
        """Create a project at the given full path with the given attributes."""
        pass

    @abstractmethod
    async def update_project(self, name: str, attributes: dict[str, Any]) -> dict[str, Any]:
        """Update the attributes of the project at the given full path."""
        pass

    # Protected branch operations
    @abstractmethod
    async def unprotect_branch(self, name: str, branch: str) -> None:
        """Remove the protection rule for a branch of a project."""
        pass

    @abstractmethod
    async def protect_branch(
        self,
        name: str,
        branch: str,
        push_access_level: ProtectedAccessLevel,
        merge_access_level: ProtectedAccessLevel,
    ) -> dict[str, Any]:
        """Protect a branch of a project with the given push and merge access levels."""
        pass
