"""Pydantic schema for the expected YAML configuration file structure."""

from typing import Any

from pydantic import BaseModel


class GitLabConnectionModel(BaseModel):
    """Pydantic model for the GitLab connection section."""

    host: str | None = None
    token: str | None = None


class ProjectsConfigModel(BaseModel):
    """Pydantic model for the GitLab connection and the list of desired project records.

    Project records are kept raw so that each one is resolved (and can fail)
    independently of the others.
    """

    gitlab: GitLabConnectionModel = GitLabConnectionModel()
    projects: list[dict[str, Any]]
