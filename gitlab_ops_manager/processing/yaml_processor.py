"""Handles reading YAML configuration input.

This module provides the ConfigYAMLProcessor class, which loads the GitLab
connection section and the list of desired project records from a YAML file.
Structural problems with the document are collected and raised together;
field-level validation of each project is left to the synchronization driver
so that one malformed project does not prevent the others from being
synchronized. All logging is performed using structlog.
"""

from pathlib import Path
from typing import Any

import structlog
from pydantic import ValidationError
from ruamel.yaml import YAML
from structlog.stdlib import BoundLogger

from gitlab_ops_manager.processing.exceptions import YAMLProcessingError
from gitlab_ops_manager.schemas.config_file import GitLabConnectionModel, ProjectsConfigModel

logger: BoundLogger = structlog.get_logger(__name__)  # type: ignore

yaml = YAML(typ="safe")


class ConfigYAMLProcessor:
    """Loads the GitLab connection settings and project records from a YAML file.

    The file is expected to have an optional top-level 'gitlab' mapping with
    'host' and 'token' keys and a top-level 'projects' key containing a list
    of project dictionaries.
    """

    def __init__(self, raise_on_error: bool = True) -> None:
        """Initialize ConfigYAMLProcessor.

        Args:
            raise_on_error (bool): Whether to raise a YAMLProcessingError on structural errors.
        """
        self.raise_on_error = raise_on_error

    def load_config(self, yaml_path: str | Path) -> ProjectsConfigModel:
        """Load the configuration file, returning a ProjectsConfigModel."""
        path = str(yaml_path)
        errors: list[dict[str, Any]] = []
        data = self._load_yaml_file(path, errors)
        if data is None:
            raise YAMLProcessingError(errors)

        gitlab = self._extract_gitlab(data, path, errors)
        projects: list[dict[str, Any]] = []
        for idx, project_dict in enumerate(self._extract_projects(data, path, errors)):
            if not isinstance(project_dict, dict):
                logger.warning(
                    "Project entry is not a dict and will be skipped",
                    file=path,
                    project_index=idx,
                    actual_type=type(project_dict).__name__,
                )
                errors.append({"file": path, "project_index": idx, "error": "Project entry is not a dict"})
                continue
            projects.append(project_dict)

        if errors:
            logger.error("One or more errors occurred during YAML processing", errors=errors)
            if self.raise_on_error:
                raise YAMLProcessingError(errors)
        logger.debug("Loaded configuration file", file=path, project_count=len(projects))
        return ProjectsConfigModel(gitlab=gitlab, projects=projects)

    def _load_yaml_file(self, path: str, errors: list[dict[str, Any]]) -> dict[str, Any] | None:
        try:
            with open(path, encoding="utf-8") as f:
                data: dict[str, Any] = yaml.load(f)  # type: ignore
        except Exception as e:
            logger.error("Failed to parse YAML file", path=path, error=str(e))
            errors.append({"file": path, "error": str(e)})
            return None
        # If loaded data is not a dictionary, throw an error.
        if not isinstance(data, dict):
            logger.error("YAML file is not a dictionary", path=path)
            errors.append({"file": path, "error": "YAML file is not a dictionary"})
            return None
        return data

    def _extract_gitlab(self, data: dict[str, Any], path: str, errors: list[dict[str, Any]]) -> GitLabConnectionModel:
        section = data.get("gitlab")
        if section is None:
            return GitLabConnectionModel()
        try:
            return GitLabConnectionModel.model_validate(section)
        except ValidationError as ve:
            logger.error("Validation error for 'gitlab' section", file=path, error=ve.errors())
            errors.append({"file": path, "section": "gitlab", "error": ve.errors()})
            return GitLabConnectionModel()

    def _extract_projects(self, data: dict[str, Any], path: str, errors: list[dict[str, Any]]) -> list[Any]:
        if "projects" not in data:
            logger.error("YAML file missing top-level 'projects' key", path=path)
            errors.append({"file": path, "error": "Missing top-level 'projects' key"})
            return []
        projects = data["projects"]
        if projects is None:
            return []
        if not isinstance(projects, list):
            logger.error("Top-level 'projects' key is not a list", path=path)
            errors.append({"file": path, "error": "Top-level 'projects' key is not a list"})
            return []
        return projects
