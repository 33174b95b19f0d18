"""Pydantic schema for a fully resolved GitLab project specification.

Every project field has exactly one documented default, kept in
``PROJECT_FIELD_DEFAULTS``. ``resolve_project_spec`` turns a partially
specified record (as read from a configuration file, or built by hand in a
test) into a ``ProjectSpec`` with no unresolved fields.
"""

from enum import Enum
from typing import Any, Mapping, Self

import structlog
from pydantic import BaseModel, ConfigDict

from gitlab_ops_manager.processing.exceptions import InvalidConfigurationError
from gitlab_ops_manager.utils.gitlab import normalize_project_path

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


class GitLabSettingEnum(str, Enum):
    """Base for enums whose members are written as PascalCase names in configuration files."""

    @property
    def config_name(self) -> str:
        """Return the PascalCase name used in configuration files (e.g. FastForward)."""
        return "".join(part.capitalize() for part in self.name.split("_"))

    @classmethod
    def parse(cls, field: str, value: Any) -> Self:
        """Parse a configuration literal, accepting either the PascalCase name or the GitLab API value."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            for member in cls:
                if value in (member.config_name, member.value):
                    return member
        expected = ", ".join(member.config_name for member in cls)
        raise InvalidConfigurationError(field, value, f"expected one of {expected}")


class VisibilityLevel(GitLabSettingEnum):
    """Project visibility."""

    PUBLIC = "public"
    INTERNAL = "internal"
    PRIVATE = "private"


class FeatureAccessLevel(GitLabSettingEnum):
    """Access level of a project feature."""

    DISABLED = "disabled"
    PRIVATE = "private"
    ENABLED = "enabled"


class FeatureAccessLevelPublic(GitLabSettingEnum):
    """Access level of a project feature that may also be made public."""

    DISABLED = "disabled"
    PRIVATE = "private"
    ENABLED = "enabled"
    PUBLIC = "public"


class MergeMethod(GitLabSettingEnum):
    """Merge method used for merge requests."""

    MERGE = "merge"
    REBASE_MERGE = "rebase_merge"
    FAST_FORWARD = "ff"


class SquashOption(GitLabSettingEnum):
    """Squash policy for merge requests."""

    NEVER = "never"
    ALWAYS = "always"
    DEFAULT_ON = "default_on"
    DEFAULT_OFF = "default_off"


_PROTECTED_ACCESS_LEVEL_VALUES: dict[str, int] = {
    "developer": 30,
    "maintainer": 40,
    "admin": 60,
    "no_access": 0,
}


class ProtectedAccessLevel(GitLabSettingEnum):
    """Access level required to push to or merge into a protected branch.

    Members are ordered Developer < Maintainer < Admin < NoAccess, from the
    least to the most restrictive.
    """

    DEVELOPER = "developer"
    MAINTAINER = "maintainer"
    ADMIN = "admin"
    NO_ACCESS = "no_access"

    @property
    def access_level(self) -> int:
        """Return the numeric access level the GitLab API expects."""
        return _PROTECTED_ACCESS_LEVEL_VALUES[self.value]

    @property
    def rank(self) -> int:
        """Return the position of this level in the restrictiveness ordering."""
        return list(type(self)).index(self)

    @classmethod
    def parse(cls, field: str, value: Any) -> Self:
        """Parse a configuration literal, also accepting the numeric GitLab access level."""
        if isinstance(value, int) and not isinstance(value, bool):
            for member in cls:
                if member.access_level == value:
                    return member
        return super().parse(field, value)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, ProtectedAccessLevel):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, ProtectedAccessLevel):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, ProtectedAccessLevel):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, ProtectedAccessLevel):
            return NotImplemented
        return self.rank >= other.rank


# Defaults for every field except the project name, which is required.
PROJECT_FIELD_DEFAULTS: dict[str, Any] = {
    "default_branch": "main",
    "default_branch_push_protected_access_level": ProtectedAccessLevel.ADMIN,
    "default_branch_merge_protected_access_level": ProtectedAccessLevel.DEVELOPER,
    "pages_access_level": FeatureAccessLevelPublic.DISABLED,
    "operations_access_level": FeatureAccessLevel.DISABLED,
    "requirements_access_level": FeatureAccessLevelPublic.DISABLED,
    "analytics_access_level": FeatureAccessLevel.DISABLED,
    "emails_disabled": False,
    "container_registry_enabled": False,
    "visibility": VisibilityLevel.INTERNAL,
    "public_builds": False,
    "only_allow_merge_if_pipeline_succeeds": True,
    "allow_merge_on_skipped_pipeline": False,
    "only_allow_merge_if_all_discussions_are_resolved": True,
    "merge_method": MergeMethod.FAST_FORWARD,
    "squash_option": SquashOption.DEFAULT_OFF,
    "merge_pipelines_enabled": False,
    "merge_trains_enabled": False,
    "remove_source_branch_after_merge": True,
    "printing_merge_requests_link_enabled": True,
    "lfs_enabled": False,
    "request_access_enabled": False,
    "auto_devops_enabled": False,
    "approvals_before_merge": 1,
    "mirror": False,
    "package_enabled": False,
    "service_desk_enabled": False,
    "issues_enabled": False,
    "merge_requests_enabled": True,
    "jobs_enabled": False,
    "wiki_enabled": False,
    "snippets_enabled": False,
}


class ProjectSpec(BaseModel):
    """Pydantic model for the fully resolved desired state of a GitLab project."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str
    default_branch: str
    default_branch_push_protected_access_level: ProtectedAccessLevel
    default_branch_merge_protected_access_level: ProtectedAccessLevel
    pages_access_level: FeatureAccessLevelPublic
    operations_access_level: FeatureAccessLevel
    requirements_access_level: FeatureAccessLevelPublic
    analytics_access_level: FeatureAccessLevel
    emails_disabled: bool
    container_registry_enabled: bool
    visibility: VisibilityLevel
    public_builds: bool
    only_allow_merge_if_pipeline_succeeds: bool
    allow_merge_on_skipped_pipeline: bool
    only_allow_merge_if_all_discussions_are_resolved: bool
    merge_method: MergeMethod
    squash_option: SquashOption
    merge_pipelines_enabled: bool
    merge_trains_enabled: bool
    remove_source_branch_after_merge: bool
    printing_merge_requests_link_enabled: bool
    lfs_enabled: bool
    request_access_enabled: bool
    auto_devops_enabled: bool
    approvals_before_merge: int
    mirror: bool
    package_enabled: bool
    service_desk_enabled: bool
    issues_enabled: bool
    merge_requests_enabled: bool
    jobs_enabled: bool
    wiki_enabled: bool
    snippets_enabled: bool


def _resolve_field(field: str, value: Any) -> Any:
    default = PROJECT_FIELD_DEFAULTS[field]
    if isinstance(default, GitLabSettingEnum):
        return type(default).parse(field, value)
    if isinstance(default, bool):
        if not isinstance(value, bool):
            raise InvalidConfigurationError(field, value, "expected a boolean")
        return value
    if isinstance(default, int):
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise InvalidConfigurationError(field, value, "expected a non-negative integer")
        return value
    if not isinstance(value, str) or not value:
        raise InvalidConfigurationError(field, value, "expected a non-empty string")
    return value


def resolve_project_spec(record: Mapping[str, Any]) -> ProjectSpec:
    """Resolve a partially specified project record into a ProjectSpec.

    Absent (or null) fields take their value from PROJECT_FIELD_DEFAULTS.
    Unknown keys are logged and ignored.

    Raises:
        InvalidConfigurationError: If the name is missing or any field has a malformed value.
    """
    raw_name = record.get("name")
    if not isinstance(raw_name, str) or not normalize_project_path(raw_name):
        raise InvalidConfigurationError("name", raw_name, "a non-empty project path is required")
    name = normalize_project_path(raw_name)

    unknown_fields = set(record) - set(PROJECT_FIELD_DEFAULTS) - {"name"}
    if unknown_fields:
        logger.warning("Unknown project fields will be ignored", project=name, unknown_fields=sorted(unknown_fields))

    resolved: dict[str, Any] = {"name": name}
    for field, default in PROJECT_FIELD_DEFAULTS.items():
        value = record.get(field)
        resolved[field] = default if value is None else _resolve_field(field, value)
    return ProjectSpec(**resolved)
