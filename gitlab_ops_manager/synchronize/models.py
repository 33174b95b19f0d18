"""Models shared by the synchronization logic."""

from dataclasses import dataclass
from enum import Enum


class SyncDecision(str, Enum):
    """Decision taken for a desired project after probing GitLab."""

    CREATE = "create"
    UPDATE = "update"


class ReconciliationState(str, Enum):
    """States a project passes through while being reconciled."""

    INIT = "init"
    PROBED = "probed"
    CREATING = "creating"
    UPDATING = "updating"
    BRANCH_UNPROTECTING = "branch_unprotecting"
    BRANCH_PROTECTING = "branch_protecting"
    DONE = "done"
    FAILED = "failed"


class OutcomeKind(str, Enum):
    """Outcome reported for each desired project."""

    CREATED = "created"
    UPDATED = "updated"
    SKIPPED = "skipped"
    FAILED = "failed"


class ErrorKind(str, Enum):
    """Classification of the error behind a failed outcome."""

    INVALID_CONFIGURATION = "invalid_configuration"
    PROBE_ERROR = "probe_error"
    MUTATION_ERROR = "mutation_error"
    UNEXPECTED_ERROR = "unexpected_error"


@dataclass(frozen=True)
class Found:
    """The project exists in GitLab."""

    id: int
    path_with_namespace: str | None = None
    default_branch: str | None = None


@dataclass(frozen=True)
class NotFound:
    """GitLab reported that the project does not exist."""

    pass


@dataclass(frozen=True)
class ProbeError:
    """The project lookup failed for a reason other than the project not existing."""

    detail: str


RemoteState = Found | NotFound | ProbeError
