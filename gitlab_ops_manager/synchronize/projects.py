"""Contains synchronization logic for GitLab projects."""

from typing import Any

import httpx
import structlog

from gitlab_ops_manager.gitlab.abc import GitLabClientBase
from gitlab_ops_manager.gitlab.exceptions import GitLabError
from gitlab_ops_manager.schemas.project import GitLabSettingEnum, ProjectSpec
from gitlab_ops_manager.synchronize.exceptions import MutationError
from gitlab_ops_manager.synchronize.models import (
    ErrorKind,
    Found,
    NotFound,
    OutcomeKind,
    ProbeError,
    ReconciliationState,
    RemoteState,
    SyncDecision,
)
from gitlab_ops_manager.synchronize.probe import probe_project
from gitlab_ops_manager.synchronize.protected_branches import protect_default_branch, unprotect_default_branch
from gitlab_ops_manager.synchronize.results import ProjectSynchronizationResult

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

# Project fields applied through the protected branches API instead of the project API.
BRANCH_PROTECTION_FIELDS = frozenset(
    {
        "default_branch_push_protected_access_level",
        "default_branch_merge_protected_access_level",
    }
)

# Project fields whose name in the GitLab API differs from the configuration file.
API_FIELD_NAMES: dict[str, str] = {
    "package_enabled": "packages_enabled",
    "printing_merge_requests_link_enabled": "printing_merge_request_link_enabled",
}


def build_project_attributes(project_spec: ProjectSpec) -> dict[str, Any]:
    """Build the full set of project attributes sent on create and update.

    Every field is always sent, so a create or an update is a full-state write
    rather than a sparse patch.
    """
    attributes: dict[str, Any] = {}
    for field, value in project_spec.model_dump(exclude={"name"} | BRANCH_PROTECTION_FIELDS).items():
        if isinstance(value, GitLabSettingEnum):
            value = value.value
        attributes[API_FIELD_NAMES.get(field, field)] = value
    return attributes


def decide_gitlab_project_sync_action(remote_state: Found | NotFound) -> SyncDecision:
    """Decide whether a project must be created or updated, based on its remote state."""
    if isinstance(remote_state, NotFound):
        return SyncDecision.CREATE
    return SyncDecision.UPDATE


async def apply_project_spec(project_spec: ProjectSpec, gitlab_client: GitLabClientBase, decision: SyncDecision) -> dict[str, Any]:
    """Create or update the project with every desired attribute.

    Raises:
        MutationError: If GitLab rejects the request.
    """
    attributes = build_project_attributes(project_spec)
    try:
        if decision == SyncDecision.CREATE:
            project = await gitlab_client.create_project(project_spec.name, attributes)
        else:
            project = await gitlab_client.update_project(project_spec.name, attributes)
    except (GitLabError, httpx.HTTPError) as exc:
        raise MutationError(f"{decision.value} project", project_spec.name, str(exc)) from exc
    return project if isinstance(project, dict) else {}


def _transition(project_name: str, state: ReconciliationState, **kwargs: Any) -> ReconciliationState:
    logger.debug("Project reconciliation state changed", project=project_name, state=state.value, **kwargs)
    return state


async def reconcile_project(
    project_spec: ProjectSpec,
    gitlab_client: GitLabClientBase,
    dry_run: bool = False,
) -> ProjectSynchronizationResult:
    """Converge a single GitLab project to its desired state.

    The project is probed, then created or updated with every desired
    attribute, then its default branch is unprotected and protected again with
    the desired access levels. The steps always run in this order and no step
    runs after one that failed, except that a failure to unprotect the branch
    still lets the protect step run.

    With dry_run set, the project is only probed and the result reports what
    would have been done.
    """
    name = project_spec.name
    state = _transition(name, ReconciliationState.INIT)

    remote_state: RemoteState = await probe_project(name, gitlab_client)
    state = _transition(name, ReconciliationState.PROBED, remote_state=type(remote_state).__name__)
    if isinstance(remote_state, ProbeError):
        state = _transition(name, ReconciliationState.FAILED)
        return ProjectSynchronizationResult(
            name,
            OutcomeKind.FAILED,
            detail=f"Error while querying for project: {remote_state.detail}",
            error_kind=ErrorKind.PROBE_ERROR,
        )

    decision = decide_gitlab_project_sync_action(remote_state)
    remote_id = remote_state.id if isinstance(remote_state, Found) else None
    if dry_run:
        logger.info("Dry run, not applying project specification", project=name, decision=decision.value)
        return ProjectSynchronizationResult(name, OutcomeKind.SKIPPED, detail=f"dry run: would {decision.value}", remote_id=remote_id)

    warnings: list[str] = []
    try:
        if decision == SyncDecision.CREATE:
            state = _transition(name, ReconciliationState.CREATING)
            logger.info("Project not found, creating it", project=name)
        else:
            state = _transition(name, ReconciliationState.UPDATING)
            logger.info("Project exists, updating it", project=name, project_id=remote_id)
        project = await apply_project_spec(project_spec, gitlab_client, decision)
        remote_id = project.get("id", remote_id)

        state = _transition(name, ReconciliationState.BRANCH_UNPROTECTING, branch=project_spec.default_branch)
        warning = await unprotect_default_branch(project_spec, gitlab_client)
        if warning is not None:
            warnings.append(warning)

        state = _transition(name, ReconciliationState.BRANCH_PROTECTING, branch=project_spec.default_branch)
        await protect_default_branch(project_spec, gitlab_client)
    except MutationError as exc:
        _transition(name, ReconciliationState.FAILED, failed_state=state.value)
        logger.error("Failed to apply project specification", project=name, step=exc.step, error=exc.message)
        return ProjectSynchronizationResult(
            name,
            OutcomeKind.FAILED,
            detail=str(exc),
            error_kind=ErrorKind.MUTATION_ERROR,
            remote_id=remote_id,
            warnings=warnings,
        )

    _transition(name, ReconciliationState.DONE)
    if decision == SyncDecision.CREATE:
        return ProjectSynchronizationResult(name, OutcomeKind.CREATED, detail="project created", remote_id=remote_id, warnings=warnings)
    return ProjectSynchronizationResult(name, OutcomeKind.UPDATED, detail="project updated", remote_id=remote_id, warnings=warnings)
