"""Contains synchronization logic for the protection of a project's default branch."""

import httpx
import structlog

from gitlab_ops_manager.gitlab.abc import GitLabClientBase
from gitlab_ops_manager.gitlab.exceptions import GitLabError, GitLabNotFoundError
from gitlab_ops_manager.schemas.project import ProjectSpec
from gitlab_ops_manager.synchronize.exceptions import MutationError

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


async def unprotect_default_branch(project_spec: ProjectSpec, gitlab_client: GitLabClientBase) -> str | None:
    """Remove any existing protection rule from the project's default branch.

    GitLab refuses to protect a branch that is already protected, so this
    always runs before the branch is (re)protected. A failure here does not
    stop the protect step: a missing rule is expected and only logged, any
    other failure is returned as a warning message for the run report.
    """
    branch = project_spec.default_branch
    try:
        await gitlab_client.unprotect_branch(project_spec.name, branch)
    except GitLabNotFoundError:
        logger.info("Default branch has no protection rule to remove", project=project_spec.name, branch=branch)
        return None
    except (GitLabError, httpx.HTTPError) as exc:
        warning = f"Failed to unprotect branch {branch}: {exc}"
        logger.warning(
            "Failed to unprotect default branch, attempting to protect it anyway",
            project=project_spec.name,
            branch=branch,
            error=str(exc),
        )
        return warning
    logger.info("Removed protection rule from default branch", project=project_spec.name, branch=branch)
    return None


async def protect_default_branch(project_spec: ProjectSpec, gitlab_client: GitLabClientBase) -> None:
    """Protect the project's default branch with the desired push and merge access levels.

    Raises:
        MutationError: If GitLab rejects the protection rule.
    """
    branch = project_spec.default_branch
    push_level = project_spec.default_branch_push_protected_access_level
    merge_level = project_spec.default_branch_merge_protected_access_level
    try:
        await gitlab_client.protect_branch(project_spec.name, branch, push_level, merge_level)
    except (GitLabError, httpx.HTTPError) as exc:
        raise MutationError(f"protect branch {branch}", project_spec.name, str(exc)) from exc
    logger.info(
        "Protected default branch",
        project=project_spec.name,
        branch=branch,
        push_access_level=push_level.config_name,
        merge_access_level=merge_level.config_name,
    )
