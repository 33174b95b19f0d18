"""Fetches the current state of a project from GitLab."""

import httpx
import structlog

from gitlab_ops_manager.gitlab.abc import GitLabClientBase
from gitlab_ops_manager.gitlab.exceptions import GitLabError, GitLabNotFoundError
from gitlab_ops_manager.synchronize.models import Found, NotFound, ProbeError, RemoteState

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


async def probe_project(name: str, gitlab_client: GitLabClientBase) -> RemoteState:
    """Look up a project by its full path.

    Only the client's typed not-found signal yields NotFound. Every other
    failure, including timeouts and transport errors, yields ProbeError so that
    a transient failure never leads to an attempt to create the project.
    """
    try:
        project = await gitlab_client.get_project(name)
    except GitLabNotFoundError:
        logger.info("Project not found in GitLab", project=name)
        return NotFound()
    except GitLabError as exc:
        logger.error("Error while querying GitLab for project", project=name, error=str(exc))
        return ProbeError(detail=str(exc))
    except httpx.HTTPError as exc:
        detail = f"{type(exc).__name__}: {exc}"
        logger.error("Transport error while querying GitLab for project", project=name, error=detail)
        return ProbeError(detail=detail)

    if not isinstance(project, dict) or "id" not in project:
        logger.error("Malformed project response from GitLab", project=name, response=project)
        return ProbeError(detail=f"Malformed project response: {project!r}")

    logger.info("Project exists in GitLab", project=name, project_id=project["id"])
    return Found(
        id=project["id"],
        path_with_namespace=project.get("path_with_namespace"),
        default_branch=project.get("default_branch"),
    )
