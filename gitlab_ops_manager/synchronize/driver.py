"""Orchestrates the synchronization of GitLab projects."""

import asyncio
import time
from typing import Any, Mapping, Sequence

import structlog

from gitlab_ops_manager.configuration.models import SyncConfig
from gitlab_ops_manager.gitlab.abc import GitLabClientBase
from gitlab_ops_manager.gitlab.adapter import GitLabAdapter
from gitlab_ops_manager.processing.exceptions import InvalidConfigurationError
from gitlab_ops_manager.schemas.project import resolve_project_spec
from gitlab_ops_manager.synchronize.models import ErrorKind, OutcomeKind
from gitlab_ops_manager.synchronize.projects import reconcile_project
from gitlab_ops_manager.synchronize.results import AllProjectSynchronizationResults, ProjectSynchronizationResult
from gitlab_ops_manager.utils.gitlab import normalize_project_path

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def _record_name(project_record: Mapping[str, Any], index: int) -> str:
    name = project_record.get("name")
    if isinstance(name, str) and normalize_project_path(name):
        return normalize_project_path(name)
    return f"<project #{index}>"


def _log_result(result: ProjectSynchronizationResult) -> None:
    if result.failed:
        logger.error(
            "Project synchronization failed",
            project=result.name,
            outcome=result.outcome.value,
            error_kind=result.error_kind.value if result.error_kind else None,
            detail=result.detail,
        )
    else:
        logger.info(
            "Project synchronized",
            project=result.name,
            outcome=result.outcome.value,
            detail=result.detail,
            remote_id=result.remote_id,
            warnings=result.warnings,
        )


async def sync_gitlab_project(
    project_record: Mapping[str, Any],
    index: int,
    gitlab_client: GitLabClientBase,
    dry_run: bool = False,
) -> ProjectSynchronizationResult:
    """Resolve and reconcile one desired project, turning every error into a failed result."""
    name = _record_name(project_record, index)
    try:
        project_spec = resolve_project_spec(project_record)
    except InvalidConfigurationError as exc:
        result = ProjectSynchronizationResult(name, OutcomeKind.FAILED, detail=str(exc), error_kind=ErrorKind.INVALID_CONFIGURATION)
        _log_result(result)
        return result

    try:
        result = await reconcile_project(project_spec, gitlab_client, dry_run=dry_run)
    except Exception as exc:
        logger.exception("Unexpected error while synchronizing project", project=name)
        result = ProjectSynchronizationResult(
            name,
            OutcomeKind.FAILED,
            detail=f"Unexpected error: {exc!r}",
            error_kind=ErrorKind.UNEXPECTED_ERROR,
        )
    _log_result(result)
    return result


async def sync_gitlab_projects(
    project_records: Sequence[Mapping[str, Any]],
    gitlab_client: GitLabClientBase,
    max_workers: int = 1,
    dry_run: bool = False,
) -> AllProjectSynchronizationResults:
    """For each desired project, create or update it in GitLab and collect the outcomes.

    Projects are reconciled in input order, one at a time by default or at
    most ``max_workers`` at a time. One project's failure never prevents the
    others from being reconciled. A record repeating the name of an earlier
    record is skipped, so a project is never reconciled twice in one run.
    Results are returned in input order.
    """
    if max_workers < 1:
        raise ValueError("max_workers must be at least 1")

    results: list[ProjectSynchronizationResult | None] = [None] * len(project_records)
    pending: list[tuple[int, Mapping[str, Any]]] = []
    seen_names: set[str] = set()
    for index, project_record in enumerate(project_records):
        name = _record_name(project_record, index)
        # GitLab project paths are case-insensitive.
        name_key = name.lower()
        if name_key in seen_names:
            logger.warning("Duplicate project in configuration will be skipped", project=name, project_index=index)
            skipped = ProjectSynchronizationResult(name, OutcomeKind.SKIPPED, detail="duplicate project name, already synchronized in this run")
            _log_result(skipped)
            results[index] = skipped
            continue
        seen_names.add(name_key)
        pending.append((index, project_record))

    if max_workers == 1:
        for index, project_record in pending:
            results[index] = await sync_gitlab_project(project_record, index, gitlab_client, dry_run=dry_run)
    else:
        semaphore = asyncio.Semaphore(max_workers)

        async def run_one(index: int, project_record: Mapping[str, Any]) -> ProjectSynchronizationResult:
            async with semaphore:
                return await sync_gitlab_project(project_record, index, gitlab_client, dry_run=dry_run)

        outcomes = await asyncio.gather(*(run_one(index, project_record) for index, project_record in pending))
        for (index, _), result in zip(pending, outcomes):
            results[index] = result

    return AllProjectSynchronizationResults([result for result in results if result is not None])


async def run_sync_projects_workflow(sync_config: SyncConfig, project_records: Sequence[Mapping[str, Any]]) -> AllProjectSynchronizationResults:
    """Run the sync-projects workflow: connect to GitLab and converge every desired project."""
    gitlab_adapter = await GitLabAdapter.create(
        gitlab_host=sync_config.gitlab_host,
        gitlab_token=sync_config.gitlab_token,
        timeout=sync_config.request_timeout,
    )
    start_time = time.time()
    logger.info(
        "Processing projects",
        start_time=start_time,
        desired_project_count=len(project_records),
        max_workers=sync_config.max_workers,
        dry_run=sync_config.dry_run,
    )
    async with gitlab_adapter:
        results = await sync_gitlab_projects(
            project_records,
            gitlab_adapter,
            max_workers=sync_config.max_workers,
            dry_run=sync_config.dry_run,
        )
    end_time = time.time()
    logger.info(
        "Processed projects",
        start_time=start_time,
        end_time=end_time,
        duration=round(end_time - start_time, 2),
        **{f"{kind.value}_count": count for kind, count in results.counts.items()},
    )
    return results
