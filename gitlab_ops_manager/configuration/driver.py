"""Synchronous driver for configuration reconciliation for the CLI entry point."""

import asyncio

from gitlab_ops_manager.configuration import reconcile
from gitlab_ops_manager.configuration.models import SyncConfig
from gitlab_ops_manager.schemas.config_file import GitLabConnectionModel


def get_sync_config(
    debug: bool | None = None,
    gitlab_host: str | None = None,
    gitlab_token: str | None = None,
    max_workers: int | None = None,
    request_timeout: float | None = None,
    dry_run: bool = False,
    file_gitlab: GitLabConnectionModel | None = None,
) -> SyncConfig:
    """Synchronously get the reconciled sync configuration."""
    return asyncio.run(
        reconcile.reconcile_sync_configuration(
            cli_debug=debug,
            cli_gitlab_host=gitlab_host,
            cli_gitlab_token=gitlab_token,
            cli_max_workers=max_workers,
            cli_request_timeout=request_timeout,
            cli_dry_run=dry_run,
            file_gitlab=file_gitlab,
        )
    )
