"""Reconciles configuration between CLI arguments, environment variables and the configuration file."""

from gitlab_ops_manager.config import Settings
from gitlab_ops_manager.configuration.exceptions import (
    GitLabConnectionConfigurationUndefinedError,
    InvalidConfigurationElementError,
)
from gitlab_ops_manager.configuration.models import SyncConfig
from gitlab_ops_manager.schemas.config_file import GitLabConnectionModel


async def validate_gitlab_connection_configuration(
    gitlab_host: str | None,
    gitlab_token: str | None,
) -> tuple[str, str]:
    """Validates the GitLab connection configuration.

    Args:
        gitlab_host (str | None): The GitLab host.
        gitlab_token (str | None): The GitLab access token.

    Raises:
        GitLabConnectionConfigurationUndefinedError: If the host or the token is undefined.

    Returns:
        tuple[str, str]: The GitLab host and token.
    """
    missing_settings: list[dict[str, str]] = []
    if not gitlab_host:
        missing_settings.append(
            {
                "name": "GitLab host",
                "cli_name": "--gitlab-host",
                "env_name": "GITLAB_HOST",
                "file_key": "gitlab.host",
            }
        )
    if not gitlab_token:
        missing_settings.append(
            {
                "name": "GitLab token",
                "cli_name": "--gitlab-token",
                "env_name": "GITLAB_TOKEN",
                "file_key": "gitlab.token",
            }
        )
    if missing_settings:
        msg = "Incomplete GitLab connection configuration - missing settings include " + ", ".join(
            f"{setting['name']} (command line option {setting['cli_name']}, environment variable {setting['env_name']}, "
            f"configuration file key {setting['file_key']})"
            for setting in missing_settings
        )
        raise GitLabConnectionConfigurationUndefinedError(msg)
    return gitlab_host, gitlab_token  # type: ignore[return-value]


async def reconcile_sync_configuration(
    cli_debug: bool | None = None,
    cli_gitlab_host: str | None = None,
    cli_gitlab_token: str | None = None,
    cli_max_workers: int | None = None,
    cli_request_timeout: float | None = None,
    cli_dry_run: bool = False,
    file_gitlab: GitLabConnectionModel | None = None,
    settings: Settings | None = None,
) -> SyncConfig:
    """Reconciles the sync command configuration.

    Command line options take precedence over environment variables, which
    take precedence over the configuration file's 'gitlab' section.
    """
    if settings is None:
        settings = Settings()
    if file_gitlab is None:
        file_gitlab = GitLabConnectionModel()

    gitlab_host, gitlab_token = await validate_gitlab_connection_configuration(
        gitlab_host=cli_gitlab_host or settings.GITLAB_HOST or file_gitlab.host,
        gitlab_token=cli_gitlab_token or settings.GITLAB_TOKEN or file_gitlab.token,
    )

    max_workers = cli_max_workers if cli_max_workers is not None else settings.MAX_WORKERS
    if max_workers < 1:
        raise InvalidConfigurationElementError("maximum workers", "--max-workers", "MAX_WORKERS", max_workers, "must be at least 1")

    request_timeout = cli_request_timeout if cli_request_timeout is not None else settings.REQUEST_TIMEOUT
    if request_timeout <= 0:
        raise InvalidConfigurationElementError("request timeout", "--timeout", "REQUEST_TIMEOUT", request_timeout, "must be greater than 0")

    return SyncConfig(
        debug=cli_debug if cli_debug is not None else settings.DEBUG,
        gitlab_host=gitlab_host,
        gitlab_token=gitlab_token,
        max_workers=max_workers,
        request_timeout=request_timeout,
        dry_run=cli_dry_run,
    )
