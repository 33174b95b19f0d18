"""Reconciled configuration between CLI arguments, environment variables and the configuration file."""

from dataclasses import dataclass


@dataclass
class SyncConfig:
    """Configuration class for the sync command."""

    debug: bool
    gitlab_host: str
    gitlab_token: str
    max_workers: int
    request_timeout: float
    dry_run: bool
