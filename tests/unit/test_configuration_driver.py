"""Unit tests for the configuration driver module."""

from unittest.mock import AsyncMock, patch

from gitlab_ops_manager.configuration import driver
from gitlab_ops_manager.configuration.models import SyncConfig
from gitlab_ops_manager.schemas.config_file import GitLabConnectionModel


def test_get_sync_config_returns_reconciled_config() -> None:
    """Test that get_sync_config passes every option through and returns the reconciled config."""
    fake_config = SyncConfig(
        debug=True,
        gitlab_host="gitlab.example.com",
        gitlab_token="secret",
        max_workers=2,
        request_timeout=15.0,
        dry_run=True,
    )
    file_gitlab = GitLabConnectionModel(host="file.example.com")
    with patch(
        "gitlab_ops_manager.configuration.reconcile.reconcile_sync_configuration",
        new=AsyncMock(return_value=fake_config),
    ) as mock_reconcile:
        result = driver.get_sync_config(
            debug=True,
            gitlab_host="gitlab.example.com",
            gitlab_token="secret",
            max_workers=2,
            request_timeout=15.0,
            dry_run=True,
            file_gitlab=file_gitlab,
        )
    mock_reconcile.assert_awaited_once_with(
        cli_debug=True,
        cli_gitlab_host="gitlab.example.com",
        cli_gitlab_token="secret",
        cli_max_workers=2,
        cli_request_timeout=15.0,
        cli_dry_run=True,
        file_gitlab=file_gitlab,
    )
    assert result == fake_config
