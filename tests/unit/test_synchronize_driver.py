"""Contains unit tests for the batch synchronization driver."""

import asyncio
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from _pytest.logging import LogCaptureFixture

from gitlab_ops_manager.configuration.models import SyncConfig
from gitlab_ops_manager.gitlab.exceptions import GitLabRequestError
from gitlab_ops_manager.synchronize.driver import run_sync_projects_workflow, sync_gitlab_project, sync_gitlab_projects
from gitlab_ops_manager.synchronize.models import ErrorKind, OutcomeKind
from tests.unit.fakes import FakeGitLabClient


@pytest.mark.asyncio
async def test_batch_continues_after_invalid_record(fake_gitlab_client: FakeGitLabClient) -> None:
    """Test that an invalid record fails on its own and the next record is still reconciled."""
    records: list[dict[str, Any]] = [
        {"name": "alpha", "visibility": "Secret"},
        {"name": "beta"},
    ]
    results = await sync_gitlab_projects(records, fake_gitlab_client)

    assert [result.name for result in results.results] == ["alpha", "beta"]
    assert results.results[0].outcome == OutcomeKind.FAILED
    assert results.results[0].error_kind == ErrorKind.INVALID_CONFIGURATION
    assert "visibility" in results.results[0].detail
    assert results.results[1].outcome == OutcomeKind.CREATED
    assert fake_gitlab_client.calls_for("alpha") == []


@pytest.mark.asyncio
async def test_batch_continues_after_probe_error(fake_gitlab_client: FakeGitLabClient) -> None:
    """Test that one project failing its lookup does not prevent the others from being reconciled."""
    fake_gitlab_client.projects["beta"] = {"id": 7}
    fake_gitlab_client.fail("get_project", "alpha", GitLabRequestError(503, "Service Unavailable"))
    results = await sync_gitlab_projects([{"name": "alpha"}, {"name": "beta"}, {"name": "gamma"}], fake_gitlab_client)

    assert [result.outcome for result in results.results] == [OutcomeKind.FAILED, OutcomeKind.UPDATED, OutcomeKind.CREATED]
    assert results.results[0].error_kind == ErrorKind.PROBE_ERROR
    assert results.has_failures is True
    assert results.exit_code == 1


@pytest.mark.asyncio
async def test_missing_name_is_reported_by_position(fake_gitlab_client: FakeGitLabClient) -> None:
    """Test that a record without a name is reported with its position in the file."""
    results = await sync_gitlab_projects([{"name": "alpha"}, {"mirror": True}], fake_gitlab_client)

    assert results.results[1].name == "<project #1>"
    assert results.results[1].outcome == OutcomeKind.FAILED
    assert results.results[1].error_kind == ErrorKind.INVALID_CONFIGURATION


@pytest.mark.asyncio
async def test_duplicate_project_is_skipped(fake_gitlab_client: FakeGitLabClient, caplog: LogCaptureFixture) -> None:
    """Test that a project named twice is reconciled once and the repeat is skipped."""
    results = await sync_gitlab_projects([{"name": "alpha"}, {"name": "alpha", "mirror": True}], fake_gitlab_client)

    assert [result.outcome for result in results.results] == [OutcomeKind.CREATED, OutcomeKind.SKIPPED]
    assert "duplicate" in results.results[1].detail
    assert fake_gitlab_client.calls_for("alpha").count("get_project") == 1
    assert fake_gitlab_client.projects["alpha"]["mirror"] is False
    assert "Duplicate project in configuration will be skipped" in caplog.text


@pytest.mark.asyncio
async def test_unexpected_error_fails_only_that_project(fake_gitlab_client: FakeGitLabClient) -> None:
    """Test that an unexpected exception is turned into a failed result and the batch goes on."""
    fake_gitlab_client.fail("get_project", "alpha", RuntimeError("boom"))
    results = await sync_gitlab_projects([{"name": "alpha"}, {"name": "beta"}], fake_gitlab_client)

    assert results.results[0].outcome == OutcomeKind.FAILED
    assert results.results[0].error_kind == ErrorKind.UNEXPECTED_ERROR
    assert "boom" in results.results[0].detail
    assert results.results[1].outcome == OutcomeKind.CREATED


@pytest.mark.asyncio
async def test_sync_gitlab_project_single_record(fake_gitlab_client: FakeGitLabClient) -> None:
    """Test that a single record is resolved and reconciled."""
    result = await sync_gitlab_project({"name": "alpha"}, 0, fake_gitlab_client)
    assert result.outcome == OutcomeKind.CREATED
    assert result.remote_id == 101


@pytest.mark.asyncio
async def test_dry_run_is_passed_to_every_project(fake_gitlab_client: FakeGitLabClient) -> None:
    """Test that a dry run never mutates GitLab."""
    fake_gitlab_client.projects["beta"] = {"id": 7}
    results = await sync_gitlab_projects([{"name": "alpha"}, {"name": "beta"}], fake_gitlab_client, dry_run=True)

    assert [result.outcome for result in results.results] == [OutcomeKind.SKIPPED, OutcomeKind.SKIPPED]
    assert [call[0] for call in fake_gitlab_client.calls] == ["get_project", "get_project"]
    assert results.exit_code == 0


@pytest.mark.asyncio
async def test_sequential_batch_runs_in_input_order(fake_gitlab_client: FakeGitLabClient) -> None:
    """Test that with a single worker, each project is fully reconciled before the next one starts."""
    await sync_gitlab_projects([{"name": "alpha"}, {"name": "beta"}], fake_gitlab_client)

    names = [call[1] for call in fake_gitlab_client.calls]
    assert names == ["alpha"] * 4 + ["beta"] * 4


@pytest.mark.asyncio
async def test_concurrent_batch_keeps_input_order_and_project_sequencing() -> None:
    """Test that concurrent workers still return results in input order and keep each project's steps in order."""
    client = FakeGitLabClient()
    original_get_project = client.get_project
    delays = {"alpha": 0.03, "beta": 0.0, "gamma": 0.01}

    async def slow_get_project(name: str) -> dict[str, Any]:
        await asyncio.sleep(delays[name])
        return await original_get_project(name)

    client.get_project = slow_get_project  # type: ignore[method-assign]
    results = await sync_gitlab_projects([{"name": name} for name in delays], client, max_workers=3)

    assert [result.name for result in results.results] == ["alpha", "beta", "gamma"]
    assert all(result.outcome == OutcomeKind.CREATED for result in results.results)
    for name in delays:
        assert client.calls_for(name) == ["get_project", "create_project", "unprotect_branch", "protect_branch"]


@pytest.mark.asyncio
async def test_concurrency_is_bounded_by_max_workers() -> None:
    """Test that no more than max_workers projects are reconciled at the same time."""
    client = FakeGitLabClient()
    original_get_project = client.get_project
    in_flight = 0
    peak = 0

    async def tracking_get_project(name: str) -> dict[str, Any]:
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.01)
        in_flight -= 1
        return await original_get_project(name)

    client.get_project = tracking_get_project  # type: ignore[method-assign]
    results = await sync_gitlab_projects([{"name": f"project-{index}"} for index in range(6)], client, max_workers=2)

    assert len(results.results) == 6
    assert peak == 2


@pytest.mark.asyncio
async def test_max_workers_must_be_positive(fake_gitlab_client: FakeGitLabClient) -> None:
    """Test that a worker count below one is rejected."""
    with pytest.raises(ValueError, match="max_workers"):
        await sync_gitlab_projects([{"name": "alpha"}], fake_gitlab_client, max_workers=0)


@pytest.mark.asyncio
async def test_empty_batch(fake_gitlab_client: FakeGitLabClient) -> None:
    """Test that an empty configuration yields an empty, successful report."""
    results = await sync_gitlab_projects([], fake_gitlab_client)
    assert results.results == []
    assert results.exit_code == 0


@pytest.mark.asyncio
async def test_run_sync_projects_workflow() -> None:
    """Test that the workflow connects with the resolved configuration and closes the connection."""
    sync_config = SyncConfig(
        debug=False,
        gitlab_host="gitlab.example.com",
        gitlab_token="secret",
        max_workers=2,
        request_timeout=5.0,
        dry_run=False,
    )
    fake_client = FakeGitLabClient()
    adapter = MagicMock()
    adapter.__aenter__ = AsyncMock(return_value=adapter)
    adapter.__aexit__ = AsyncMock(return_value=None)

    async def sync_with_fake_client(records: Any, client: Any, **kwargs: Any) -> Any:
        return await sync_gitlab_projects(records, fake_client, **kwargs)

    with (
        patch("gitlab_ops_manager.synchronize.driver.GitLabAdapter.create", new=AsyncMock(return_value=adapter)) as mock_create,
        patch("gitlab_ops_manager.synchronize.driver.sync_gitlab_projects", new=AsyncMock(side_effect=sync_with_fake_client)) as mock_sync,
    ):
        results = await run_sync_projects_workflow(sync_config, [{"name": "alpha"}])

    mock_create.assert_awaited_once_with(gitlab_host="gitlab.example.com", gitlab_token="secret", timeout=5.0)
    mock_sync.assert_awaited_once()
    assert mock_sync.await_args.kwargs == {"max_workers": 2, "dry_run": False}
    adapter.__aexit__.assert_awaited_once()
    assert results.counts[OutcomeKind.CREATED] == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "duplicate_name",
    [
        pytest.param("group/alpha/", id="trailing slash"),
        pytest.param(" /group/alpha", id="leading slash and space"),
        pytest.param("Group/Alpha", id="different case"),
    ],
)
async def test_duplicate_project_paths_are_normalized(fake_gitlab_client: FakeGitLabClient, duplicate_name: str) -> None:
    """Test that paths naming the same GitLab project are never reconciled twice, even concurrently."""
    results = await sync_gitlab_projects([{"name": "group/alpha"}, {"name": duplicate_name}], fake_gitlab_client, max_workers=2)

    assert [result.outcome for result in results.results] == [OutcomeKind.CREATED, OutcomeKind.SKIPPED]
    assert "duplicate" in results.results[1].detail
    assert [call[0] for call in fake_gitlab_client.calls].count("get_project") == 1
