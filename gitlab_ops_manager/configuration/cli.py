"""Defines the Command Line Interface (CLI) using Typer."""

import asyncio
from pathlib import Path

import typer
from dotenv import load_dotenv
from pydantic import ValidationError
from typer import Option
from typing_extensions import Annotated

from gitlab_ops_manager.configuration.driver import get_sync_config
from gitlab_ops_manager.configuration.exceptions import (
    GitLabConnectionConfigurationUndefinedError,
    InvalidConfigurationElementError,
)
from gitlab_ops_manager.processing.exceptions import InvalidConfigurationError, YAMLProcessingError
from gitlab_ops_manager.processing.yaml_processor import ConfigYAMLProcessor
from gitlab_ops_manager.schemas.config_file import ProjectsConfigModel
from gitlab_ops_manager.schemas.project import resolve_project_spec
from gitlab_ops_manager.synchronize.driver import run_sync_projects_workflow
from gitlab_ops_manager.synchronize.results import AllProjectSynchronizationResults
from gitlab_ops_manager.utils.structured_logging import configure_logging

load_dotenv()

typer_app = typer.Typer(pretty_exceptions_show_locals=False, help="Declaratively synchronize GitLab projects.")

ConfigPathOption = Annotated[
    Path,
    Option("--config", "-c", envvar="CONFIG_PATH", help="Path to the YAML configuration file."),
]


@typer_app.callback()
def main_callback(
    ctx: typer.Context,
    debug: Annotated[bool, Option(envvar="DEBUG", help="Enable debug mode.")] = False,
) -> None:
    """Configure logging for every command."""
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    configure_logging(debug=debug)


def load_configuration_file(config_path: Path) -> ProjectsConfigModel:
    """Load the configuration file, exiting with an error message if it is unusable."""
    if not config_path.exists():
        typer.echo(f"Configuration file not found: {config_path.absolute()}", err=True)
        raise typer.Exit(1)
    try:
        return ConfigYAMLProcessor().load_config(config_path)
    except YAMLProcessingError as exc:
        typer.echo("Error(s) encountered while processing YAML:", err=True)
        for err in exc.errors:
            typer.echo(str(err), err=True)
        raise typer.Exit(1) from exc


def echo_run_report(results: AllProjectSynchronizationResults) -> None:
    """Print one line per project and a summary of the run."""
    for result in results.results:
        line = f"{result.name}: {result.outcome.value}"
        if result.detail:
            line += f" - {result.detail}"
        typer.echo(line, err=result.failed)
        for warning in result.warnings:
            typer.echo(f"  warning: {warning}")

    typer.echo("")
    typer.echo("=" * 70)
    typer.echo("SYNC SUMMARY")
    typer.echo("=" * 70)
    typer.echo(f"Projects processed: {len(results.results)}")
    for kind, count in results.counts.items():
        typer.echo(f"  {kind.value.capitalize()}: {count}")
    typer.echo("=" * 70)


@typer_app.command(name="sync")
def sync_cli(
    ctx: typer.Context,
    config_path: ConfigPathOption = Path("config.yaml"),
    gitlab_host: Annotated[str | None, Option(help="GitLab host (also GITLAB_HOST env var or gitlab.host in the config file).")] = None,
    gitlab_token: Annotated[
        str | None, Option(help="GitLab access token (also GITLAB_TOKEN env var or gitlab.token in the config file).")
    ] = None,
    max_workers: Annotated[int | None, Option(help="Number of projects synchronized concurrently (also MAX_WORKERS env var).")] = None,
    timeout: Annotated[float | None, Option(help="Timeout in seconds for each GitLab API call (also REQUEST_TIMEOUT env var).")] = None,
    dry_run: Annotated[bool, Option("--dry-run", help="Only report whether each project would be created or updated.")] = False,
) -> None:
    """Create or update every project in the configuration file so GitLab matches it."""
    config = load_configuration_file(config_path)
    typer.echo(f"Loaded {len(config.projects)} projects from {config_path.absolute()}")

    try:
        sync_config = get_sync_config(
            debug=ctx.obj["debug"],
            gitlab_host=gitlab_host,
            gitlab_token=gitlab_token,
            max_workers=max_workers,
            request_timeout=timeout,
            dry_run=dry_run,
            file_gitlab=config.gitlab,
        )
    except (GitLabConnectionConfigurationUndefinedError, InvalidConfigurationElementError) as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc
    except ValidationError as exc:
        typer.echo(f"Invalid environment settings:\n{exc}", err=True)
        raise typer.Exit(1) from exc

    if sync_config.dry_run:
        typer.echo("Dry run is enabled - no changes will be made to GitLab")

    results = asyncio.run(run_sync_projects_workflow(sync_config, config.projects))
    echo_run_report(results)
    raise typer.Exit(results.exit_code)


@typer_app.command(name="validate")
def validate_cli(config_path: ConfigPathOption = Path("config.yaml")) -> None:
    """Check that every project in the configuration file resolves to a complete specification."""
    config = load_configuration_file(config_path)
    invalid_count = 0
    seen_names: set[str] = set()
    for index, project_record in enumerate(config.projects):
        try:
            project_spec = resolve_project_spec(project_record)
        except InvalidConfigurationError as exc:
            invalid_count += 1
            typer.echo(f"Project #{index}: {exc}", err=True)
            continue
        if project_spec.name.lower() in seen_names:
            typer.echo(f"{project_spec.name}: duplicate project name, only the first entry is synchronized")
        seen_names.add(project_spec.name.lower())
        typer.echo(f"{project_spec.name}: ok")

    if invalid_count:
        typer.echo(f"{invalid_count} of {len(config.projects)} projects are invalid", err=True)
        raise typer.Exit(1)
    typer.echo(f"All {len(config.projects)} projects are valid")


if __name__ == "__main__":
    typer_app()
