"""Utility functions for integration tests."""

import subprocess
import sys
import uuid
from pathlib import Path
from typing import Any

from ruamel.yaml import YAML


def get_cli_with_starting_args() -> list[str]:
    """Get the command that runs the gitlab-ops-manager CLI with the current interpreter."""
    return [sys.executable, "-m", "gitlab_ops_manager.configuration.cli"]


def run_cli(args: list[str]) -> subprocess.CompletedProcess[str]:
    """Run the CLI as a subprocess and capture its output."""
    complete_command = get_cli_with_starting_args() + args
    print(f"Running command: {' '.join(complete_command)}")
    result = subprocess.run(complete_command, capture_output=True, text=True)
    print(f"Command result: {result.returncode}")
    print(f"Command stdout: {result.stdout}")
    print(f"Command stderr: {result.stderr}")
    return result


def write_config_file(directory: Path, projects: list[dict[str, Any]]) -> Path:
    """Write a configuration file with the given projects and return its path."""
    path = directory / "config.yaml"
    yaml = YAML(typ="safe")
    yaml.default_flow_style = False
    with open(path, "w", encoding="utf-8") as f:
        yaml.dump({"projects": projects}, f)
    return path


def generate_unique_project_path(namespace: str, prefix: str = "integration-test") -> str:
    """Generate a unique project path inside the given namespace."""
    return f"{namespace}/{prefix}-{uuid.uuid4().hex[:12]}"
