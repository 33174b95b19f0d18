"""Contains utility functions for GitLab interactions."""

from urllib.parse import quote


def normalize_project_path(name: str) -> str:
    """Strips surrounding whitespace and slashes from a project path, as GitLab ignores them."""
    return name.strip().strip("/")


def split_project_path(name: str) -> tuple[str | None, str]:
    """Splits a project path into its namespace (if any) and the project's own path."""
    name = normalize_project_path(name)
    if not name:
        raise ValueError("Project path must not be empty.")
    namespace, _, path = name.rpartition("/")
    return namespace or None, path


def encode_path_parameter(value: str) -> str:
    """URL-encodes a project path, namespace path or branch name for use as a single path parameter."""
    return quote(value.strip("/"), safe="")


def build_api_url(host: str) -> str:
    """Builds the GitLab REST v4 base URL from a configured host.

    A bare host name (``gitlab.example.com``) is assumed to be served over
    HTTPS. A host given with an explicit scheme keeps it.
    """
    host = host.strip().rstrip("/")
    if not host:
        raise ValueError("GitLab host must not be empty.")
    if "://" not in host:
        host = f"https://{host}"
    if host.endswith("/api/v4"):
        return host
    return f"{host}/api/v4"
