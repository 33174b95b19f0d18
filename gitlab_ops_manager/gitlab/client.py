"""Sets up the authenticated httpx client for the GitLab REST API."""

import httpx

from gitlab_ops_manager.utils.gitlab import build_api_url


def get_gitlab_client(gitlab_host: str, gitlab_token: str, timeout: float = 30.0) -> httpx.AsyncClient:
    """Returns an httpx client authenticated against the GitLab instance with a personal access token.

    Every request made through the client is bounded by ``timeout`` seconds.
    Raises RuntimeError if no host or token is provided.
    """
    if not gitlab_host:
        raise RuntimeError("GitLab connection requires a host in config.")
    if not gitlab_token:
        raise RuntimeError("GitLab authentication requires a token in config.")
    return httpx.AsyncClient(
        base_url=build_api_url(gitlab_host),
        headers={"PRIVATE-TOKEN": gitlab_token, "Accept": "application/json"},
        timeout=httpx.Timeout(timeout),
    )
