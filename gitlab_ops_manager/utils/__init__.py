"""Utility modules for shared functionality."""

from .gitlab import build_api_url, encode_path_parameter, normalize_project_path, split_project_path

__all__ = [
    "build_api_url",
    "encode_path_parameter",
    "normalize_project_path",
    "split_project_path",
]
