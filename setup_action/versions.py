"""
Version resolution.

Turns the user supplied ``version`` input into a concrete release tag:
``stable`` means the pinned default, ``latest`` asks GitHub for the newest
release, anything else is used as a tag with a ``v`` prefix.
"""

import logging
from typing import Callable, Optional

import requests

from .config import API_TIMEOUT
from .tool import GITHUB_URL, ToolSpec

logger = logging.getLogger(__name__)


def latest_version(github_repo: str, tool_name: str, stable_version: str,
                   timeout: float = API_TIMEOUT) -> str:
    """
    Get the latest version of the tool from GitHub releases.

    Args:
        github_repo: The GitHub repository in the format 'owner/repo'
        tool_name: The name of the tool
        stable_version: Version to fall back to if the lookup fails
        timeout: Request timeout in seconds

    Returns:
        The latest release tag, or stable_version on any failure
    """
    url = f"{GITHUB_URL}/{github_repo}/releases/latest"

    try:
        response = requests.get(url, headers={"Accept": "application/json"}, timeout=timeout)
        tag_name = None
        if response.status_code == 200:
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict):
                tag_name = body.get("tag_name")

        if not tag_name or not str(tag_name).strip():
            logger.warning(
                f"Cannot get the latest {tool_name} info from {url}. "
                f"Invalid response: status {response.status_code}. "
                f"Using default version {stable_version}."
            )
            return stable_version

        return str(tag_name).strip()

    except requests.RequestException as e:
        logger.warning(
            f"Cannot get the latest {tool_name} info from {url}. "
            f"Error {e}. Using default version {stable_version}."
        )

    return stable_version


def resolve_version(requested: str, tool: ToolSpec,
                    fetch_latest: Optional[Callable[[str, str, str], str]] = None) -> str:
    """
    Resolve a version input to a release tag.

    Args:
        requested: Value of the version input
        tool: Tool being installed
        fetch_latest: Latest-release lookup (latest_version if None)

    Returns:
        Concrete release tag
    """
    fetch_latest = fetch_latest or latest_version
    version = (requested or "").strip()
    lowered = version.lower()

    if lowered == "stable":
        return tool.default_version
    if lowered in ("latest", ""):
        return fetch_latest(tool.repository, tool.name, tool.default_version)
    if not lowered.startswith("v"):
        return f"v{version}"
    return version
