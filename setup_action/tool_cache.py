"""
Local tool cache.

Follows the directory layout of the hosted runner tool cache. Arch names
are the ones this step uses (amd64, ARM64), so entries are not shared with
other actions that key by x64/arm64::

    <root>/<tool>/<version>/<arch>/          cached files
    <root>/<tool>/<version>/<arch>.complete  marker written last
"""

import logging
import shutil
import time
import uuid
from pathlib import Path
from typing import Optional, Union

import requests

from .config import DOWNLOAD_TIMEOUT
from .errors import DownloadError

logger = logging.getLogger(__name__)


def clean_version(version: str) -> str:
    """Strip a leading "v" or "=" the way the runner cache does."""
    version = version.strip()
    return version.lstrip("=vV")


class ToolCache:
    """Directory store of tool binaries keyed by name, version and arch."""

    def __init__(self, root: Union[str, Path], temp_dir: Union[str, Path],
                 download_timeout: float = DOWNLOAD_TIMEOUT):
        """
        Initialize the tool cache.

        Args:
            root: Tool cache root (RUNNER_TOOL_CACHE on hosted runners)
            temp_dir: Directory for downloads (RUNNER_TEMP on hosted runners)
            download_timeout: Per-request download timeout in seconds
        """
        self.root = Path(root)
        self.temp_dir = Path(temp_dir)
        self.download_timeout = download_timeout

    def _entry_dir(self, tool: str, version: str, arch: str) -> Path:
        return self.root / tool / clean_version(version) / arch

    def _marker(self, tool: str, version: str, arch: str) -> Path:
        return self.root / tool / clean_version(version) / f"{arch}.complete"

    def find(self, tool: str, version: str, arch: str) -> Optional[Path]:
        """
        Look up a cached tool.

        Args:
            tool: Tool name
            version: Release tag or version
            arch: Runner architecture

        Returns:
            Path to the cached directory, or None on a miss
        """
        if not tool or not version:
            raise ValueError("tool and version are required")

        entry = self._entry_dir(tool, version, arch)
        if self._marker(tool, version, arch).exists() and entry.is_dir():
            logger.debug(f"Found tool in cache {tool} {version} {arch}")
            return entry

        logger.debug(f"Not found in cache: {tool} {version} {arch}")
        return None

    def download_tool(self, url: str, dest: Optional[Union[str, Path]] = None) -> Path:
        """
        Download a file to the temp directory.

        Args:
            url: URL to download
            dest: Target path (a fresh name under temp_dir if None)

        Returns:
            Path to the downloaded file

        Raises:
            DownloadError: If the request fails or returns an error status
        """
        dest_path = Path(dest) if dest else self.temp_dir / str(uuid.uuid4())
        dest_path.parent.mkdir(parents=True, exist_ok=True)
        if dest_path.exists():
            raise DownloadError(f"Destination file path {dest_path} already exists")

        logger.debug(f"Downloading {url} to {dest_path}")
        try:
            with requests.get(url, stream=True, timeout=self.download_timeout) as response:
                response.raise_for_status()
                with open(dest_path, "wb") as f:
                    for chunk in response.iter_content(chunk_size=8192):
                        if chunk:
                            f.write(chunk)
        except (requests.RequestException, OSError) as e:
            if dest_path.exists():
                dest_path.unlink()
            raise DownloadError(f"Failed to download {url}: {e}") from e

        logger.debug(f"Downloaded {dest_path.stat().st_size} bytes")
        return dest_path

    def cache_file(self, source: Union[str, Path], target_name: str, tool: str,
                   version: str, arch: str) -> Path:
        """
        Insert a single file into the cache.

        Any previous entry for the same key is replaced.

        Args:
            source: File to cache
            target_name: File name inside the cache entry
            tool: Tool name
            version: Release tag or version
            arch: Runner architecture

        Returns:
            Path to the cached directory
        """
        source = Path(source)
        if not source.is_file():
            raise FileNotFoundError(f"Source file not found: {source}")

        entry = self._entry_dir(tool, version, arch)
        marker = self._marker(tool, version, arch)

        logger.debug(f"Caching tool {tool} {version} {arch}")
        if marker.exists():
            marker.unlink()
        if entry.exists():
            shutil.rmtree(entry)
        entry.mkdir(parents=True)

        shutil.copy2(source, entry / target_name)
        marker.write_text(str(time.time()))
        return entry

    def clear(self, tool: Optional[str] = None) -> int:
        """
        Remove cached entries.

        Args:
            tool: Only clear this tool (everything if None)

        Returns:
            Number of entries removed
        """
        if not self.root.is_dir():
            return 0

        tool_dirs = [self.root / tool] if tool else [p for p in self.root.iterdir() if p.is_dir()]
        cleared = 0
        for tool_dir in tool_dirs:
            if not tool_dir.is_dir():
                continue
            cleared += sum(1 for _ in tool_dir.glob("*/*.complete"))
            shutil.rmtree(tool_dir)

        logger.info(f"Cleared {cleared} cached entries")
        return cleared
