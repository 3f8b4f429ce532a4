"""
Cache-or-download installer for the configured tool.

ToolInstaller restores the tool from the tool cache when it is there and
otherwise downloads the release asset, unpacks the binary and caches it.
"""

import hashlib
import logging
import os
import subprocess
import tempfile
from pathlib import Path
from typing import Mapping, Optional

from .errors import ChecksumError, DownloadError, InvocationError, ToolNotFoundError
from .runner_platform import RunnerPlatform
from .tool import ToolSpec, extract_binary
from .tool_cache import ToolCache
from .versions import latest_version

logger = logging.getLogger(__name__)


def calculate_sha256(file_path: Path) -> str:
    """Calculate the SHA256 hex digest of a file."""
    hash_sha256 = hashlib.sha256()
    with open(file_path, "rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            hash_sha256.update(chunk)
    return hash_sha256.hexdigest()


class ToolInstaller:
    """Installs one tool into the tool cache and runs it."""

    def __init__(self, tool: ToolSpec, cache: ToolCache,
                 env: Optional[Mapping[str, str]] = None):
        """
        Initialize the installer.

        Args:
            tool: Tool to install
            cache: Tool cache to restore from and insert into
            env: Environment used for platform detection (os.environ if None)
        """
        self.tool = tool
        self.cache = cache
        self.env = env

    @property
    def platform(self) -> RunnerPlatform:
        return RunnerPlatform.detect(self.env)

    def binary_file_name(self, platform: RunnerPlatform) -> str:
        return f"{self.tool.name}{platform.exe_suffix}"

    def verify_checksum(self, file_path: Path, version: str, platform: RunnerPlatform) -> None:
        """
        Check a download against its pinned checksum, if one is configured.

        Raises:
            ChecksumError: If the digests differ
        """
        expected = self.tool.expected_checksum(version, platform.os, platform.arch)
        if not expected:
            logger.debug(f"No checksum pinned for {self.tool.name} {version} {platform.os}-{platform.arch}")
            return

        actual = calculate_sha256(file_path)
        if actual != expected.lower():
            raise ChecksumError(
                f"Checksum mismatch for {self.tool.name} {version}: "
                f"expected {expected}, got {actual}"
            )
        logger.debug(f"Checksum validation passed for {file_path}")

    def download(self, version: str) -> Path:
        """
        Make the tool available in the cache.

        Args:
            version: Release tag (latest release if empty)

        Returns:
            Path to the cached directory containing the binary

        Raises:
            UnsupportedPlatformError: If the runner OS is not supported
            DownloadError: If the download or checksum check fails
            ExtractionError: If the binary cannot be extracted
            ToolNotFoundError: If the cache misses right after insertion
        """
        if not version:
            version = latest_version(self.tool.repository, self.tool.name, self.tool.default_version)

        platform = self.platform
        binary_file_name = self.binary_file_name(platform)
        url = self.tool.download_url(version, platform.os, platform.arch)

        cached_tool_path = self.cache.find(self.tool.name, version, platform.arch)
        if cached_tool_path:
            logger.info(f"Restoring '{version}' from cache")
            return cached_tool_path

        logger.info(f"Downloading '{version}' from '{url}'")
        try:
            download_path = self.cache.download_tool(url)
        except DownloadError as e:
            raise DownloadError(
                f"Failed to download {self.tool.name} from location {url}. Error: {e}"
            ) from e

        with tempfile.TemporaryDirectory(dir=self.cache.temp_dir) as work_dir:
            try:
                self.verify_checksum(download_path, version, platform)
                extracted_path = extract_binary(download_path, binary_file_name, Path(work_dir) / "extract")
                os.chmod(extracted_path, 0o777)
                self.cache.cache_file(
                    extracted_path, binary_file_name, self.tool.name, version, platform.arch
                )
            finally:
                if download_path.exists():
                    download_path.unlink()

        cached_tool_path = self.cache.find(self.tool.name, version, platform.arch)
        if not cached_tool_path:
            raise ToolNotFoundError(
                f"{binary_file_name} executable not found in tool cache {self.cache.root}"
            )

        return cached_tool_path

    def invoke(self, cached_path: Path) -> int:
        """
        Run the installed tool with its version arguments.

        Args:
            cached_path: Cached directory returned by download()

        Returns:
            The tool's exit code (always 0)

        Raises:
            InvocationError: If the tool cannot be launched or exits non-zero
        """
        binary_path = Path(cached_path) / self.binary_file_name(self.platform)
        cmd = [str(binary_path)] + list(self.tool.version_args)
        logger.info(f"[command]{' '.join(cmd)}")

        try:
            result = subprocess.run(cmd, check=False)
        except OSError as e:
            raise InvocationError(f"Unable to run {binary_path}: {e}") from e

        if result.returncode != 0:
            raise InvocationError(
                f"The process '{binary_path}' failed with exit code {result.returncode}"
            )
        return result.returncode
