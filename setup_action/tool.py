"""
Tool description and release artifact handling.

A ToolSpec describes the binary being installed: where its releases live,
how its release assets are named and how to ask it for its version. Specs
are loaded from YAML so one code path serves every tool.
"""

import logging
import os
import tarfile
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

import yaml

from .errors import ConfigurationError, ExtractionError

logger = logging.getLogger(__name__)

GITHUB_URL = "https://github.com"
DEFAULT_CONFIG_PATH = Path(__file__).parent / "tool.yaml"


@dataclass
class ToolSpec:
    """Description of a tool published as GitHub release assets."""
    name: str
    repository: str
    default_version: str
    asset_template: str
    version_args: List[str] = field(default_factory=lambda: ["--version"])
    arch_aliases: Dict[str, str] = field(default_factory=dict)
    checksums: Dict[str, Dict[str, str]] = field(default_factory=dict)

    def asset_name(self, version: str, os_name: str, arch: str) -> str:
        """
        Build the release asset file name for a version and platform.

        Template fields: tool, version, bare_version, os, arch, ext, archive.
        """
        try:
            return self.asset_template.format(
                tool=self.name,
                version=version,
                bare_version=version[1:] if version.startswith("v") else version,
                os=os_name,
                arch=self.arch_aliases.get(arch, arch),
                ext=".exe" if os_name == "windows" else "",
                archive="zip" if os_name == "windows" else "tar.gz",
            )
        except (KeyError, IndexError) as e:
            raise ConfigurationError(
                f"Invalid asset template {self.asset_template!r}: unknown field {e}"
            ) from e

    def download_url(self, version: str, os_name: str, arch: str) -> str:
        asset = self.asset_name(version, os_name, arch)
        return f"{GITHUB_URL}/{self.repository}/releases/download/{version}/{asset}"

    def platform_key(self, os_name: str, arch: str) -> str:
        """Checksum lookup key, e.g. "linux-amd64"."""
        return f"{os_name}-{self.arch_aliases.get(arch, arch)}"

    def expected_checksum(self, version: str, os_name: str, arch: str) -> Optional[str]:
        """Get the pinned SHA256 for a version/platform, if any."""
        return self.checksums.get(version, {}).get(self.platform_key(os_name, arch))


def load_tool_spec(config_path: Union[str, Path, None] = None) -> ToolSpec:
    """
    Load a tool description from YAML.

    Args:
        config_path: Path to the YAML file (bundled tool.yaml if None)

    Returns:
        Parsed ToolSpec

    Raises:
        ConfigurationError: If the file is missing, invalid or incomplete
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    try:
        with open(path) as f:
            config = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML configuration: {e}") from e

    tool = config.get("tool")
    if not isinstance(tool, dict):
        raise ConfigurationError(f"Missing required configuration section: tool ({path})")

    for key in ("name", "repository", "default_version", "asset_template"):
        if not tool.get(key):
            raise ConfigurationError(f"Missing required tool setting: {key}")

    version_args = tool.get("version_args", ["--version"])
    if isinstance(version_args, str):
        version_args = version_args.split()

    checksums = {
        str(version): {str(k): str(v).lower() for k, v in (platforms or {}).items()}
        for version, platforms in (config.get("checksums") or {}).items()
    }

    logger.debug(f"Loaded tool configuration from {path}")
    return ToolSpec(
        name=str(tool["name"]),
        repository=str(tool["repository"]),
        default_version=str(tool["default_version"]),
        asset_template=str(tool["asset_template"]),
        version_args=[str(arg) for arg in version_args],
        arch_aliases={str(k): str(v) for k, v in (tool.get("arch_aliases") or {}).items()},
        checksums=checksums,
    )


def _is_within(base: Path, target: Path) -> bool:
    try:
        target.resolve().relative_to(base.resolve())
        return True
    except ValueError:
        return False


def _extract_zip(archive_path: Path, extract_dir: Path) -> None:
    with zipfile.ZipFile(archive_path, "r") as zip_file:
        for member in zip_file.namelist():
            if not _is_within(extract_dir, extract_dir / member):
                raise ExtractionError(f"Archive member escapes target directory: {member}")
        zip_file.extractall(extract_dir)


def _extract_tar(archive_path: Path, extract_dir: Path) -> None:
    with tarfile.open(archive_path, "r:*") as tar_file:
        for member in tar_file.getmembers():
            if member.issym() or member.islnk():
                continue
            if not _is_within(extract_dir, extract_dir / member.name):
                raise ExtractionError(f"Archive member escapes target directory: {member.name}")
        tar_file.extractall(
            extract_dir,
            members=[m for m in tar_file.getmembers() if not (m.issym() or m.islnk())],
        )


def extract_binary(download_path: Union[str, Path], binary_file_name: str,
                   work_dir: Union[str, Path]) -> Path:
    """
    Extract the tool binary from a downloaded release asset.

    Zip and gzipped tarballs are unpacked and searched for ``binary_file_name``;
    anything else is taken to be the binary itself.

    Args:
        download_path: Path to the downloaded asset
        binary_file_name: File name of the binary inside the archive
        work_dir: Scratch directory to extract into

    Returns:
        Path to the extracted binary

    Raises:
        ExtractionError: If the archive is unreadable or has no such binary
    """
    download_path = Path(download_path)
    extract_dir = Path(work_dir)
    extract_dir.mkdir(parents=True, exist_ok=True)

    logger.debug(f"Extracting {download_path} to {extract_dir}")

    try:
        if zipfile.is_zipfile(download_path):
            _extract_zip(download_path, extract_dir)
        elif tarfile.is_tarfile(download_path):
            _extract_tar(download_path, extract_dir)
        else:
            return download_path
    except (zipfile.BadZipFile, tarfile.TarError, OSError) as e:
        raise ExtractionError(f"Failed to extract {download_path}: {e}") from e

    for root, _dirs, files in os.walk(extract_dir):
        if binary_file_name in files:
            binary_path = Path(root) / binary_file_name
            logger.debug(f"Found binary: {binary_path}")
            return binary_path

    raise ExtractionError(f"{binary_file_name} not found in {download_path}")
