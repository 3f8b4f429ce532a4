"""
Pytest configuration and fixtures for setup-action tests.
"""

import io
import logging
import os
import tarfile
import zipfile
from pathlib import Path
from typing import Dict

import pytest

from setup_action.tool import ToolSpec
from setup_action.tool_cache import ToolCache


LINUX_X64_ENV = {"RUNNER_OS": "Linux", "RUNNER_ARCH": "X64"}
WINDOWS_X64_ENV = {"RUNNER_OS": "Windows", "RUNNER_ARCH": "X64"}


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--network",
        action="store_true",
        default=False,
        help="Run tests that talk to github.com"
    )


def pytest_collection_modifyitems(config, items):
    """Skip network tests unless --network is given."""
    if config.getoption("--network"):
        return

    skip_network = pytest.mark.skip(reason="need --network option to run")
    for item in items:
        if "network" in item.keywords:
            item.add_marker(skip_network)


def make_tool_spec(**overrides) -> ToolSpec:
    """Tool spec used throughout the tests."""
    values = dict(
        name="mytool",
        repository="acme/mytool",
        default_version="v1.2.3",
        asset_template="{tool}_{bare_version}_{os}_{arch}.{archive}",
        version_args=["--version"],
        arch_aliases={"ARM64": "arm64"},
    )
    values.update(overrides)
    return ToolSpec(**values)


def write_tar_gz(path: Path, members: Dict[str, bytes]) -> Path:
    """Write a .tar.gz archive containing the given members."""
    with tarfile.open(path, "w:gz") as tar:
        for name, data in members.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = 0o644
            tar.addfile(info, io.BytesIO(data))
    return path


def write_zip(path: Path, members: Dict[str, bytes]) -> Path:
    """Write a .zip archive containing the given members."""
    with zipfile.ZipFile(path, "w") as zf:
        for name, data in members.items():
            zf.writestr(name, data)
    return path


@pytest.fixture
def tool_spec() -> ToolSpec:
    return make_tool_spec()


@pytest.fixture
def tool_cache(tmp_path) -> ToolCache:
    """Empty tool cache rooted in a temporary directory."""
    return ToolCache(tmp_path / "toolcache", tmp_path / "temp")


@pytest.fixture
def runner_env(tmp_path, monkeypatch):
    """Simulated hosted runner environment for a Linux X64 job."""
    output_file = tmp_path / "github_output"
    path_file = tmp_path / "github_path"
    output_file.touch()
    path_file.touch()

    env = {
        "RUNNER_OS": "Linux",
        "RUNNER_ARCH": "X64",
        "GITHUB_REPOSITORY": "octo/repo",
        "RUNNER_TOOL_CACHE": str(tmp_path / "toolcache"),
        "RUNNER_TEMP": str(tmp_path / "temp"),
        "GITHUB_OUTPUT": str(output_file),
        "GITHUB_PATH": str(path_file),
    }
    for key, value in env.items():
        monkeypatch.setenv(key, value)
    monkeypatch.setenv("PATH", os.environ.get("PATH", ""))
    monkeypatch.delenv("SETUP_ACTION_CONFIG", raising=False)
    monkeypatch.delenv("INPUT_VERSION", raising=False)
    return env


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo handlers and levels installed by setup_logging()."""
    package_logger = logging.getLogger("setup_action")
    handlers = list(package_logger.handlers)
    level = package_logger.level
    propagate = package_logger.propagate
    yield
    package_logger.handlers = handlers
    package_logger.setLevel(level)
    package_logger.propagate = propagate
