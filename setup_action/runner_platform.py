"""
Runner platform detection.

Maps the ``RUNNER_OS`` / ``RUNNER_ARCH`` variables that GitHub Actions
exports into the os/arch names used by release artifact file names.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .errors import UnsupportedPlatformError


def _environ(env: Optional[Mapping[str, str]]) -> Mapping[str, str]:
    return os.environ if env is None else env


def get_runner_arch(env: Optional[Mapping[str, str]] = None) -> str:
    """
    Get the architecture of the runner.

    ``X64`` and ``X86`` both map to ``amd64``; anything else (``ARM64``,
    ``ARM``) is passed through unchanged.

    Args:
        env: Environment mapping (defaults to os.environ)

    Returns:
        Normalized architecture string
    """
    runner_arch = _environ(env).get("RUNNER_ARCH", "")
    if runner_arch.startswith("X"):
        return "amd64"

    return runner_arch


def get_runner_os(env: Optional[Mapping[str, str]] = None) -> str:
    """
    Get the OS of the runner.

    Args:
        env: Environment mapping (defaults to os.environ)

    Returns:
        One of "windows", "linux" or "darwin"

    Raises:
        UnsupportedPlatformError: If RUNNER_OS is not recognized
    """
    runner_os = _environ(env).get("RUNNER_OS", "")
    if runner_os.startswith("Win"):
        return "windows"
    elif runner_os.startswith("Linux"):
        return "linux"
    elif runner_os.startswith("macOS"):
        return "darwin"

    raise UnsupportedPlatformError(
        f"Unsupported OS found. OS: {runner_os} Arch: {get_runner_arch(env)}"
    )


@dataclass(frozen=True)
class RunnerPlatform:
    """Resolved os/arch pair for the current runner."""
    os: str
    arch: str

    @property
    def exe_suffix(self) -> str:
        return ".exe" if self.os == "windows" else ""

    @classmethod
    def detect(cls, env: Optional[Mapping[str, str]] = None) -> "RunnerPlatform":
        return cls(os=get_runner_os(env), arch=get_runner_arch(env))
