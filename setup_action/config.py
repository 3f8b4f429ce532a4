"""
Runtime settings derived from the runner environment.
"""

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

SUBSCRIPTION_API_URL = "https://agent.api.stepsecurity.io/v1/github/{repository}/actions/subscription"
SUBSCRIPTION_TIMEOUT = 3
API_TIMEOUT = 30
DOWNLOAD_TIMEOUT = 300


@dataclass
class Settings:
    """Environment-derived settings for a single run."""
    repository: str
    tool_cache_dir: Path
    temp_dir: Path
    config_path: Optional[Path] = None
    subscription_timeout: float = SUBSCRIPTION_TIMEOUT
    api_timeout: float = API_TIMEOUT
    download_timeout: float = DOWNLOAD_TIMEOUT

    @property
    def subscription_url(self) -> str:
        return SUBSCRIPTION_API_URL.format(repository=self.repository)

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from runner environment variables.

        Outside a runner the tool cache and temp directories default to
        locations under the user cache and the system temp directory.
        """
        env = os.environ if env is None else env

        tool_cache = env.get("RUNNER_TOOL_CACHE") or str(
            Path.home() / ".cache" / "setup-action" / "tool-cache"
        )
        temp_dir = env.get("RUNNER_TEMP") or tempfile.gettempdir()
        config_path = env.get("SETUP_ACTION_CONFIG")

        return cls(
            repository=env.get("GITHUB_REPOSITORY", ""),
            tool_cache_dir=Path(tool_cache),
            temp_dir=Path(temp_dir),
            config_path=Path(config_path) if config_path else None,
        )
