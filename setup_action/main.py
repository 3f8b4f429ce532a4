"""
Entry point for the setup step.

Checks the subscription, resolves the requested version, installs the tool
from cache or from its GitHub release, exposes it on PATH and runs it once
to print its version.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import actions
from .config import Settings
from .errors import SetupError
from .installer import ToolInstaller
from .subscription import validate_subscription
from .tool import load_tool_spec
from .tool_cache import ToolCache
from .versions import latest_version, resolve_version

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="setup-action",
        description="Install a release binary into the tool cache and add it to PATH",
    )
    parser.add_argument("--version", dest="tool_version",
                        help="Version to install: stable, latest or a release tag "
                             "(defaults to the INPUT_VERSION input)")
    parser.add_argument("--config", help="Tool configuration YAML (defaults to the bundled tool.yaml)")
    parser.add_argument("--clear-cache", action="store_true",
                        help="Remove cached versions of the tool before installing")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose output")
    return parser


def install(settings: Settings, requested_version: str, clear_cache: bool = False) -> Path:
    """
    Run the install flow and return the cached tool directory.

    Raises:
        SetupError: On any fatal failure
    """
    tool = load_tool_spec(settings.config_path)
    version = resolve_version(
        requested_version,
        tool,
        fetch_latest=lambda repo, name, stable: latest_version(
            repo, name, stable, timeout=settings.api_timeout
        ),
    )

    cache = ToolCache(settings.tool_cache_dir, settings.temp_dir,
                      download_timeout=settings.download_timeout)
    if clear_cache:
        cache.clear(tool.name)

    installer = ToolInstaller(tool, cache)
    cached_path = installer.download(version)

    actions.add_path(str(cached_path))
    logger.info(f"{tool.name} version: '{version}' has been cached at {cached_path}")
    actions.set_output("path", str(cached_path))

    installer.invoke(cached_path)
    return cached_path


def run(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the action.

    Returns:
        Process exit code: 0 on success, 1 if the step failed
    """
    args = build_parser().parse_args(argv)
    actions.setup_logging(verbose=args.verbose)

    try:
        settings = Settings.from_env()
        if args.config:
            settings.config_path = Path(args.config)

        validate_subscription(settings)
        requested = args.tool_version or actions.get_input("version", required=True)
        install(settings, requested, clear_cache=args.clear_cache)
        return 0

    except SetupError as e:
        return actions.set_failed(str(e))
    except Exception as e:
        logger.debug("Unexpected failure", exc_info=True)
        return actions.set_failed(str(e))


def main():
    sys.exit(run())


if __name__ == "__main__":
    main()
