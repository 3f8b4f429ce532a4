"""
GitHub Actions runner plumbing.

Implements the parts of the runner file/command protocol this step needs:
reading inputs, writing outputs, extending PATH and reporting failure.
Log records are turned into workflow commands by WorkflowCommandFormatter
so warnings and errors show up as annotations on the run.
"""

import logging
import os
import sys
import uuid
from pathlib import Path

from .errors import InputError

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] setup-action: %(message)s"


def _escape_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def issue_command(command: str, message: str = "") -> None:
    """Write a ``::command::message`` line to stdout."""
    sys.stdout.write(f"::{command}::{_escape_data(message)}{os.linesep}")
    sys.stdout.flush()


class WorkflowCommandFormatter(logging.Formatter):
    """Render log records as workflow commands understood by the runner."""

    COMMANDS = {
        logging.DEBUG: "debug",
        logging.WARNING: "warning",
        logging.ERROR: "error",
        logging.CRITICAL: "error",
    }

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        command = self.COMMANDS.get(record.levelno)
        if command is None:
            return message
        return f"::{command}::{_escape_data(message)}"


def running_in_actions() -> bool:
    return os.environ.get("GITHUB_ACTIONS") == "true"


def setup_logging(verbose: bool = False) -> logging.Logger:
    """
    Configure the package logger.

    On a runner records go to stdout as workflow commands; elsewhere they go
    to stderr with timestamps.

    Args:
        verbose: Enable debug output

    Returns:
        The configured package logger
    """
    package_logger = logging.getLogger("setup_action")
    package_logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    if not package_logger.handlers:
        if running_in_actions():
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(WorkflowCommandFormatter("%(message)s"))
        else:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
        package_logger.addHandler(handler)

    return package_logger


def get_input(name: str, required: bool = False) -> str:
    """
    Read an action input from the environment.

    Args:
        name: Input name as declared in action.yml
        required: Raise if the input is empty

    Returns:
        The stripped input value ("" if unset)

    Raises:
        InputError: If a required input is missing
    """
    key = "INPUT_" + name.replace(" ", "_").upper()
    value = os.environ.get(key, "").strip()
    if required and not value:
        raise InputError(f"Input required and not supplied: {name}")
    return value


def _append_file_command(env_var: str, line: str) -> bool:
    file_path = os.environ.get(env_var)
    if not file_path:
        return False
    if not Path(file_path).exists():
        raise FileNotFoundError(f"Unable to find file at path: {file_path}")
    with open(file_path, "a", encoding="utf-8") as f:
        f.write(f"{line}{os.linesep}")
    return True


def set_output(name: str, value: str) -> None:
    """Set a step output for later steps to consume."""
    value = str(value)
    if "\n" in value or "\r" in value:
        delimiter = f"ghadelimiter_{uuid.uuid4()}"
        line = f"{name}<<{delimiter}{os.linesep}{value}{os.linesep}{delimiter}"
    else:
        line = f"{name}={value}"

    if not _append_file_command("GITHUB_OUTPUT", line):
        sys.stdout.write(os.linesep)
        issue_command(f"set-output name={name}", value)
    logger.debug(f"Set output {name}={value}")


def add_path(path: str) -> None:
    """Prepend a directory to PATH for this and all later steps."""
    if not _append_file_command("GITHUB_PATH", path):
        issue_command("add-path", path)
    os.environ["PATH"] = f"{path}{os.pathsep}{os.environ.get('PATH', '')}"


def set_failed(message: str, exit_code: int = 1) -> int:
    """
    Report a failed step.

    Logs the message as an error and returns the exit code the process
    should end with.
    """
    logging.getLogger("setup_action").error(message)
    return exit_code
