"""
Exception hierarchy for setup-action.

Library code raises these; only the entry point turns them into a failed
step and an exit code.
"""


class SetupError(Exception):
    """Base exception for setup-action operations."""
    pass


class ConfigurationError(SetupError):
    """Tool configuration loading or validation failed."""
    pass


class InputError(SetupError):
    """A required action input was not supplied."""
    pass


class UnsupportedPlatformError(SetupError):
    """The runner OS is not one we ship binaries for."""
    pass


class DownloadError(SetupError):
    """Release artifact download failed."""
    pass


class ChecksumError(DownloadError):
    """Downloaded artifact does not match the expected checksum."""
    pass


class ExtractionError(SetupError):
    """The tool binary could not be extracted from the artifact."""
    pass


class ToolNotFoundError(SetupError):
    """The tool is missing from the cache after it was inserted."""
    pass


class InvocationError(SetupError):
    """The installed tool could not be run."""
    pass
