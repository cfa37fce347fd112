"""
Exceptions raised by cargodroid.

All of them are click exceptions, so a command that lets one escape prints the
message and exits non-zero instead of dumping a traceback.
"""

import click


class CargoDroidError(click.ClickException):
    """Base exception for all cargodroid errors."""

    pass


class ConfigurationError(CargoDroidError):
    """Raised before anything is spawned when the configuration is unusable."""

    def __init__(self, message, missing=None):
        self.missing = list(missing or [])
        super().__init__(message)


class ToolchainResolutionError(CargoDroidError):
    """Raised when a cross toolchain cannot be located on this host."""

    def __init__(self, message, candidates=None):
        self.candidates = list(candidates or [])
        super().__init__(message)


class BuildProcessFailure(CargoDroidError):
    """Raised when a cargo invocation exits non-zero."""

    def __init__(self, argv, returncode):
        self.argv = list(argv)
        self.returncode = returncode
        self.exit_code = returncode if returncode > 0 else 1
        super().__init__(
            f"Command '{' '.join(self.argv)}' failed with exit code {returncode}"
        )
