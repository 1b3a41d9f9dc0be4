"""
Error taxonomy — every fatal condition dev-cli can report.

Components raise these; nothing recovers locally.  The CLI has a
single handler (``dev_cli.main``) that prints the message and exits
with ``exit_code``.
"""

from __future__ import annotations

# sysexits.h EX_OSERR
EXIT_OS_ERROR = 71


class DevCliError(Exception):
    """Base class for fatal dev-cli conditions."""

    def __init__(self, message: str, *, exit_code: int = EXIT_OS_ERROR) -> None:
        super().__init__(message)
        self.message = message
        self.exit_code = exit_code

    def __str__(self) -> str:
        return self.message


class ResolutionError(DevCliError):
    """No project root found at or above the working directory."""


class ConfigError(DevCliError):
    """A configuration layer exists but is not a valid document."""

    def __init__(self, layer: str, message: str) -> None:
        super().__init__(f"Invalid {layer} config: {message}")
        self.layer = layer


class RuntimeUnavailable(DevCliError):
    """The container runtime could not be reached."""


class NetworkSetupError(DevCliError):
    """The reserved network is missing and could not be created."""


class ComposeFileMissing(DevCliError):
    """The project has no compose file at the expected path."""


class ComposeToolError(DevCliError):
    """The compose tool failed or produced unusable output."""


class ComposeExecError(ComposeToolError):
    """``docker compose exec`` returned non-zero; keeps the tool's code."""

    def __init__(self, service: str, returncode: int) -> None:
        super().__init__(
            f"Command in service '{service}' exited with code {returncode}",
            exit_code=returncode,
        )
        self.service = service
        self.returncode = returncode


class UnimplementedCommand(DevCliError):
    """A recognised command that has no implementation yet."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Command not implemented yet: {name}")
        self.name = name
