"""
Command model — what the user asked dev-cli to do.

Built once from the process arguments by the CLI layer and consumed
by the dispatcher.  ``Command`` is the closed set of subcommands;
``Invocation`` adds the free-form ``exec_command`` used when no
subcommand is given (``dev-cli ls -la`` ≡ ``dev-cli exec ls -la``).
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class CommandKind(StrEnum):
    INIT = "init"
    START = "start"
    STOP = "stop"
    RESTART = "restart"
    POWEROFF = "poweroff"
    EXEC = "exec"
    RUN = "run"
    SHELL = "shell"
    LAUNCH = "launch"
    STATUS = "status"
    GLOBAL_STATUS = "global-status"


# Commands that cannot do anything useful without a live runtime
RUNTIME_COMMANDS = frozenset({
    CommandKind.START,
    CommandKind.STOP,
    CommandKind.RESTART,
    CommandKind.POWEROFF,
    CommandKind.EXEC,
    CommandKind.RUN,
    CommandKind.SHELL,
    CommandKind.STATUS,
    CommandKind.GLOBAL_STATUS,
})


class Command(BaseModel):
    """A parsed subcommand.

    Only the fields relevant to ``kind`` are set:
        stop  → remove_data
        exec  → service, user, args
        run   → args
    """

    model_config = ConfigDict(frozen=True)

    kind: CommandKind
    service: str | None = None
    user: str | None = None
    args: tuple[str, ...] = ()
    remove_data: bool = False

    @property
    def requires_runtime(self) -> bool:
        return self.kind in RUNTIME_COMMANDS

    # ── Constructors ────────────────────────────────────────────

    @classmethod
    def init(cls) -> Command:
        return cls(kind=CommandKind.INIT)

    @classmethod
    def start(cls) -> Command:
        return cls(kind=CommandKind.START)

    @classmethod
    def stop(cls, remove_data: bool = False) -> Command:
        return cls(kind=CommandKind.STOP, remove_data=remove_data)

    @classmethod
    def exec(
        cls,
        args: list[str] | tuple[str, ...],
        service: str | None = None,
        user: str | None = None,
    ) -> Command:
        return cls(kind=CommandKind.EXEC, service=service, user=user, args=tuple(args))

    @classmethod
    def run(cls, args: list[str] | tuple[str, ...]) -> Command:
        return cls(kind=CommandKind.RUN, args=tuple(args))


class Invocation(BaseModel):
    """A subcommand, or the free-form command given without one."""

    model_config = ConfigDict(frozen=True)

    command: Command | None = None
    exec_command: tuple[str, ...] = Field(default_factory=tuple)

    @property
    def is_implicit_exec(self) -> bool:
        return self.command is None and len(self.exec_command) > 0

    @property
    def is_empty(self) -> bool:
        return self.command is None and not self.exec_command

    @property
    def label(self) -> str:
        if self.command is not None:
            return self.command.kind.value
        return "exec" if self.exec_command else ""
