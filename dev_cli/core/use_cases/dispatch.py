"""
Dispatch use case — run one invocation against the project.

Pipeline for every invocation:

    find_project_root → load_effective_config → Dispatcher.dispatch

The dispatcher is a small state machine:

    IDLE ──runtime gate──▶ RUNTIME_CHECKED ──branch──▶ DISPATCHED ──▶ DONE

The gate is a no-op for commands that don't need Docker.  Exactly one
branch runs per invocation.  Any DevCliError raised on the way is left
for the CLI's top-level handler.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

import click

from dev_cli.adapters.containers.docker import RuntimeClient
from dev_cli.core.config.loader import find_project_root, load_effective_config
from dev_cli.core.context import RunContext
from dev_cli.core.errors import UnimplementedCommand
from dev_cli.core.models.command import Command, CommandKind, Invocation
from dev_cli.core.models.compose import ComposeTopology
from dev_cli.core.models.config import EffectiveConfig, ProjectRoot
from dev_cli.core.services.compose_ops import ComposeAdapter
from dev_cli.core.services.runtime_gate import ensure_runtime_ready, requires_runtime

logger = logging.getLogger(__name__)

# Called before `start` to bring up shared infrastructure (reverse proxy)
ProxyHook = Callable[[], None]
ComposeFactory = Callable[[ProjectRoot], ComposeAdapter]


class DispatchState(StrEnum):
    IDLE = "idle"
    RUNTIME_CHECKED = "runtime_checked"
    DISPATCHED = "dispatched"
    DONE = "done"


@dataclass
class DispatchResult:
    """What the dispatcher did."""

    branch: str                     # exec | start | stop | help
    service: str | None = None      # service an exec ran in
    runtime_checked: bool = False


class Dispatcher:
    """Maps an Invocation onto compose operations for one project."""

    def __init__(
        self,
        context: RunContext,
        project_root: ProjectRoot,
        config: EffectiveConfig,
        runtime: RuntimeClient,
        *,
        compose_factory: ComposeFactory = ComposeAdapter.for_project,
        proxy: ProxyHook | None = None,
    ) -> None:
        self.context = context
        self.project_root = project_root
        self.config = config
        self.runtime = runtime
        self.compose_factory = compose_factory
        self.proxy = proxy
        self.state = DispatchState.IDLE

    def dispatch(self, invocation: Invocation) -> DispatchResult:
        """Gate on the runtime, then run exactly one branch.

        Raises:
            DevCliError: Any fatal condition, unchanged.
        """
        if self.state is not DispatchState.IDLE:
            raise RuntimeError(f"Dispatcher already used (state={self.state.value})")

        checked = requires_runtime(invocation.command, invocation.exec_command)
        if checked:
            ensure_runtime_ready(self.runtime)
        self.state = DispatchState.RUNTIME_CHECKED

        result = self._select_branch(invocation)
        result.runtime_checked = checked
        self.state = DispatchState.DISPATCHED

        logger.debug("Dispatched %s → %s", invocation.label or "(none)", result.branch)
        self.state = DispatchState.DONE
        return result

    # ── Branches ────────────────────────────────────────────────

    def _select_branch(self, invocation: Invocation) -> DispatchResult:
        command = invocation.command

        if command is None:
            if invocation.exec_command:
                return self._exec(self.context.service, None, invocation.exec_command)
            return DispatchResult(branch="help")

        if command.kind is CommandKind.EXEC:
            return self._exec(command.service, command.user, command.args)
        if command.kind is CommandKind.START:
            return self._start()
        if command.kind is CommandKind.STOP:
            return self._stop(command)

        raise UnimplementedCommand(command.kind.value)

    def _compose(self) -> tuple[ComposeAdapter, ComposeTopology]:
        compose = self.compose_factory(self.project_root)
        return compose, compose.resolve_topology()

    def _exec(
        self,
        service: str | None,
        user: str | None,
        args: tuple[str, ...],
    ) -> DispatchResult:
        compose, topology = self._compose()
        target = compose.exec(service, user, list(args), topology=topology)
        return DispatchResult(branch="exec", service=target)

    def _start(self) -> DispatchResult:
        compose, _ = self._compose()
        click.echo("Starting project ...")
        if self.proxy is not None:
            self.proxy()
        else:
            logger.debug("No proxy hook configured")
        compose.up(detached=True, pull_never=self.context.offline)
        return DispatchResult(branch="start")

    def _stop(self, command: Command) -> DispatchResult:
        compose, _ = self._compose()
        if command.remove_data:
            click.echo("Stopping with removing data...")
        else:
            click.echo("Stopping without removing data...")
        compose.down(remove_volumes=command.remove_data)
        return DispatchResult(branch="stop")


def run_invocation(
    context: RunContext,
    invocation: Invocation,
    runtime: RuntimeClient,
    *,
    proxy: ProxyHook | None = None,
) -> DispatchResult:
    """Resolve the project and its config, then dispatch ``invocation``.

    Raises:
        DevCliError: Any fatal condition, for the caller to report.
    """
    project_root = find_project_root(context.cwd)
    logger.info("Global config at %s", context.global_config_path)

    config = load_effective_config(project_root, context.global_config_path)
    for key in config.values:
        logger.debug("Config %s from %s layer", key, config.source_of(key))

    dispatcher = Dispatcher(context, project_root, config, runtime, proxy=proxy)
    return dispatcher.dispatch(invocation)
