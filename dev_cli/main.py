"""
dev-cli — CLI entrypoint.

Usage:
    dev-cli --help
    dev-cli start
    dev-cli exec --service php --user www-data composer install
    dev-cli ls -la            (no subcommand: exec in the default service)
"""

from __future__ import annotations

import logging

import click

from dev_cli import __version__
from dev_cli.adapters.containers.docker import DockerRuntime
from dev_cli.core.context import RunContext
from dev_cli.core.errors import DevCliError
from dev_cli.core.models.command import Command, CommandKind, Invocation
from dev_cli.core.observability.logging_config import resolve_level, setup_logging
from dev_cli.core.use_cases.dispatch import run_invocation

logger = logging.getLogger(__name__)

# Commands whose trailing tokens belong to the program run in the container
_PASSTHROUGH = {"ignore_unknown_options": True, "allow_interspersed_args": False}


class ImplicitExecGroup(click.Group):
    """Group that treats an unknown first token as a command to exec.

    ``dev-cli ls -la`` runs ``ls -la`` in the default service, exactly
    like ``dev-cli exec ls -la``.
    """

    def resolve_command(
        self, ctx: click.Context, args: list[str]
    ) -> tuple[str | None, click.Command | None, list[str]]:
        name = args[0] if args else ""
        if ctx.token_normalize_func is not None:
            name = ctx.token_normalize_func(name)
        if name and name not in self.commands:
            return "exec", implicit_exec, args
        return super().resolve_command(ctx, args)


def _dispatch(ctx: click.Context, invocation: Invocation) -> None:
    """Run ``invocation`` and turn any fatal error into an exit code.

    This is the only place that reports DevCliError to the user.
    """
    run_context: RunContext = ctx.obj["run_context"]
    runtime = DockerRuntime()
    try:
        result = run_invocation(run_context, invocation, runtime)
    except DevCliError as e:
        logger.debug("Fatal: %s", e, exc_info=True)
        click.secho(f"❌ {e}", fg="red", err=True)
        ctx.exit(e.exit_code)
    finally:
        runtime.close()

    if result.branch == "help":
        click.echo(ctx.find_root().get_help())


@click.group(cls=ImplicitExecGroup, invoke_without_command=True)
@click.version_option(version=__version__, prog_name="dev-cli")
@click.option(
    "--service",
    "-s",
    default=None,
    help="The service to run the command in. If omitted, the first service "
    "of the project (by name) is used.",
)
@click.option(
    "--offline",
    is_flag=True,
    help="Offline mode: never pull images or otherwise reach the internet.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.pass_context
def cli(
    ctx: click.Context,
    service: str | None,
    offline: bool,
    verbose: bool,
    debug: bool,
) -> None:
    """A CLI for managing local Docker development environments."""
    setup_logging(resolve_level(debug=debug, verbose=verbose), quiet_third_party=not debug)

    ctx.ensure_object(dict)
    ctx.obj["run_context"] = RunContext.from_environment(offline=offline, service=service)

    if ctx.invoked_subcommand is None:
        _dispatch(ctx, Invocation())


# ── Project lifecycle ───────────────────────────────────────────


@cli.command()
@click.pass_context
def init(ctx: click.Context) -> None:
    """Initialize a new project for dev-cli using pre-defined templates."""
    _dispatch(ctx, Invocation(command=Command.init()))


@cli.command()
@click.pass_context
def start(ctx: click.Context) -> None:
    """Start the docker compose project."""
    _dispatch(ctx, Invocation(command=Command.start()))


@cli.command()
@click.option(
    "--remove-data",
    is_flag=True,
    help="Also remove the project's volumes. Without it nothing is lost.",
)
@click.pass_context
def stop(ctx: click.Context, remove_data: bool) -> None:
    """Stop and remove the containers of the project."""
    _dispatch(ctx, Invocation(command=Command.stop(remove_data=remove_data)))


@cli.command()
@click.pass_context
def restart(ctx: click.Context) -> None:
    """Stop, remove and start the project again."""
    _dispatch(ctx, Invocation(command=Command(kind=CommandKind.RESTART)))


@cli.command()
@click.pass_context
def poweroff(ctx: click.Context) -> None:
    """Stop all projects and dev-cli containers (proxy, etc.)."""
    _dispatch(ctx, Invocation(command=Command(kind=CommandKind.POWEROFF)))


# ── Commands in containers ──────────────────────────────────────


@cli.command("exec", context_settings=_PASSTHROUGH)
@click.option("--service", "-s", default=None, help="Service to run the command in.")
@click.option("--user", "-u", default=None, help="User to run the command as.")
@click.argument("command", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def exec_(
    ctx: click.Context,
    service: str | None,
    user: str | None,
    command: tuple[str, ...],
) -> None:
    """Execute a shell command in the container of a service."""
    _dispatch(ctx, Invocation(command=Command.exec(command, service=service, user=user)))


@click.command("exec", context_settings=_PASSTHROUGH, hidden=True)
@click.argument("exec_command", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def implicit_exec(ctx: click.Context, exec_command: tuple[str, ...]) -> None:
    """Exec given without a subcommand (not registered on the group)."""
    _dispatch(ctx, Invocation(exec_command=exec_command))


@cli.command("run", context_settings=_PASSTHROUGH)
@click.argument("command", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def run_(ctx: click.Context, command: tuple[str, ...]) -> None:
    """Run a command defined in the config file."""
    _dispatch(ctx, Invocation(command=Command.run(command)))


@cli.command()
@click.pass_context
def shell(ctx: click.Context) -> None:
    """Start a shell session in the container of a service."""
    _dispatch(ctx, Invocation(command=Command(kind=CommandKind.SHELL)))


@cli.command()
@click.pass_context
def launch(ctx: click.Context) -> None:
    """Open the project's default URL in the browser."""
    _dispatch(ctx, Invocation(command=Command(kind=CommandKind.LAUNCH)))


# ── Status ──────────────────────────────────────────────────────


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show the status of the containers of this project."""
    _dispatch(ctx, Invocation(command=Command(kind=CommandKind.STATUS)))


@cli.command("global-status")
@click.pass_context
def global_status(ctx: click.Context) -> None:
    """Show the status of all projects that ran through dev-cli."""
    _dispatch(ctx, Invocation(command=Command(kind=CommandKind.GLOBAL_STATUS)))


if __name__ == "__main__":
    cli()
