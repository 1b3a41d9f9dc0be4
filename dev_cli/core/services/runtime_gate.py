"""
Runtime gate — decide whether a command needs Docker, then make sure
Docker is usable.

Readiness means:
    1. the daemon answers a ping
    2. the shared ``dev-cli-web`` network exists (created if missing)

Both steps short-circuit on failure.  Step 2 is idempotent: when the
network already exists nothing is mutated.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import click
import requests
from docker.errors import DockerException

from dev_cli.adapters.containers.docker import RuntimeClient
from dev_cli.core.errors import NetworkSetupError, RuntimeUnavailable
from dev_cli.core.models.command import Command

logger = logging.getLogger(__name__)

# Network shared by all dev-cli projects (reverse proxy, cross-project links)
RESERVED_NETWORK = "dev-cli-web"

_RUNTIME_ERRORS = (DockerException, requests.exceptions.RequestException)


def requires_runtime(command: Command | None, exec_command: Sequence[str] = ()) -> bool:
    """Whether the invocation needs a live container runtime.

    A subcommand decides for itself; with no subcommand, a non-empty
    free-form command is an implicit exec and needs the runtime.
    """
    required_by_command = command.requires_runtime if command is not None else False
    return required_by_command or len(exec_command) > 0


def ensure_runtime_ready(client: RuntimeClient, network: str = RESERVED_NETWORK) -> None:
    """Verify the runtime is reachable and the reserved network exists.

    Raises:
        RuntimeUnavailable: The daemon did not answer.
        NetworkSetupError: Listing or creating the network failed.
    """
    try:
        client.ping()
    except _RUNTIME_ERRORS as e:
        raise RuntimeUnavailable(f"Docker doesn't seem to be turned on ({e})") from e

    try:
        existing = client.list_networks(network)
    except _RUNTIME_ERRORS as e:
        raise NetworkSetupError(f"Could not list networks: {e}") from e

    if existing:
        logger.debug("Network '%s' present (%s)", network, ", ".join(existing))
        return

    click.echo(f"Creating the network '{network}'...")
    try:
        client.create_network(network)
    except _RUNTIME_ERRORS as e:
        raise NetworkSetupError(f"Could not create the network '{network}': {e}") from e
    click.secho(f"Network '{network}' created successfully", fg="green")
