"""
Docker runtime adapter — the daemon API calls dev-cli needs.

Only three operations: ping, list networks by name, create a network.
Compose operations go through the ``docker compose`` CLI instead (see
``dev_cli.core.services.compose_ops``).

The SDK client is created on first use; a daemon that is down surfaces
as an error from the first call, inside the readiness check.
"""

from __future__ import annotations

import logging
from typing import Protocol

import docker
from docker.models.networks import Network

logger = logging.getLogger(__name__)


class RuntimeClient(Protocol):
    """What the readiness check needs from a container runtime."""

    def ping(self) -> bool: ...

    def list_networks(self, name: str) -> list[str]: ...

    def create_network(self, name: str) -> str: ...


class DockerRuntime:
    """RuntimeClient backed by the Docker SDK for Python.

    SDK errors (``docker.errors.DockerException``) and transport errors
    (``requests.exceptions.RequestException``) propagate to the caller.
    """

    def __init__(self, client: docker.DockerClient | None = None) -> None:
        self._client = client

    @property
    def client(self) -> docker.DockerClient:
        if self._client is None:
            logger.debug("Connecting to Docker with local defaults")
            self._client = docker.from_env()
        return self._client

    def ping(self) -> bool:
        return bool(self.client.ping())

    def list_networks(self, name: str) -> list[str]:
        """IDs of networks named exactly ``name``.

        The daemon's ``name`` filter matches substrings, so the results
        are narrowed to exact matches here.
        """
        networks: list[Network] = self.client.networks.list(names=[name])
        return [n.id for n in networks if n.name == name]

    def create_network(self, name: str) -> str:
        network = self.client.networks.create(name)
        logger.debug("Created network %s (%s)", name, network.id)
        return network.id

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def __repr__(self) -> str:
        state = "connected" if self._client is not None else "lazy"
        return f"<{self.__class__.__name__} {state}>"
