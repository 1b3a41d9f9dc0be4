"""Adapters — bindings for the container runtime."""

from dev_cli.adapters.containers.docker import DockerRuntime, RuntimeClient

__all__ = ["DockerRuntime", "RuntimeClient"]
