"""
Compose topology — the resolved output of ``docker compose config``.

Only the parts dev-cli reads are modelled; anything else the compose
tool emits is ignored.  Service names are the identifiers used for all
exec/up/down targeting.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ServiceDependsOn(BaseModel):
    """A ``depends_on`` entry in long form."""

    condition: str = "service_started"
    required: bool = True


class ServicePort(BaseModel):
    """A published port in long form."""

    mode: str = "ingress"
    target: int
    published: str | int | None = None
    protocol: str = "tcp"
    host_ip: str | None = None


class ServiceSecret(BaseModel):
    source: str
    target: str | None = None


class ServiceVolumeBind(BaseModel):
    create_host_path: bool = False


class ServiceVolume(BaseModel):
    """A service mount in long form (bind, volume, tmpfs, ...)."""

    type: str
    source: str | None = None
    target: str
    read_only: bool = False
    bind: ServiceVolumeBind | None = None
    volume: dict[str, Any] | None = None


class Service(BaseModel):
    """One service of the compose project."""

    container_name: str | None = None
    depends_on: dict[str, ServiceDependsOn] = Field(default_factory=dict)
    environment: dict[str, str | None] = Field(default_factory=dict)
    image: str | None = None
    init: bool | None = None
    labels: dict[str, str] = Field(default_factory=dict)
    networks: dict[str, Any] = Field(default_factory=dict)
    ports: list[ServicePort] = Field(default_factory=list)
    secrets: list[ServiceSecret] = Field(default_factory=list)
    volumes: list[ServiceVolume] = Field(default_factory=list)


class Network(BaseModel):
    name: str | None = None
    external: bool | None = None


class Volume(BaseModel):
    name: str | None = None
    driver: str | None = None
    external: bool | None = None


class Secret(BaseModel):
    name: str | None = None
    file: str | None = None


class ComposeTopology(BaseModel):
    """Resolved compose project: services plus top-level definitions."""

    name: str
    services: dict[str, Service] = Field(default_factory=dict)
    networks: dict[str, Network] = Field(default_factory=dict)
    volumes: dict[str, Volume] = Field(default_factory=dict)
    secrets: dict[str, Secret] = Field(default_factory=dict)

    @property
    def service_names(self) -> list[str]:
        """Service names, sorted."""
        return sorted(self.services)

    def default_service(self) -> str | None:
        """The service targeted when none is given: the smallest name."""
        if not self.services:
            return None
        return min(self.services)

    def get_service(self, name: str) -> Service | None:
        return self.services.get(name)
