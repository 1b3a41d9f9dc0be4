"""
Domain models — Pydantic types for dev-cli.

All models are re-exported here for convenient access:

    from dev_cli.core.models import Command, ComposeTopology, EffectiveConfig
"""

from dev_cli.core.models.command import Command, CommandKind, Invocation
from dev_cli.core.models.compose import (
    ComposeTopology,
    Network,
    Secret,
    Service,
    ServiceDependsOn,
    ServicePort,
    ServiceSecret,
    ServiceVolume,
    Volume,
)
from dev_cli.core.models.config import ConfigLayer, EffectiveConfig, ProjectRoot

__all__ = [
    # command.py
    "Command",
    "CommandKind",
    "Invocation",
    # compose.py
    "ComposeTopology",
    "Network",
    "Secret",
    "Service",
    "ServiceDependsOn",
    "ServicePort",
    "ServiceSecret",
    "ServiceVolume",
    "Volume",
    # config.py
    "ConfigLayer",
    "EffectiveConfig",
    "ProjectRoot",
]
