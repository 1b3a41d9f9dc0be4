"""
Run context — the settings for one dev-cli invocation.

Built ONCE by the CLI entry point and passed explicitly to every
component that needs it:

    - CLI:    main.py → RunContext.from_environment(...)
    - Tests:  RunContext(cwd=tmp_path, global_config_path=...)

Design notes:
    - A frozen value, not a module-level singleton.  Nothing reads
      process state behind the caller's back.
    - The global config path is resolved here, once, so ConfigStore
      never has to know where the user config directory lives.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import click

APP_NAME = "dev-cli"

# Global config lives at {user-config-dir}/dev-cli/.dev-cli.yml
GLOBAL_CONFIG_FILE = ".dev-cli.yml"

# Overrides the user config directory (mostly for tests and CI)
CONFIG_DIR_ENV = "DEV_CLI_CONFIG_DIR"


def default_config_dir() -> Path:
    """Return the dev-cli directory under the user's configuration dir."""
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        return Path(override).expanduser()
    return Path(click.get_app_dir(APP_NAME, force_posix=False))


@dataclass(frozen=True)
class RunContext:
    """Everything the core needs to know about the current invocation."""

    cwd: Path
    global_config_path: Path
    offline: bool = False
    service: str | None = None

    @classmethod
    def from_environment(
        cls,
        *,
        offline: bool = False,
        service: str | None = None,
        cwd: Path | None = None,
    ) -> RunContext:
        """Build the context from the process environment."""
        return cls(
            cwd=(cwd or Path.cwd()).resolve(),
            global_config_path=default_config_dir() / GLOBAL_CONFIG_FILE,
            offline=offline,
            service=service,
        )
