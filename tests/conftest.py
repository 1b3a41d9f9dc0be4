"""
Shared test fixtures and configuration.
"""

import subprocess
import textwrap
from pathlib import Path

import pytest

from dev_cli.core.context import RunContext

# Rendered `docker compose config` output for a three-service project.
# Services are deliberately listed out of alphabetical order.
COMPOSE_CONFIG = textwrap.dedent("""\
    name: demo
    services:
      web:
        image: nginx:alpine
        networks:
          default: null
        ports:
          - mode: ingress
            target: 80
            published: "8080"
            protocol: tcp
      db:
        image: postgres:16
        environment:
          POSTGRES_PASSWORD: secret
          PGDATA: null
        volumes:
          - type: volume
            source: db-data
            target: /var/lib/postgresql/data
            volume: {}
      api:
        image: php:8.3-fpm
        depends_on:
          db:
            condition: service_started
            required: true
        secrets:
          - source: app_key
    networks:
      default:
        name: demo_default
    volumes:
      db-data:
        name: demo_db-data
    secrets:
      app_key:
        name: demo_app_key
        file: ./secrets/app_key
""")


class FakeRuntime:
    """In-memory RuntimeClient that records every call."""

    def __init__(self, networks: list[str] | None = None) -> None:
        self.networks = list(networks or [])
        self.calls: list[str] = []
        self.created: list[str] = []
        self.ping_error: Exception | None = None
        self.list_error: Exception | None = None
        self.create_error: Exception | None = None
        self.closed = False

    def ping(self) -> bool:
        self.calls.append("ping")
        if self.ping_error:
            raise self.ping_error
        return True

    def list_networks(self, name: str) -> list[str]:
        self.calls.append(f"list:{name}")
        if self.list_error:
            raise self.list_error
        return [f"id-{n}" for n in self.networks if n == name]

    def create_network(self, name: str) -> str:
        self.calls.append(f"create:{name}")
        if self.create_error:
            raise self.create_error
        self.created.append(name)
        self.networks.append(name)
        return f"id-{name}"

    def close(self) -> None:
        self.closed = True


class ComposeProcess:
    """Stand-in for ``subprocess.run`` as used by compose_ops.

    ``config`` returns ``config_output``; every other subcommand returns
    ``returncode``.
    """

    def __init__(self) -> None:
        self.config_output: bytes = COMPOSE_CONFIG.encode()
        self.config_returncode = 0
        self.config_stderr = b""
        self.returncode = 0
        self.calls: list[tuple[list[str], str | None]] = []

    def __call__(self, cmd, cwd=None, capture_output=False, timeout=None):
        cmd = list(cmd)
        self.calls.append((cmd, cwd))
        if cmd[2] == "config":
            return subprocess.CompletedProcess(
                cmd,
                self.config_returncode,
                stdout=self.config_output,
                stderr=self.config_stderr,
            )
        return subprocess.CompletedProcess(cmd, self.returncode)

    @property
    def commands(self) -> list[list[str]]:
        return [cmd for cmd, _ in self.calls]

    def subcommand_calls(self, name: str) -> list[list[str]]:
        """Argument lists after ``docker compose <name>``."""
        return [cmd[3:] for cmd in self.commands if cmd[2] == name]


@pytest.fixture(autouse=True)
def user_config_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the global config at an isolated directory."""
    config_dir = tmp_path / "user-config" / "dev-cli"
    monkeypatch.setenv("DEV_CLI_CONFIG_DIR", str(config_dir))
    monkeypatch.delenv("DEV_CLI_LOG_LEVEL", raising=False)
    return config_dir


@pytest.fixture
def global_config_path(user_config_dir: Path) -> Path:
    return user_config_dir / ".dev-cli.yml"


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """A project with a local marker and a compose file."""
    root = tmp_path / "project"
    root.mkdir()
    (root / ".dev-cli.yml").write_text("foo: bar\n")
    (root / "compose.yml").write_text("name: demo\n")
    return root


@pytest.fixture
def run_context(project_dir: Path, global_config_path: Path) -> RunContext:
    return RunContext(cwd=project_dir, global_config_path=global_config_path)


@pytest.fixture
def fake_runtime() -> FakeRuntime:
    """Runtime that is up and already has the dev-cli network."""
    return FakeRuntime(networks=["dev-cli-web"])


@pytest.fixture
def compose_process(monkeypatch: pytest.MonkeyPatch) -> ComposeProcess:
    """Replace the compose subprocess calls with a recorder."""
    proc = ComposeProcess()
    monkeypatch.setattr("dev_cli.core.services.compose_ops.subprocess.run", proc)
    return proc


@pytest.fixture
def make_runtime():
    """Factory for FakeRuntime with a custom network list."""
    return FakeRuntime
