"""
Compose operations — wraps the ``docker compose`` CLI for one project.

Every call runs synchronously in the compose file's directory.  The
compose file is never parsed by hand: the topology comes from the
tool's own ``config`` output.

    config  → captured, parsed into ComposeTopology
    up      → streamed to the terminal
    down    → streamed to the terminal
    exec    → interactive, inherits stdin/stdout/stderr
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence
from pathlib import Path

import yaml
from pydantic import ValidationError

from dev_cli.core.errors import ComposeExecError, ComposeFileMissing, ComposeToolError
from dev_cli.core.models.compose import ComposeTopology
from dev_cli.core.models.config import ProjectRoot

logger = logging.getLogger(__name__)

COMPOSE_FILE_NAME = "compose.yml"

COMPOSE_COMMAND = ("docker", "compose")


def run_compose(
    *args: str,
    cwd: Path,
    capture: bool = False,
    timeout: int | None = None,
) -> subprocess.CompletedProcess[bytes]:
    """Run a docker compose command and return the result.

    With ``capture`` the output is collected as bytes; otherwise the
    child shares this process's terminal.

    Raises:
        ComposeToolError: The docker binary could not be started.
    """
    cmd = [*COMPOSE_COMMAND, *args]
    logger.debug("Running: %s (cwd=%s)", " ".join(cmd), cwd)
    try:
        return subprocess.run(
            cmd,
            cwd=str(cwd),
            capture_output=capture,
            timeout=timeout,
        )
    except FileNotFoundError as e:
        raise ComposeToolError(f"Could not run '{' '.join(COMPOSE_COMMAND)}' ({e})") from e
    except subprocess.TimeoutExpired as e:
        raise ComposeToolError(f"'{' '.join(cmd)}' timed out after {timeout}s") from e


def _exit_code(returncode: int) -> int:
    """Map a subprocess return code to a process exit code.

    A negative code means the child died from a signal; shells report
    that as 128 + signal number.
    """
    return returncode if returncode >= 0 else 128 - returncode


class ComposeAdapter:
    """The compose project rooted at one ``compose.yml``."""

    def __init__(self, file: Path) -> None:
        self.file = file

    @classmethod
    def for_project(cls, project_root: ProjectRoot) -> ComposeAdapter:
        """Adapter for ``{project_root}/compose.yml``.

        Raises:
            ComposeFileMissing: The file does not exist.
        """
        path = project_root / COMPOSE_FILE_NAME
        if not path.is_file():
            raise ComposeFileMissing(
                f"Could not find a docker compose file in the project root ({path})"
            )
        return cls(path)

    @property
    def workdir(self) -> Path:
        return self.file.parent

    # ── Topology ────────────────────────────────────────────────

    def resolve_topology(self) -> ComposeTopology:
        """Parse the output of ``docker compose config``.

        Raises:
            ComposeToolError: Non-zero exit, non-UTF-8 output, invalid
                YAML, or a document that is not a compose project.
        """
        result = run_compose("config", cwd=self.workdir, capture=True, timeout=60)
        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace").strip()
            raise ComposeToolError(
                f"Could not read the docker compose file "
                f"({stderr or f'exit code {result.returncode}'})"
            )

        try:
            rendered = result.stdout.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ComposeToolError(f"Compose config output is not UTF-8 ({e})") from e

        try:
            data = yaml.safe_load(rendered)
        except yaml.YAMLError as e:
            raise ComposeToolError(f"Could not read the docker compose file ({e})") from e

        if not isinstance(data, dict):
            raise ComposeToolError(
                f"Could not read the docker compose file "
                f"(expected a mapping, got {type(data).__name__})"
            )

        try:
            topology = ComposeTopology.model_validate(data)
        except ValidationError as e:
            raise ComposeToolError(f"Could not read the docker compose file ({e})") from e

        logger.info(
            "Compose project '%s': %s",
            topology.name,
            ", ".join(topology.service_names) or "no services",
        )
        return topology

    # ── Lifecycle ───────────────────────────────────────────────

    def up(self, detached: bool = True, *, pull_never: bool = False) -> None:
        """``docker compose up [--detach] [--pull never]``."""
        args = ["up"]
        if detached:
            args.append("--detach")
        if pull_never:
            args.extend(["--pull", "never"])
        self._run_checked(args)

    def down(self, remove_volumes: bool = False) -> None:
        """``docker compose down [--volumes]``."""
        args = ["down"]
        if remove_volumes:
            args.append("--volumes")
        self._run_checked(args)

    def _run_checked(self, args: list[str]) -> None:
        result = run_compose(*args, cwd=self.workdir)
        if result.returncode != 0:
            raise ComposeToolError(
                f"Error: {' '.join(result.args)} failed in {self.workdir} "
                f"(exit code {result.returncode})"
            )

    # ── Exec ────────────────────────────────────────────────────

    def exec(
        self,
        service: str | None,
        user: str | None,
        command: Sequence[str],
        *,
        topology: ComposeTopology | None = None,
    ) -> str:
        """Run ``command`` inside ``service`` and wait for it.

        Without a service the alphabetically first service of the
        topology is used (resolved now if not passed in).

        Returns:
            The service the command ran in.

        Raises:
            ComposeToolError: No service could be chosen, or the given one
                is not in ``topology``.
            ComposeExecError: The command exited non-zero; carries its code.
        """
        if service is None:
            if topology is None:
                topology = self.resolve_topology()
            service = topology.default_service()
            if service is None:
                raise ComposeToolError(
                    f"No services defined in {self.file}, nothing to exec into"
                )
            logger.info("No service given, using '%s'", service)
        elif topology is not None and topology.get_service(service) is None:
            raise ComposeToolError(
                f"No service '{service}' in {self.file} "
                f"(available: {', '.join(topology.service_names) or 'none'})"
            )

        args = ["exec"]
        if user:
            args.extend(["--user", user])
        args.append(service)
        args.extend(command)

        result = run_compose(*args, cwd=self.workdir)
        if result.returncode != 0:
            raise ComposeExecError(service, _exit_code(result.returncode))
        return service

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} file={str(self.file)!r}>"
