"""
Tests for compose operations — topology resolution, up/down, exec.

The docker binary is never run: ``subprocess.run`` is replaced by the
``compose_process`` recorder from conftest.
"""

from pathlib import Path
from unittest.mock import patch

import pytest

from dev_cli.core.config.loader import find_project_root
from dev_cli.core.errors import (
    EXIT_OS_ERROR,
    ComposeExecError,
    ComposeFileMissing,
    ComposeToolError,
)
from dev_cli.core.services.compose_ops import ComposeAdapter, run_compose


@pytest.fixture
def compose(project_dir: Path) -> ComposeAdapter:
    return ComposeAdapter.for_project(find_project_root(project_dir))


class TestForProject:

    def test_finds_compose_yml(self, project_dir: Path, compose: ComposeAdapter):
        assert compose.file == project_dir.resolve() / "compose.yml"
        assert compose.workdir == project_dir.resolve()

    def test_missing_compose_file(self, project_dir: Path):
        (project_dir / "compose.yml").unlink()
        with pytest.raises(ComposeFileMissing, match="compose.yml") as exc:
            ComposeAdapter.for_project(find_project_root(project_dir))
        assert str(project_dir.resolve()) in str(exc.value)
        assert exc.value.exit_code == EXIT_OS_ERROR

    def test_docker_compose_yml_is_not_enough(self, project_dir: Path):
        (project_dir / "compose.yml").rename(project_dir / "docker-compose.yml")
        with pytest.raises(ComposeFileMissing):
            ComposeAdapter.for_project(find_project_root(project_dir))


class TestResolveTopology:

    def test_parses_config_output(self, compose, compose_process):
        topology = compose.resolve_topology()
        assert topology.name == "demo"
        assert topology.service_names == ["api", "db", "web"]

    def test_runs_in_compose_directory(self, compose, compose_process):
        compose.resolve_topology()
        assert compose_process.calls == [
            (["docker", "compose", "config"], str(compose.workdir)),
        ]

    def test_non_zero_exit(self, compose, compose_process):
        compose_process.config_returncode = 1
        compose_process.config_stderr = b"services.web Additional property foo is not allowed"
        with pytest.raises(ComposeToolError, match="Additional property foo"):
            compose.resolve_topology()

    def test_non_utf8_output(self, compose, compose_process):
        compose_process.config_output = b"name: \xff\xfe\n"
        with pytest.raises(ComposeToolError, match="not UTF-8"):
            compose.resolve_topology()

    def test_invalid_yaml_output(self, compose, compose_process):
        compose_process.config_output = b"name: [unclosed\n"
        with pytest.raises(ComposeToolError, match="Could not read the docker compose file"):
            compose.resolve_topology()

    def test_non_mapping_output(self, compose, compose_process):
        compose_process.config_output = b"- a\n- b\n"
        with pytest.raises(ComposeToolError, match="expected a mapping"):
            compose.resolve_topology()

    def test_invalid_document(self, compose, compose_process):
        compose_process.config_output = b"services: {}\n"
        with pytest.raises(ComposeToolError, match="name"):
            compose.resolve_topology()

    def test_missing_docker_binary(self, compose):
        with patch(
            "dev_cli.core.services.compose_ops.subprocess.run",
            side_effect=FileNotFoundError("docker"),
        ):
            with pytest.raises(ComposeToolError, match="Could not run 'docker compose'"):
                compose.resolve_topology()


class TestUpDown:

    def test_up_detached(self, compose, compose_process):
        compose.up(detached=True)
        assert compose_process.subcommand_calls("up") == [["--detach"]]

    def test_up_attached(self, compose, compose_process):
        compose.up(detached=False)
        assert compose_process.subcommand_calls("up") == [[]]

    def test_up_offline_never_pulls(self, compose, compose_process):
        compose.up(detached=True, pull_never=True)
        assert compose_process.subcommand_calls("up") == [["--detach", "--pull", "never"]]

    def test_down_keeps_volumes(self, compose, compose_process):
        compose.down()
        assert compose_process.subcommand_calls("down") == [[]]

    def test_down_remove_volumes(self, compose, compose_process):
        compose.down(remove_volumes=True)
        assert compose_process.subcommand_calls("down") == [["--volumes"]]

    def test_failure_is_fatal(self, compose, compose_process):
        compose_process.returncode = 1
        with pytest.raises(ComposeToolError, match="exit code 1") as exc:
            compose.up()
        assert exc.value.exit_code == EXIT_OS_ERROR

    def test_failure_names_command_and_directory(self, compose, compose_process):
        compose_process.returncode = 2
        with pytest.raises(ComposeToolError) as exc:
            compose.down(remove_volumes=True)
        message = str(exc.value)
        assert "docker compose down --volumes failed" in message
        assert str(compose.workdir) in message
        assert "exit code 2" in message

    def test_output_not_captured(self, compose):
        with patch("dev_cli.core.services.compose_ops.subprocess.run") as mock_run:
            mock_run.return_value.returncode = 0
            compose.down()
        assert mock_run.call_args.kwargs["capture_output"] is False


class TestExec:

    def test_explicit_service(self, compose, compose_process):
        service = compose.exec("web", None, ["echo", "hi"])
        assert service == "web"
        assert compose_process.commands == [["docker", "compose", "exec", "web", "echo", "hi"]]

    def test_user_flag(self, compose, compose_process):
        compose.exec("api", "www-data", ["php", "-v"])
        assert compose_process.subcommand_calls("exec") == [["--user", "www-data", "api", "php", "-v"]]

    def test_default_service_resolves_topology(self, compose, compose_process):
        service = compose.exec(None, None, ["ls"])
        assert service == "api"
        assert compose_process.commands == [
            ["docker", "compose", "config"],
            ["docker", "compose", "exec", "api", "ls"],
        ]

    def test_default_service_from_given_topology(self, compose, compose_process):
        topology = compose.resolve_topology()
        compose_process.calls.clear()
        compose.exec(None, None, ["ls"], topology=topology)
        assert compose_process.subcommand_calls("config") == []
        assert compose_process.subcommand_calls("exec") == [["api", "ls"]]

    def test_unknown_service_in_topology(self, compose, compose_process):
        topology = compose.resolve_topology()
        with pytest.raises(ComposeToolError, match="No service 'cache'") as exc:
            compose.exec("cache", None, ["redis-cli"], topology=topology)
        assert "api, db, web" in str(exc.value)
        assert compose_process.subcommand_calls("exec") == []

    def test_no_services(self, compose, compose_process):
        compose_process.config_output = b"name: empty\nservices: {}\n"
        with pytest.raises(ComposeToolError, match="No services defined"):
            compose.exec(None, None, ["ls"])

    def test_exit_code_surfaced_unchanged(self, compose, compose_process):
        compose_process.returncode = 3
        with pytest.raises(ComposeExecError) as exc:
            compose.exec("web", None, ["false"])
        assert exc.value.exit_code == 3
        assert exc.value.service == "web"

    def test_signal_exit_code(self, compose, compose_process):
        compose_process.returncode = -2
        with pytest.raises(ComposeExecError) as exc:
            compose.exec("web", None, ["sleep", "100"])
        assert exc.value.exit_code == 130


class TestRunCompose:

    def test_timeout_is_fatal(self, tmp_path: Path):
        import subprocess

        with patch(
            "dev_cli.core.services.compose_ops.subprocess.run",
            side_effect=subprocess.TimeoutExpired(["docker"], 60),
        ):
            with pytest.raises(ComposeToolError, match="timed out"):
                run_compose("config", cwd=tmp_path, capture=True, timeout=60)
