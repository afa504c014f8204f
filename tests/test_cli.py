"""Tests for CLI commands and help output.

Builds run against the noop builder or a patched subprocess layer, and
remote calls are patched at the orchestrator or client boundary.
"""

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from shipctl.cli import cli
from shipctl.core.exceptions import DeploymentFailedError
from shipctl.deploy.models import DeploymentDetails, DeploymentRecord, DeploymentStatus


@pytest.fixture(autouse=True)
def isolated(tmp_path: Path, monkeypatch):
    """Run every CLI test from an empty project with an empty HOME."""
    home = tmp_path / "home"
    home.mkdir()
    project = tmp_path / "project"
    project.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(project)
    return project


# =============================================================================
# CLI Entry Point
# =============================================================================


class TestCLIEntryPoint:
    """Tests for main CLI entry point, flags, and options."""

    def test_help(self, cli_runner: CliRunner):
        result = cli_runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "shipctl" in result.output
        assert "build" in result.output
        assert "detect" in result.output
        assert "deploy" in result.output

    def test_version(self, cli_runner: CliRunner):
        result = cli_runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "shipctl version" in result.output

    def test_config_command(self, cli_runner: CliRunner):
        result = cli_runner.invoke(cli, ["--no-color", "-o", "json", "config"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["profile"] == "default"
        assert data["build"]["fallback"] is True
        assert data["remote"]["has_token"] is False

    def test_invalid_output_format(self, cli_runner: CliRunner):
        result = cli_runner.invoke(cli, ["-o", "xml", "config"])
        assert result.exit_code != 0

    def test_invalid_config_file(self, cli_runner: CliRunner, isolated: Path):
        bad = isolated / "bad.yaml"
        bad.write_text("apps: [not, a, mapping]\n")
        result = cli_runner.invoke(cli, ["-c", str(bad), "config"])
        assert result.exit_code == 1


# =============================================================================
# Build
# =============================================================================


class TestBuildCommand:
    def test_noop_build(self, cli_runner: CliRunner):
        result = cli_runner.invoke(
            cli, ["--no-color", "build", "--builder", "noop", "--no-fallback", "--name", "myapp"]
        )
        assert result.exit_code == 0, result.output
        assert "noop-myapp-" in result.output

    def test_noop_build_json(self, cli_runner: CliRunner):
        result = cli_runner.invoke(
            cli, ["--no-color", "build", "--builder", "noop", "--no-fallback", "--name", "myapp", "--tag", "v3", "--json"]
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["id"].startswith("noop-myapp-")
        assert data["tag"] == "v3"
        assert data["exposed_ports"] == []

    def test_dry_run(self, cli_runner: CliRunner):
        result = cli_runner.invoke(cli, ["--no-color", "--dry-run", "build", "--name", "myapp"])
        assert result.exit_code == 0
        assert "[dry-run] build" in result.output
        assert "railpack -> nixpacks" in result.output

    def test_command_dry_run_flag(self, cli_runner: CliRunner, make_exec):
        fake_exec = make_exec()
        with patch("asyncio.create_subprocess_exec", fake_exec):
            result = cli_runner.invoke(cli, ["--no-color", "build", "--dry-run", "--name", "myapp"])
        assert result.exit_code == 0, result.output
        assert "[dry-run] build" in result.output
        assert fake_exec.calls == []

    def test_all_builders_fail(self, cli_runner: CliRunner, make_exec):
        fake_exec = make_exec(stderr=b"boom\n", returncode=1)
        with patch("asyncio.create_subprocess_exec", fake_exec):
            result = cli_runner.invoke(cli, ["--no-color", "build", "--name", "myapp", "--json"])

        assert result.exit_code == 1
        assert [call["program"].rsplit("/", 1)[-1] for call in fake_exec.calls] == ["railpack", "nixpacks"]

    def test_no_fallback_stops_after_first(self, cli_runner: CliRunner, make_exec):
        fake_exec = make_exec(returncode=1)
        with patch("asyncio.create_subprocess_exec", fake_exec):
            result = cli_runner.invoke(cli, ["--no-color", "build", "--name", "myapp", "--no-fallback", "--json"])

        assert result.exit_code == 1
        assert len(fake_exec.calls) == 1

    def test_remote_requires_service(self, cli_runner: CliRunner):
        result = cli_runner.invoke(cli, ["--no-color", "build", "--remote"])
        assert result.exit_code == 1

    def test_configured_app(self, cli_runner: CliRunner, isolated: Path):
        (isolated / "shipctl.yaml").write_text(
            "apps:\n"
            "  worker:\n"
            "    build:\n"
            "      use: noop\n"
            "      config:\n"
            "        tag: nightly\n"
        )
        result = cli_runner.invoke(cli, ["--no-color", "build", "--app", "worker", "--no-fallback", "--json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["id"].startswith("noop-worker-")
        assert data["tag"] == "nightly"


class TestDetectCommand:
    def test_detect_dockerfile(self, cli_runner: CliRunner, isolated: Path):
        (isolated / "Dockerfile").write_text("FROM alpine\n")
        result = cli_runner.invoke(cli, ["--no-color", "-o", "json", "detect", str(isolated)])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["builder"] == "csdocker"
        assert data["builders"] == "csdocker -> railpack -> nixpacks"
        assert data["has_dockerfile"] is True


# =============================================================================
# Deploy
# =============================================================================


class TestDeployCommands:
    def test_deploy_up_noop(self, cli_runner: CliRunner):
        result = cli_runner.invoke(
            cli, ["--no-color", "deploy", "up", "--builder", "noop", "--no-fallback", "--name", "myapp"]
        )
        assert result.exit_code == 0, result.output
        assert "Deployed myapp to noop" in result.output

    def test_deploy_up_dry_run_flag(self, cli_runner: CliRunner):
        result = cli_runner.invoke(cli, ["--no-color", "deploy", "up", "--dry-run", "--name", "myapp"])
        assert result.exit_code == 0, result.output
        assert "[dry-run] deploy" in result.output
        assert "platform=noop" in result.output

    def test_deploy_up_remote_success(self, cli_runner: CliRunner):
        record = DeploymentRecord("dep_9")
        record.transition(DeploymentStatus.SUCCESS)
        with patch("shipctl.commands.build.RemoteBuildOrchestrator") as orchestrator:
            orchestrator.return_value.run.return_value = record
            result = cli_runner.invoke(cli, ["--no-color", "deploy", "up", "--remote", "--service", "svc_1"])

        assert result.exit_code == 0, result.output
        assert "dep_9" in result.output
        assert orchestrator.return_value.run.call_args[0][1] == "svc_1"

    def test_deploy_up_remote_failure_report(self, cli_runner: CliRunner):
        error = DeploymentFailedError(
            "build phase failed: Dockerfile not found",
            deployment_id="dep_9",
            service_name="web",
            branch="main",
            suggestions=["Ensure a Dockerfile exists in the root directory"],
        )
        with patch("shipctl.commands.build.RemoteBuildOrchestrator") as orchestrator:
            orchestrator.return_value.run.side_effect = error
            result = cli_runner.invoke(cli, ["--no-color", "deploy", "up", "--remote", "--service", "svc_1"])

        assert result.exit_code == 1
        assert "Service: web" in result.output
        assert "1. Ensure a Dockerfile exists" in result.output
        assert "shipctl deploy status dep_9" in result.output

    def test_status(self, cli_runner: CliRunner):
        details = DeploymentDetails.from_dict({"id": "dep_9", "status": "RUNNING", "integrationName": "web"})
        with patch(
            "shipctl.clients.remote.RemoteBuildClient.get_deployment_details",
            return_value=details,
        ):
            result = cli_runner.invoke(cli, ["--no-color", "-o", "json", "deploy", "status", "dep_9"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["status"] == "RUNNING"
        assert data["service"] == "web"
