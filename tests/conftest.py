"""Pytest fixtures for shipctl tests."""

import asyncio
import os
from typing import Generator

import pytest
from click.testing import CliRunner

from shipctl.build.models import Artifact
from shipctl.config import (
    AppConfig,
    BuildSettings,
    PluginConfig,
    ProfileConfig,
    RemoteConfig,
    ShipCtlConfig,
)
from shipctl.core.context import ShipCtlContext
from shipctl.core.output import OutputFormat


class FakeProcess:
    """Stand-in for asyncio.subprocess.Process."""

    def __init__(self, stdout: bytes = b"", stderr: bytes = b"", returncode: int = 0, hang: bool = False):
        self.stdout = asyncio.StreamReader()
        self.stderr = asyncio.StreamReader()
        self._returncode = returncode
        self.returncode: int | None = None
        self.killed = False
        self._done = asyncio.Event()

        self.stdout.feed_data(stdout)
        self.stderr.feed_data(stderr)
        if not hang:
            self.stdout.feed_eof()
            self.stderr.feed_eof()
            self._done.set()

    def kill(self) -> None:
        self.killed = True
        self._returncode = -9
        self.stdout.feed_eof()
        self.stderr.feed_eof()
        self._done.set()

    async def wait(self) -> int:
        await self._done.wait()
        self.returncode = self._returncode
        return self._returncode

    async def communicate(self) -> tuple[bytes, bytes]:
        out = await self.stdout.read()
        err = await self.stderr.read()
        await self.wait()
        return out, err


class FakeExec:
    """Replacement for asyncio.create_subprocess_exec that records calls."""

    def __init__(self, stdout: bytes = b"", stderr: bytes = b"", returncode: int = 0, hang: bool = False):
        self.stdout = stdout
        self.stderr = stderr
        self.returncode = returncode
        self.hang = hang
        self.calls: list[dict] = []
        self.processes: list[FakeProcess] = []

    async def __call__(self, program, *args, **kwargs):
        self.calls.append({"program": program, "args": list(args), **kwargs})
        proc = FakeProcess(self.stdout, self.stderr, self.returncode, self.hang)
        self.processes.append(proc)
        return proc

    @property
    def last_args(self) -> list[str]:
        return self.calls[-1]["args"]


@pytest.fixture
def fake_exec() -> FakeExec:
    return FakeExec()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click CLI runner."""
    return CliRunner()


@pytest.fixture
def mock_config() -> ShipCtlConfig:
    """Create a mock configuration."""
    return ShipCtlConfig(
        profiles={
            "default": ProfileConfig(
                remote=RemoteConfig(api_url="https://api.test", token="test-token", service_id="svc_1"),
                build=BuildSettings(port_detection=False),
            )
        },
        apps={
            "web": AppConfig(
                path=".",
                build=PluginConfig(use="railpack", config={"env": {"NODE_ENV": "production"}}),
            ),
        },
    )


@pytest.fixture
def mock_context(mock_config: ShipCtlConfig) -> ShipCtlContext:
    """Create a mock ShipCtl context."""
    return ShipCtlContext(
        config=mock_config,
        profile="default",
        output_format=OutputFormat.TABLE,
        verbose=0,
        quiet=False,
        dry_run=False,
        color=False,
    )


@pytest.fixture
def artifact() -> Artifact:
    return Artifact(
        id="railpack-web-1700000000",
        image="web",
        tag="latest",
        exposed_ports=[3000],
        labels={"builder": "railpack"},
        metadata={"builder": "railpack", "context": "."},
    )


@pytest.fixture(autouse=True)
def clean_env() -> Generator[None, None, None]:
    """Clean environment variables before each test."""
    env_vars = [
        "SHIPCTL_API_URL",
        "SHIPCTL_TOKEN",
        "SHIPCTL_SERVICE_ID",
        "SHIPCTL_NO_FALLBACK",
        "SHIPCTL_PROFILE",
        "SHIPCTL_CONFIG",
    ]
    secret_vars = [k for k in os.environ if k.startswith("SHIPCTL_SECRET_")]

    original = {k: os.environ.get(k) for k in env_vars + secret_vars}

    for k in original:
        os.environ.pop(k, None)

    yield

    for k, v in original.items():
        if v is not None:
            os.environ[k] = v
        else:
            os.environ.pop(k, None)


@pytest.fixture
def temp_config_file(tmp_path):
    """Create a temporary config file."""
    config_content = """
version: "1"
global:
  output_format: table
profiles:
  default:
    remote:
      api_url: https://api.example.com
      service_id: svc_from_file
    build:
      fallback: true
      default_tag: dev
apps:
  api:
    path: services/api
    build:
      use: nixpacks
      config:
        build_args:
          GO_VERSION: "1.22"
"""
    config_file = tmp_path / "config.yaml"
    config_file.write_text(config_content)
    return str(config_file)


@pytest.fixture
def make_exec():
    """Factory for FakeExec with custom output or exit status."""
    return FakeExec
