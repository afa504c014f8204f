"""Click context object for sharing state across commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import click

from shipctl.config import ShipCtlConfig, ProfileConfig, get_default_config
from shipctl.core.output import OutputFormat, OutputFormatter
from shipctl.core.logging import LogLevel, setup_logging, StructuredLogger

if TYPE_CHECKING:
    from shipctl.build.registry import Registry
    from shipctl.clients.remote import RemoteBuildClient


class ShipCtlContext:
    """Shared context object for shipctl commands.

    This object is passed through Click's context mechanism and provides
    access to configuration, the plugin registry, clients, and utilities.
    """

    def __init__(
        self,
        config: ShipCtlConfig | None = None,
        profile: str | None = None,
        output_format: OutputFormat | None = None,
        verbose: int = 0,
        quiet: bool = False,
        dry_run: bool = False,
        color: bool = True,
    ):
        self._config = config or get_default_config()
        self._profile_name = profile or "default"

        # CLI overrides config
        self._output_format = output_format or self._config.global_settings.output_format
        self._verbose = verbose
        self._quiet = quiet
        self._dry_run = dry_run or self._config.global_settings.dry_run
        self._color = color

        if verbose >= 2:
            log_level = LogLevel.DEBUG
        elif verbose >= 1:
            log_level = LogLevel.INFO
        elif quiet:
            log_level = LogLevel.ERROR
        else:
            log_level = self._config.global_settings.verbosity

        setup_logging(log_level, rich_output=color)
        self._logger = StructuredLogger("context")

        self._output = OutputFormatter(
            format=self._output_format,
            color=color,
            quiet=quiet,
        )

        # Lazy-loaded
        self._registry: Registry | None = None
        self._remote_client: RemoteBuildClient | None = None

    @property
    def config(self) -> ShipCtlConfig:
        """Get the loaded configuration."""
        return self._config

    @property
    def profile(self) -> ProfileConfig:
        """Get the current profile configuration."""
        return self._config.get_profile(self._profile_name)

    @property
    def profile_name(self) -> str:
        return self._profile_name

    @property
    def output(self) -> OutputFormatter:
        return self._output

    @property
    def output_format(self) -> OutputFormat:
        return self._output_format

    @property
    def dry_run(self) -> bool:
        """Check if dry-run mode is enabled."""
        return self._dry_run

    @dry_run.setter
    def dry_run(self, value: bool) -> None:
        self._dry_run = value

    @property
    def verbose(self) -> int:
        return self._verbose

    @property
    def quiet(self) -> bool:
        return self._quiet

    @property
    def logger(self) -> StructuredLogger:
        return self._logger

    @property
    def registry(self) -> "Registry":
        """Get or create the builder/platform registry."""
        if self._registry is None:
            from shipctl.build.registry import default_registry

            self._registry = default_registry(port_detection=self.profile.build.port_detection)
        return self._registry

    @property
    def remote(self) -> "RemoteBuildClient":
        """Get or create the remote build client."""
        if self._remote_client is None:
            from shipctl.clients.remote import RemoteBuildClient

            self._remote_client = RemoteBuildClient(self.profile.remote)
        return self._remote_client

    def log_dry_run(self, action: str, details: dict[str, Any] | None = None) -> None:
        """Log a dry-run action."""
        if self._dry_run:
            msg = f"\\[dry-run] {action}"
            if details:
                detail_str = ", ".join(f"{k}={v}" for k, v in details.items())
                msg = f"{msg} ({detail_str})"
            self._output.print(f"[dim]{msg}[/dim]")


# Click decorator for passing context
pass_context = click.make_pass_decorator(ShipCtlContext, ensure=True)
