"""Main CLI entry point for shipctl."""

import sys
from typing import Any

import click
from rich.console import Console

from shipctl import __version__
from shipctl.config import load_config
from shipctl.core.context import ShipCtlContext
from shipctl.core.output import OutputFormat
from shipctl.core.exceptions import ShipCtlError, ConfigError


CONTEXT_SETTINGS = {
    "help_option_names": ["-h", "--help"],
    "max_content_width": 120,
}


class OutputFormatType(click.ParamType):
    """Custom Click parameter type for output format."""

    name = "format"

    def convert(
        self,
        value: Any,
        param: click.Parameter | None,
        ctx: click.Context | None,
    ) -> OutputFormat:
        if isinstance(value, OutputFormat):
            return value
        try:
            return OutputFormat(value.lower())
        except ValueError:
            self.fail(
                f"Invalid format '{value}'. Choose from: table, json, yaml, raw",
                param,
                ctx,
            )


OUTPUT_FORMAT = OutputFormatType()


def print_version(ctx: click.Context, param: click.Parameter, value: bool) -> None:
    """Print version and exit."""
    if not value or ctx.resilient_parsing:
        return
    click.echo(f"shipctl version {__version__}")
    ctx.exit()


@click.group(context_settings=CONTEXT_SETTINGS)
@click.option(
    "-p",
    "--profile",
    metavar="NAME",
    envvar="SHIPCTL_PROFILE",
    help="Configuration profile to use",
)
@click.option(
    "-o",
    "--output",
    "output_format",
    type=OUTPUT_FORMAT,
    metavar="FORMAT",
    help="Output format: table, json, yaml, raw",
)
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="Increase verbosity (-v for info, -vv for debug)",
)
@click.option(
    "-q",
    "--quiet",
    is_flag=True,
    help="Suppress non-essential output",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Show what would happen without building or deploying",
)
@click.option(
    "--no-color",
    is_flag=True,
    help="Disable colored output",
)
@click.option(
    "-c",
    "--config",
    "config_file",
    type=click.Path(exists=True),
    metavar="FILE",
    envvar="SHIPCTL_CONFIG",
    help="Path to config file",
)
@click.option(
    "--version",
    is_flag=True,
    callback=print_version,
    expose_value=False,
    is_eager=True,
    help="Show version and exit",
)
@click.pass_context
def cli(
    ctx: click.Context,
    profile: str | None,
    output_format: OutputFormat | None,
    verbose: int,
    quiet: bool,
    dry_run: bool,
    no_color: bool,
    config_file: str | None,
) -> None:
    """shipctl - build and deploy applications.

    Detects how a project should be built, builds it with automatic
    fallback between builders, and deploys the result locally or through
    the remote build service.

    \b
    Examples:
        shipctl detect
        shipctl build --name api
        shipctl deploy up --remote --service svc_123

    \b
    Configuration:
        ~/.shipctl/config.yaml    User configuration
        ./shipctl.yaml            Project configuration
        SHIPCTL_*                 Environment variables
    """
    try:
        config = load_config(config_file, profile)

        ctx.obj = ShipCtlContext(
            config=config,
            profile=profile,
            output_format=output_format,
            verbose=verbose,
            quiet=quiet,
            dry_run=dry_run,
            color=not no_color,
        )

        if dry_run and not quiet:
            ctx.obj.output.print_warning("Dry-run mode enabled - nothing will be built or deployed")

    except ConfigError as e:
        console = Console(stderr=True)
        console.print(f"[red]Configuration error:[/red] {e}")
        sys.exit(1)


def register_commands() -> None:
    """Register all command groups."""
    from shipctl.commands.build import build, detect_cmd
    from shipctl.commands.deploy import deploy

    cli.add_command(build)
    cli.add_command(detect_cmd)
    cli.add_command(deploy)


register_commands()


@cli.command()
@click.pass_context
def config(ctx: click.Context) -> None:
    """Show current configuration."""
    shipctl_ctx: ShipCtlContext = ctx.obj
    profile = shipctl_ctx.profile
    config_data = {
        "profile": shipctl_ctx.profile_name,
        "output_format": shipctl_ctx.output_format.value,
        "dry_run": shipctl_ctx.dry_run,
        "verbose": shipctl_ctx.verbose,
        "remote": {
            "api_url": profile.remote.get_api_url(),
            "service_id": profile.remote.get_service_id(),
            "has_token": bool(profile.remote.get_token()),
        },
        "build": {
            "fallback": profile.build.fallback_enabled(),
            "default_tag": profile.build.default_tag,
            "port_detection": profile.build.port_detection,
        },
        "apps": sorted(shipctl_ctx.config.apps),
    }
    shipctl_ctx.output.print_data(config_data, title="Current Configuration")


def main() -> None:
    """Main entry point."""
    try:
        cli()
    except ShipCtlError as e:
        console = Console(stderr=True)
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        console = Console(stderr=True)
        console.print("\n[yellow]Interrupted[/yellow]")
        sys.exit(130)


if __name__ == "__main__":
    main()
