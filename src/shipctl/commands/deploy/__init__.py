"""Deploy command group."""

import click

from shipctl.commands.build import (
    build_options,
    handle_error,
    make_runner,
    resolve_app,
    run_remote,
)
from shipctl.core.async_utils import run_sync, run_with_timeout
from shipctl.core.context import pass_context, ShipCtlContext
from shipctl.core.exceptions import ShipCtlError


@click.group()
@pass_context
def deploy(ctx: ShipCtlContext) -> None:
    """Build and deploy applications.

    \b
    Examples:
        shipctl deploy up --name api
        shipctl deploy up --remote --service svc_123
        shipctl deploy status dep_abc123
    """
    pass


@deploy.command("up")
@build_options
@pass_context
def up(
    ctx: ShipCtlContext,
    builder: str | None,
    name: str | None,
    tag: str | None,
    path: str | None,
    no_fallback: bool,
    remote: bool,
    service: str | None,
    timeout: int | None,
    command_dry_run: bool,
    as_json: bool,
) -> None:
    """Build with fallback and deploy the result.

    Local apps deploy through the platform configured under
    `apps.<name>.deploy` (noop by default). With --remote the source is
    uploaded and built by the remote build service instead.
    """
    if command_dry_run:
        ctx.dry_run = True
    try:
        if remote:
            if ctx.dry_run:
                ctx.log_dry_run("remote deploy", {"path": path or ".", "service": service or "linked"})
                return
            record = run_remote(ctx, path or ".", service)
            if as_json:
                ctx.output.print_data(record.to_dict())
            else:
                ctx.output.print_success(f"Deployment {record.deployment_id} succeeded")
            return

        app, chain = resolve_app(ctx, name, path, builder, tag)
        if ctx.dry_run:
            ctx.log_dry_run(
                "deploy",
                {"app": app.name, "builders": " -> ".join(chain), "platform": app.deploy.use},
            )
            return

        runner = make_runner(ctx, no_fallback, live_output=not (as_json or ctx.quiet))
        limit = timeout or ctx.profile.build.timeout
        deployment = run_sync(
            run_with_timeout(runner.execute(app.name, chain), limit, f"Deploy timed out after {limit}s")
        )

        if as_json:
            ctx.output.print_data(deployment.to_dict())
            return
        ctx.output.print_success(f"Deployed {app.name} to {deployment.platform} ({deployment.state})")
        if deployment.url:
            ctx.output.print_info(f"URL: {deployment.url}")

    except ShipCtlError as e:
        handle_error(ctx, e)


@deploy.command("status")
@click.argument("deployment_id")
@pass_context
def status(ctx: ShipCtlContext, deployment_id: str) -> None:
    """Show remote deployment status.

    \b
    Examples:
        shipctl deploy status dep_abc123
    """
    try:
        with ctx.remote as client:
            details = client.get_deployment_details(deployment_id)
    except ShipCtlError as e:
        handle_error(ctx, e)
        return

    data = {
        "id": details.id or deployment_id,
        "status": details.status.value,
        "service": details.service_name or "-",
        "branch": details.branch or "-",
        "phases": ", ".join(f"{p.name}={p.status}" for p in details.phases) or "-",
    }
    reason = details.failure_reason()
    if reason:
        data["reason"] = reason
    ctx.output.print_data(data, title="Deployment")

    if reason:
        ctx.output.print("")
        ctx.output.print("[bold]Suggestions:[/bold]")
        for i, suggestion in enumerate(details.suggestions(), start=1):
            ctx.output.print(f"  {i}. {suggestion}")
