"""Deploy command group."""

import sys
from typing import Any, TypeVar

import click
from pydantic import ValidationError

from renderctl.config import HealthConfig, MonitorConfig, RunInputs
from renderctl.core.context import pass_context, RenderCtlContext
from renderctl.core.exceptions import ConfigError, RenderCtlError
from renderctl.core.output import OutputFormat, format_duration
from renderctl.deploy import (
    DeploymentMonitor,
    DeployResult,
    HealthResult,
    PollResult,
    StatusCategory,
    classify_status,
)

ConfigModel = TypeVar("ConfigModel", MonitorConfig, HealthConfig)


@click.group()
@pass_context
def deploy(ctx: RenderCtlContext) -> None:
    """Deploy to Render - trigger, wait, health, run.

    \b
    Examples:
        renderctl deploy run --image my-app:abc123
        renderctl deploy trigger --image my-app:abc123
        renderctl deploy wait dep-abc123
        renderctl deploy status dep-abc123
        renderctl deploy health --attempts 5
    """
    pass


def _load_inputs(**overrides: str) -> RunInputs:
    """Read run inputs from the environment, then apply overrides."""
    try:
        inputs = RunInputs()
    except ValidationError as e:
        raise ConfigError(f"Invalid run inputs: {e}")
    return inputs.model_copy(update={k: v for k, v in overrides.items() if v})


def _with_overrides(config: ConfigModel, **overrides: Any) -> ConfigModel:
    """Return a validated copy of a profile section with overrides applied."""
    values = {k: v for k, v in overrides.items() if v is not None}
    if not values:
        return config
    try:
        return type(config).model_validate({**config.model_dump(), **values})
    except ValidationError as e:
        raise ConfigError(f"Invalid option: {e}")


def _build_monitor(
    ctx: RenderCtlContext,
    interval: float | None = None,
    max_wait: float | None = None,
    health_attempts: int | None = None,
    health_interval: float | None = None,
) -> DeploymentMonitor:
    """Create a monitor from the profile, applying command-line overrides."""
    monitor_config = _with_overrides(ctx.profile.monitor, poll_interval=interval, max_wait=max_wait)
    health_config = _with_overrides(
        ctx.profile.health, max_attempts=health_attempts, interval=health_interval
    )

    def on_poll(result: PollResult) -> None:
        ctx.output.print(f"Deployment status: {result.label}")

    def on_probe(attempt: int, max_attempts: int, ok: bool, detail: str) -> None:
        if not ok:
            ctx.output.print(
                f"[dim]Health check failed ({detail}), attempt {attempt}/{max_attempts}[/dim]"
            )

    return DeploymentMonitor(
        ctx.render,
        monitor_config=monitor_config,
        health_config=health_config,
        on_poll=on_poll,
        on_probe=on_probe,
    )


def _report_deploy(ctx: RenderCtlContext, result: DeployResult) -> None:
    if ctx.output_format != OutputFormat.TABLE:
        ctx.output.print_data(result.to_dict())
    if result.succeeded:
        ctx.output.print_success(
            f"Deployment {result.deploy_id} is live ({format_duration(result.elapsed)})"
        )
    else:
        ctx.output.print_error(f"Deployment {result.deploy_id}: {result.message}")


def _report_health(ctx: RenderCtlContext, result: HealthResult, required: bool) -> None:
    if ctx.output_format != OutputFormat.TABLE:
        ctx.output.print_data(result.to_dict())
    if result.healthy:
        ctx.output.print_success(f"Health check passed: {result.url}")
    elif required:
        ctx.output.print_error(
            f"Health check failed after {result.attempts} attempts: {result.last_error}"
        )
    else:
        ctx.output.print_warning(
            f"Health check failed after {result.attempts} attempts: {result.last_error}"
        )


def _print_banner(
    ctx: RenderCtlContext,
    inputs: RunInputs,
    succeeded: bool,
    deploy_id: str | None = None,
    url: str | None = None,
) -> None:
    lines = [
        f"Environment: {inputs.environment}",
        f"Runtime version: {inputs.runtime_version}",
        f"Commit: {inputs.commit or '-'}",
        f"Triggered by: {inputs.actor or '-'}",
    ]
    if deploy_id:
        lines.append(f"Deploy: {deploy_id}")
    if url:
        lines.append(f"URL: {url}")

    if succeeded:
        ctx.output.print_panel("\n".join(lines), title="Deployment completed successfully", style="green")
    else:
        lines.append("Please check the logs above for more details")
        ctx.output.print_panel("\n".join(lines), title="Deployment failed", style="red")


@deploy.command("trigger")
@click.option("--image", help="Image URL to deploy (default: IMAGE_NAME:COMMIT)")
@pass_context
def trigger(ctx: RenderCtlContext, image: str | None) -> None:
    """Trigger a deploy and print its ID.

    \b
    Examples:
        renderctl deploy trigger --image my-app:abc123
    """
    try:
        image_url = image or _load_inputs().image_url()

        if ctx.dry_run:
            ctx.log_dry_run("trigger deploy", {"image": image_url})
            return

        deploy_id = ctx.render.trigger_deploy(image_url)

        if ctx.output_format != OutputFormat.TABLE:
            ctx.output.print_data({"deploy_id": deploy_id, "image": image_url})
        else:
            ctx.output.print_success(f"Deployment ID: {deploy_id}")

    except RenderCtlError as e:
        ctx.output.print_error(f"Trigger failed: {e}")
        raise click.Abort()


@deploy.command("status")
@click.argument("deploy_id")
@pass_context
def status(ctx: RenderCtlContext, deploy_id: str) -> None:
    """Show the current status of a deploy.

    \b
    Examples:
        renderctl deploy status dep-abc123
    """
    try:
        raw = ctx.render.get_deploy_status(deploy_id)
        known, category = classify_status(raw)

        ctx.output.print_data(
            {
                "deploy_id": deploy_id,
                "status": raw or "-",
                "category": category.value,
                "terminal": bool(known and known.is_terminal),
            },
            title=f"Deploy: {deploy_id}",
        )

        if category == StatusCategory.UNKNOWN:
            ctx.output.print_warning(f"Unrecognized deploy status: {raw or '<none>'}")

    except RenderCtlError as e:
        ctx.output.print_error(f"Failed to get status: {e}")
        raise click.Abort()


@deploy.command("wait")
@click.argument("deploy_id")
@click.option(
    "--interval",
    type=click.FloatRange(min=0, min_open=True),
    help="Seconds between status polls",
)
@click.option(
    "--max-wait",
    type=click.FloatRange(min=0),
    help="Give up after this many seconds (0 waits forever)",
)
@pass_context
def wait(
    ctx: RenderCtlContext,
    deploy_id: str,
    interval: float | None,
    max_wait: float | None,
) -> None:
    """Wait for a deploy to go live.

    Exits non-zero if the deploy fails or does not finish in time.

    \b
    Examples:
        renderctl deploy wait dep-abc123
        renderctl deploy wait dep-abc123 --interval 10 --max-wait 900
    """
    try:
        ctx.output.print_info("Waiting for deployment to complete...")
        with _build_monitor(ctx, interval, max_wait) as monitor:
            result = monitor.await_deployment(deploy_id)

    except RenderCtlError as e:
        ctx.output.print_error(f"Wait failed: {e}")
        raise click.Abort()

    _report_deploy(ctx, result)
    if not result.succeeded:
        sys.exit(1)


@deploy.command("health")
@click.option("--url", help="Service URL (default: looked up from the service)")
@click.option("--attempts", type=click.IntRange(min=1), help="Number of probes")
@click.option(
    "--interval",
    type=click.FloatRange(min=0, min_open=True),
    help="Seconds between failed probes",
)
@click.option("--advisory", is_flag=True, help="Do not fail if the service never becomes healthy")
@pass_context
def health(
    ctx: RenderCtlContext,
    url: str | None,
    attempts: int | None,
    interval: float | None,
    advisory: bool,
) -> None:
    """Probe the service's health endpoint.

    \b
    Examples:
        renderctl deploy health
        renderctl deploy health --url https://my-app.onrender.com --attempts 3
    """
    required = ctx.profile.health.required and not advisory
    try:
        with _build_monitor(ctx, health_attempts=attempts, health_interval=interval) as monitor:
            service_url = url or monitor.resolve_endpoint().url
            ctx.output.print_info(f"Service URL: {service_url}")
            result = monitor.verify_health(service_url)

    except RenderCtlError as e:
        ctx.output.print_error(f"Health check failed: {e}")
        raise click.Abort()

    _report_health(ctx, result, required)
    if not result.healthy and required:
        sys.exit(1)


@deploy.command("run")
@click.option("--image", help="Image URL to deploy (default: IMAGE_NAME:COMMIT)")
@click.option(
    "-e",
    "--environment",
    type=click.Choice(["staging", "production"]),
    help="Deployment environment",
)
@click.option("--runtime-version", help="Runtime version being deployed")
@click.option("--skip-health", is_flag=True, help="Skip post-deployment health checks")
@click.option("--advisory-health", is_flag=True, help="Report but do not fail on health check exhaustion")
@pass_context
def run(
    ctx: RenderCtlContext,
    image: str | None,
    environment: str | None,
    runtime_version: str | None,
    skip_health: bool,
    advisory_health: bool,
) -> None:
    """Trigger a deploy, wait for it, and verify the service is healthy.

    \b
    Examples:
        renderctl deploy run --image my-app:abc123 -e production
        GITHUB_SHA=abc123 renderctl deploy run
    """
    deploy_id: str | None = None
    try:
        inputs = _load_inputs(environment=environment, runtime_version=runtime_version)
        image_url = image or inputs.image_url()

        if ctx.dry_run:
            ctx.log_dry_run(
                "deploy",
                {"image": image_url, "environment": inputs.environment},
            )
            return

        ctx.output.print_info(f"Deploying {image_url} to {inputs.environment}...")

        with _build_monitor(ctx) as monitor:
            deploy_id = ctx.render.trigger_deploy(image_url)
            ctx.output.print_info(f"Deployment ID: {deploy_id}")

            result = monitor.await_deployment(deploy_id)
            _report_deploy(ctx, result)
            if not result.succeeded:
                _print_banner(ctx, inputs, succeeded=False, deploy_id=deploy_id)
                sys.exit(1)

            service_url = None
            if not skip_health:
                ctx.output.print_info("Running post-deployment health checks...")
                service_url = monitor.resolve_endpoint().url
                ctx.output.print_info(f"Service URL: {service_url}")

                required = ctx.profile.health.required and not advisory_health
                health_result = monitor.verify_health(service_url)
                _report_health(ctx, health_result, required)
                if not health_result.healthy and required:
                    _print_banner(ctx, inputs, succeeded=False, deploy_id=deploy_id, url=service_url)
                    sys.exit(1)

    except RenderCtlError as e:
        ctx.output.print_error(f"Deployment failed: {e}")
        if deploy_id:
            _print_banner(ctx, inputs, succeeded=False, deploy_id=deploy_id)
        raise click.Abort()

    _print_banner(ctx, inputs, succeeded=True, deploy_id=deploy_id, url=service_url)


@deploy.command("service")
@pass_context
def service(ctx: RenderCtlContext) -> None:
    """Show the configured service and its public URL.

    \b
    Examples:
        renderctl deploy service
        renderctl -o json deploy service
    """
    try:
        data = ctx.render.get_service().get("service", {})
        details = data.get("serviceDetails") or {}

        ctx.output.print_data(
            {
                "id": data.get("id", ctx.render.service_id),
                "name": data.get("name", "-"),
                "type": data.get("type", "-"),
                "url": details.get("url", "-"),
                "suspended": data.get("suspended", "-"),
            },
            title="Service",
        )

    except RenderCtlError as e:
        ctx.output.print_error(f"Failed to get service: {e}")
        raise click.Abort()
