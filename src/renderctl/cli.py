"""Main CLI entry point for renderctl."""

import sys
from typing import Any

import click
from rich.console import Console

from renderctl import __version__
from renderctl.config import load_config
from renderctl.core.context import RenderCtlContext
from renderctl.core.output import OutputFormat
from renderctl.core.exceptions import RenderCtlError, ConfigError


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
    console = Console()
    console.print(f"renderctl version {__version__}")
    ctx.exit()


@click.group(context_settings=CONTEXT_SETTINGS)
@click.option(
    "-p",
    "--profile",
    metavar="NAME",
    envvar="RENDERCTL_PROFILE",
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
    help="Increase verbosity (-v for info, -vvv for debug)",
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
    help="Show what would happen without triggering deploys",
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
    envvar="RENDERCTL_CONFIG",
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
    """renderctl - deploy images to Render and verify they come up healthy.

    \b
    Examples:
        renderctl deploy run --image my-app:abc123
        renderctl deploy wait dep-abc123
        renderctl deploy health

    \b
    Configuration:
        ~/.renderctl/config.yaml    User configuration
        ./renderctl.yaml            Project configuration
        RENDER_API_KEY              API key
        RENDER_SERVICE_ID           Service to deploy
    """
    try:
        config = load_config(config_file)

        ctx.obj = RenderCtlContext(
            config=config,
            profile=profile,
            output_format=output_format,
            verbose=verbose,
            quiet=quiet,
            dry_run=dry_run,
            color=False if no_color else None,
        )
        ctx.call_on_close(ctx.obj.close)

        if dry_run and not quiet:
            ctx.obj.output.print_warning("Dry-run mode enabled - no deploys will be triggered")

    except ConfigError as e:
        console = Console(stderr=True)
        console.print(f"[red]Configuration error:[/red] {e}")
        sys.exit(1)


def register_commands() -> None:
    """Register all command groups."""
    from renderctl.commands.deploy import deploy

    cli.add_command(deploy)


register_commands()


@cli.command()
@click.pass_context
def config(ctx: click.Context) -> None:
    """Show current configuration."""
    renderctl_ctx: RenderCtlContext = ctx.obj
    profile = renderctl_ctx.profile
    config_data = {
        "profile": renderctl_ctx.profile_name,
        "output_format": renderctl_ctx.output_format.value,
        "dry_run": renderctl_ctx.dry_run,
        "verbose": renderctl_ctx.verbose,
        "render": {
            "base_url": profile.render.get_base_url(),
            "service_id": profile.render.get_service_id(),
            "has_api_key": bool(profile.render.get_api_key()),
        },
        "monitor": profile.monitor.model_dump(),
        "health": profile.health.model_dump(),
    }
    renderctl_ctx.output.print_data(config_data, title="Current Configuration")


def main() -> None:
    """Main entry point.

    Exit codes: 0 on success, 1 on failure, 2 on usage errors and 130 when
    interrupted.
    """
    console = Console(stderr=True)
    try:
        rv = cli(standalone_mode=False)
    except RenderCtlError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        sys.exit(130)
    except click.exceptions.Abort as e:
        if isinstance(e.__cause__, KeyboardInterrupt):
            console.print("\n[yellow]Interrupted[/yellow]")
            sys.exit(130)
        console.print("Aborted!")
        sys.exit(1)
    except click.ClickException as e:
        e.show()
        sys.exit(e.exit_code)
    sys.exit(rv if isinstance(rv, int) else 0)


if __name__ == "__main__":
    main()
