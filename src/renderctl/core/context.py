"""Click context object for sharing state across commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import click

from renderctl.config import RenderCtlConfig, ProfileConfig, get_default_config
from renderctl.core.output import OutputFormat, OutputFormatter
from renderctl.core.logging import LogLevel, setup_logging

if TYPE_CHECKING:
    from renderctl.clients.render import RenderClient


class RenderCtlContext:
    """Shared context object for renderctl commands.

    This object is passed through Click's context mechanism and provides
    access to configuration, the Render client, and output utilities.
    """

    def __init__(
        self,
        config: RenderCtlConfig | None = None,
        profile: str | None = None,
        output_format: OutputFormat | None = None,
        verbose: int = 0,
        quiet: bool = False,
        dry_run: bool = False,
        color: bool | None = None,
    ):
        self._config = config or get_default_config()
        self._profile_name = profile or "default"

        # Output settings (CLI overrides config)
        self._output_format = output_format or self._config.global_settings.output_format
        self._verbose = verbose
        self._quiet = quiet
        self._dry_run = dry_run

        # False (--no-color) wins, then "never"; None auto-detects a terminal
        setting = self._config.global_settings.color
        if color is False or setting == "never":
            color = False
        elif color is True or setting == "always":
            color = True
        else:
            color = None

        self._output = OutputFormatter(
            format=self._output_format,
            color=color,
            quiet=quiet,
        )

        log_level = LogLevel.from_flags(verbose, quiet, self._config.global_settings.verbosity)
        setup_logging(log_level, color=self._output.color)

        self._render_client: RenderClient | None = None

    @property
    def config(self) -> RenderCtlConfig:
        """Get the loaded configuration."""
        return self._config

    @property
    def profile(self) -> ProfileConfig:
        """Get the current profile configuration."""
        return self._config.get_profile(self._profile_name)

    @property
    def profile_name(self) -> str:
        """Get the current profile name."""
        return self._profile_name

    @property
    def output(self) -> OutputFormatter:
        """Get the output formatter."""
        return self._output

    @property
    def output_format(self) -> OutputFormat:
        """Get the output format."""
        return self._output_format

    @property
    def dry_run(self) -> bool:
        """Check if dry-run mode is enabled."""
        return self._dry_run

    @property
    def verbose(self) -> int:
        """Get verbosity level."""
        return self._verbose

    @property
    def quiet(self) -> bool:
        """Check if quiet mode is enabled."""
        return self._quiet

    @property
    def color(self) -> bool:
        """Check if color output is enabled."""
        return self._output.color

    @property
    def render(self) -> "RenderClient":
        """Get or create Render client."""
        if self._render_client is None:
            from renderctl.clients.render import RenderClient

            self._render_client = RenderClient(self.profile.render)
        return self._render_client

    def log_dry_run(self, action: str, details: dict[str, Any] | None = None) -> None:
        """Log a dry-run action."""
        if self._dry_run:
            msg = f"\\[dry-run] {action}"
            if details:
                detail_str = ", ".join(f"{k}={v}" for k, v in details.items())
                msg = f"{msg} ({detail_str})"
            self._output.print(f"[dim]{msg}[/dim]")

    def close(self) -> None:
        """Release clients created by this context."""
        if self._render_client is not None:
            self._render_client.close()
            self._render_client = None


pass_context = click.make_pass_decorator(RenderCtlContext, ensure=True)
