"""Core utilities and shared components for renderctl."""

# Import context lazily to avoid circular imports:
# from renderctl.core.context import RenderCtlContext, pass_context
from renderctl.core.exceptions import ConfigError, RenderAPIError, RenderCtlError
from renderctl.core.output import OutputFormat, OutputFormatter

__all__ = [
    "ConfigError",
    "OutputFormat",
    "OutputFormatter",
    "RenderAPIError",
    "RenderCtlError",
]
