"""API clients for external services."""

from renderctl.clients.render import RenderClient

__all__ = ["RenderClient"]
