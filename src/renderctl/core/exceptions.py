"""Custom exceptions for renderctl."""

from typing import Any


class RenderCtlError(Exception):
    """Base exception for all renderctl errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class ConfigError(RenderCtlError):
    """Configuration-related errors."""

    pass


class AuthenticationError(RenderCtlError):
    """Authentication/authorization errors."""

    pass


class RenderAPIError(RenderCtlError):
    """Render API errors."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.status_code = status_code

    @property
    def transient(self) -> bool:
        """Whether retrying the request may succeed."""
        if self.status_code is None:
            return True
        return self.status_code == 429 or self.status_code >= 500


class TransientPollError(RenderCtlError):
    """A status poll did not yield a usable status."""

    def __init__(
        self,
        message: str,
        deploy_id: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.deploy_id = deploy_id

