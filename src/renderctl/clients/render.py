"""Render API client using httpx."""

from typing import Any

import httpx

from renderctl.config import RenderConfig
from renderctl.core.exceptions import AuthenticationError, ConfigError, RenderAPIError
from renderctl.core.logging import StructuredLogger

logger = StructuredLogger(__name__)


def _dig(data: Any, *keys: str) -> Any:
    """Follow a path of keys through nested dicts, returning None if absent."""
    for key in keys:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


class RenderClient:
    """Client for the Render REST API."""

    def __init__(self, config: RenderConfig, transport: httpx.BaseTransport | None = None):
        self._config = config
        self._transport = transport
        self._client: httpx.Client | None = None

    @property
    def service_id(self) -> str:
        """Configured service ID."""
        service_id = self._config.get_service_id()
        if not service_id:
            raise ConfigError("Render service ID not configured")
        return service_id

    @property
    def client(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._client is None:
            api_key = self._config.get_api_key()
            if not api_key:
                raise AuthenticationError("Render API key not configured")

            url = self._config.get_base_url()
            headers = {
                "Authorization": f"Bearer {api_key}",
                "Accept": "application/json",
                "Content-Type": "application/json",
            }

            self._client = httpx.Client(
                base_url=url.rstrip("/"),
                headers=headers,
                timeout=self._config.timeout,
                transport=self._transport,
            )

            logger.debug("Created Render client", url=url)

        return self._client

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Make an API request."""
        try:
            response = self.client.request(method, path, **kwargs)
            response.raise_for_status()

            if response.content:
                return response.json()
            return None

        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            try:
                error_data = e.response.json()
            except ValueError:
                message = e.response.text or str(e)
            else:
                if isinstance(error_data, dict):
                    message = error_data.get("message") or str(e)
                else:
                    message = str(error_data)
            if status_code in (401, 403):
                raise AuthenticationError(f"Render API rejected credentials: {message}")
            raise RenderAPIError(message, status_code=status_code)

        except httpx.RequestError as e:
            raise RenderAPIError(f"Request failed: {e}")

        except ValueError as e:
            raise RenderAPIError(f"Invalid JSON in response: {e}")

    def get(self, path: str, **kwargs: Any) -> Any:
        """Make a GET request."""
        return self._request("GET", path, **kwargs)

    def post(self, path: str, **kwargs: Any) -> Any:
        """Make a POST request."""
        return self._request("POST", path, **kwargs)

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            self._client.close()
            self._client = None

    def __enter__(self) -> "RenderClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    # Deploy operations
    def trigger_deploy(self, image_url: str) -> str:
        """Trigger a deploy of an image and return the new deploy ID."""
        payload = {
            "serviceId": self.service_id,
            "clearCache": "clear",
            "imageUrl": image_url,
        }
        response = self.post(f"/v1/services/{self.service_id}/deploys", json=payload)

        deploy_id = _dig(response, "deploy", "id")
        if not deploy_id:
            raise RenderAPIError("Deploy response has no deploy id", details={"response": response})

        logger.info("Triggered deploy", deploy_id=deploy_id, image=image_url)
        return deploy_id

    def get_deploy(self, deploy_id: str) -> dict[str, Any]:
        """Get a deploy by ID."""
        return self.get(f"/v1/services/{self.service_id}/deploys/{deploy_id}") or {}

    def get_deploy_status(self, deploy_id: str) -> str | None:
        """Get the raw status string of a deploy, or None if absent."""
        status = _dig(self.get_deploy(deploy_id), "deploy", "status")
        return status if isinstance(status, str) else None

    # Service operations
    def get_service(self) -> dict[str, Any]:
        """Get the configured service."""
        return self.get(f"/v1/services/{self.service_id}") or {}

    def get_service_url(self) -> str:
        """Get the public URL of the configured service."""
        url = _dig(self.get_service(), "service", "serviceDetails", "url")
        if not url:
            raise RenderAPIError("Service has no public URL", details={"service_id": self.service_id})
        return url
