"""Pytest fixtures for renderctl tests."""

import logging
import os
from typing import Callable, Generator

import httpx
import pytest
from click.testing import CliRunner

from renderctl.clients.render import RenderClient
from renderctl.config import (
    HealthConfig,
    MonitorConfig,
    ProfileConfig,
    RenderConfig,
    RenderCtlConfig,
)
from renderctl.core.context import RenderCtlContext
from renderctl.core.output import OutputFormat

SERVICE_ID = "srv-test123"
API_BASE = "https://api.render.com"


class FakeClock:
    """Monotonic clock that only moves when sleep() is called."""

    def __init__(self, start: float = 0.0):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click CLI runner."""
    return CliRunner()


@pytest.fixture
def render_config() -> RenderConfig:
    """Render configuration with inline credentials."""
    return RenderConfig(api_key="rnd_test_key", service_id=SERVICE_ID)


@pytest.fixture
def mock_config(render_config: RenderConfig) -> RenderCtlConfig:
    """Create a mock configuration."""
    return RenderCtlConfig(
        profiles={
            "default": ProfileConfig(
                render=render_config,
                monitor=MonitorConfig(),
                health=HealthConfig(),
            )
        }
    )


@pytest.fixture
def mock_context(mock_config: RenderCtlConfig) -> RenderCtlContext:
    """Create a mock renderctl context."""
    return RenderCtlContext(
        config=mock_config,
        profile="default",
        output_format=OutputFormat.TABLE,
        verbose=0,
        quiet=False,
        color=False,
    )


@pytest.fixture
def fake_clock() -> FakeClock:
    """Clock and sleep pair that never blocks."""
    return FakeClock()


@pytest.fixture
def make_render_client(
    render_config: RenderConfig,
) -> Callable[[Callable[[httpx.Request], httpx.Response]], RenderClient]:
    """Build a RenderClient whose requests are answered by a handler."""

    def factory(handler: Callable[[httpx.Request], httpx.Response]) -> RenderClient:
        return RenderClient(render_config, transport=httpx.MockTransport(handler))

    return factory


@pytest.fixture(autouse=True)
def clean_env() -> Generator[None, None, None]:
    """Clean environment variables before each test."""
    env_vars = [
        "RENDERCTL_API_KEY",
        "RENDERCTL_SERVICE_ID",
        "RENDERCTL_BASE_URL",
        "RENDERCTL_PROFILE",
        "RENDERCTL_CONFIG",
        "RENDERCTL_ENVIRONMENT",
        "RENDERCTL_RUNTIME_VERSION",
        "RENDERCTL_COMMIT",
        "RENDERCTL_ACTOR",
        "RENDERCTL_IMAGE_NAME",
        "DEPLOY_ENVIRONMENT",
        "RENDER_API_KEY",
        "RENDER_SERVICE_ID",
        "GITHUB_SHA",
        "GITHUB_ACTOR",
    ]

    original = {k: os.environ.get(k) for k in env_vars}

    for k in env_vars:
        os.environ.pop(k, None)

    yield

    for k, v in original.items():
        if v is not None:
            os.environ[k] = v
        else:
            os.environ.pop(k, None)


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    """Drop handlers installed by CLI invocations."""
    yield
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)


@pytest.fixture
def temp_config_file(tmp_path):
    """Create a temporary config file."""
    config_content = f"""
version: "1"
global:
  output_format: table
profiles:
  default:
    render:
      service_id: {SERVICE_ID}
    monitor:
      poll_interval: 5
      max_wait: 600
    health:
      max_attempts: 3
      interval: 2
"""
    config_file = tmp_path / "config.yaml"
    config_file.write_text(config_content)
    return str(config_file)
