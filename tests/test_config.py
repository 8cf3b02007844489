"""Tests for configuration management."""

import os

import pytest
from pydantic import ValidationError

from renderctl.config import (
    ConfigLoader,
    GlobalConfig,
    HealthConfig,
    MonitorConfig,
    RenderConfig,
    RenderCtlConfig,
    RunInputs,
    get_default_config,
)
from renderctl.core.exceptions import ConfigError
from renderctl.core.logging import LogLevel
from renderctl.core.output import OutputFormat


class TestRenderConfig:
    """Tests for RenderConfig."""

    def test_default_values(self):
        config = RenderConfig()
        assert config.api_key is None
        assert config.service_id is None
        assert config.base_url == "https://api.render.com"
        assert config.timeout == 30

    def test_get_api_key_from_config(self):
        config = RenderConfig(api_key="rnd_inline")
        assert config.get_api_key() == "rnd_inline"

    def test_get_api_key_from_env(self):
        os.environ["RENDER_API_KEY"] = "rnd_env"
        config = RenderConfig(api_key="from_env")
        assert config.get_api_key() == "rnd_env"

    def test_prefixed_env_wins(self):
        os.environ["RENDER_API_KEY"] = "rnd_plain"
        os.environ["RENDERCTL_API_KEY"] = "rnd_prefixed"
        assert RenderConfig().get_api_key() == "rnd_prefixed"

    def test_get_service_id_env_overrides_config(self):
        os.environ["RENDER_SERVICE_ID"] = "srv-env"
        config = RenderConfig(service_id="srv-config")
        assert config.get_service_id() == "srv-env"

    def test_get_service_id_from_config(self):
        assert RenderConfig(service_id="srv-config").get_service_id() == "srv-config"

    def test_get_base_url_from_env(self):
        os.environ["RENDERCTL_BASE_URL"] = "http://localhost:9000"
        assert RenderConfig().get_base_url() == "http://localhost:9000"


class TestMonitorConfig:
    """Tests for MonitorConfig."""

    def test_defaults_match_workflow(self):
        config = MonitorConfig()
        assert config.poll_interval == 30
        assert config.max_wait == 3600
        assert config.max_consecutive_errors == 5

    def test_rejects_non_positive_interval(self):
        with pytest.raises(ValidationError):
            MonitorConfig(poll_interval=0)

    def test_rejects_empty_error_budget(self):
        with pytest.raises(ValidationError):
            MonitorConfig(max_consecutive_errors=0)

    def test_rejects_negative_max_wait(self):
        with pytest.raises(ValidationError):
            MonitorConfig(max_wait=-1)

    def test_zero_max_wait_disables_deadline(self):
        assert MonitorConfig(max_wait=0).max_wait == 0


class TestHealthConfig:
    """Tests for HealthConfig."""

    def test_defaults_match_workflow(self):
        config = HealthConfig()
        assert config.path == "/health"
        assert config.max_attempts == 10
        assert config.interval == 30
        assert config.required is True

    def test_path_gets_leading_slash(self):
        assert HealthConfig(path="healthz").path == "/healthz"

    def test_rejects_zero_attempts(self):
        with pytest.raises(ValidationError):
            HealthConfig(max_attempts=0)

    @pytest.mark.parametrize("field", ["interval", "timeout"])
    @pytest.mark.parametrize("value", [0, -1])
    def test_rejects_non_positive_timing(self, field, value):
        with pytest.raises(ValidationError):
            HealthConfig(**{field: value})


class TestGlobalConfig:
    """Tests for GlobalConfig."""

    def test_default_values(self):
        config = GlobalConfig()
        assert config.output_format == OutputFormat.TABLE
        assert config.color == "auto"
        assert config.verbosity == LogLevel.WARNING

    def test_invalid_color(self):
        with pytest.raises(ValueError):
            GlobalConfig(color="invalid")


class TestRenderCtlConfig:
    """Tests for RenderCtlConfig."""

    def test_default_profile_exists(self):
        config = get_default_config()
        assert "default" in config.profiles

    def test_get_profile_default(self):
        config = RenderCtlConfig()
        assert config.get_profile().render.base_url == "https://api.render.com"

    def test_get_profile_not_found(self):
        config = RenderCtlConfig()
        with pytest.raises(ConfigError, match="Profile 'missing' not found"):
            config.get_profile("missing")

    def test_global_alias(self):
        config = RenderCtlConfig(**{"global": {"output_format": "json"}})
        assert config.global_settings.output_format == OutputFormat.JSON


class TestRunInputs:
    """Tests for RunInputs."""

    def test_defaults(self):
        inputs = RunInputs()
        assert inputs.environment == "staging"
        assert inputs.runtime_version == "latest"
        assert inputs.commit == ""

    def test_reads_ci_environment(self, monkeypatch):
        monkeypatch.setenv("GITHUB_SHA", "abc123")
        monkeypatch.setenv("GITHUB_ACTOR", "octocat")
        monkeypatch.setenv("RENDERCTL_ENVIRONMENT", "production")
        inputs = RunInputs()
        assert inputs.commit == "abc123"
        assert inputs.actor == "octocat"
        assert inputs.environment == "production"

    def test_rejects_unknown_environment(self, monkeypatch):
        monkeypatch.setenv("RENDERCTL_ENVIRONMENT", "qa")
        with pytest.raises(ValidationError):
            RunInputs()

    def test_image_url_from_commit(self, monkeypatch):
        monkeypatch.setenv("GITHUB_SHA", "abc123")
        monkeypatch.setenv("RENDERCTL_IMAGE_NAME", "mendix-app")
        assert RunInputs().image_url() == "mendix-app:abc123"

    def test_image_url_requires_commit(self):
        with pytest.raises(ConfigError, match="no commit"):
            RunInputs().image_url()


class TestConfigLoader:
    """Tests for ConfigLoader."""

    def test_load_explicit_file(self, temp_config_file):
        config = ConfigLoader().load(temp_config_file)
        profile = config.get_profile()
        assert profile.render.service_id == "srv-test123"
        assert profile.monitor.poll_interval == 5
        assert profile.health.max_attempts == 3
        # Untouched sections keep their defaults
        assert profile.health.path == "/health"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            ConfigLoader().load(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path):
        bad = tmp_path / "bad.yaml"
        bad.write_text("profiles: [unclosed")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            ConfigLoader().load(bad)

    def test_invalid_values(self, tmp_path):
        bad = tmp_path / "bad.yaml"
        bad.write_text("profiles:\n  default:\n    monitor:\n      poll_interval: -1\n")
        with pytest.raises(ConfigError, match="Invalid configuration"):
            ConfigLoader().load(bad)

    def test_invalid_health_interval(self, tmp_path):
        bad = tmp_path / "bad.yaml"
        bad.write_text("profiles:\n  default:\n    health:\n      interval: -1\n")
        with pytest.raises(ConfigError, match="Invalid configuration"):
            ConfigLoader().load(bad)

    def test_non_mapping_file(self, tmp_path):
        bad = tmp_path / "list.yaml"
        bad.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="must contain a mapping"):
            ConfigLoader().load(bad)

    def test_deep_merge(self):
        loader = ConfigLoader()
        merged = loader._merge_configs([
            {"profiles": {"default": {"render": {"service_id": "srv-a", "timeout": 10}}}},
            {"profiles": {"default": {"render": {"service_id": "srv-b"}}}},
        ])
        assert merged["profiles"]["default"]["render"] == {"service_id": "srv-b", "timeout": 10}
