"""Tests for deployment data models."""

import pytest

from renderctl.deploy.models import (
    DeployOutcome,
    DeployResult,
    DeployStatus,
    HealthResult,
    PollResult,
    ServiceEndpoint,
    StatusCategory,
    classify_status,
)


class TestClassifyStatus:
    """Tests for mapping remote statuses to categories."""

    def test_live_is_success(self):
        assert classify_status("live") == (DeployStatus.LIVE, StatusCategory.SUCCESS)

    @pytest.mark.parametrize(
        "raw",
        ["build_failed", "update_failed", "pre_deploy_failed", "canceled", "deactivated"],
    )
    def test_failure_statuses(self, raw):
        status, category = classify_status(raw)
        assert status == DeployStatus(raw)
        assert category == StatusCategory.FAILURE

    @pytest.mark.parametrize(
        "raw",
        ["created", "queued", "building", "updating", "build_in_progress", "update_in_progress"],
    )
    def test_in_progress_statuses(self, raw):
        assert classify_status(raw)[1] == StatusCategory.IN_PROGRESS

    def test_unrecognized_is_unknown(self):
        assert classify_status("exploded") == (None, StatusCategory.UNKNOWN)

    @pytest.mark.parametrize("raw", [None, "", "null"])
    def test_empty_values_are_unknown(self, raw):
        assert classify_status(raw)[1] == StatusCategory.UNKNOWN

    def test_case_and_whitespace_tolerated(self):
        assert classify_status(" LIVE\n") == (DeployStatus.LIVE, StatusCategory.SUCCESS)

    def test_every_status_is_mapped(self):
        for status in DeployStatus:
            assert status.category in StatusCategory

    def test_terminal_statuses(self):
        terminal = {s for s in DeployStatus if s.is_terminal}
        assert DeployStatus.LIVE in terminal
        assert DeployStatus.BUILD_FAILED in terminal
        assert DeployStatus.UPDATE_FAILED in terminal
        assert DeployStatus.BUILDING not in terminal


class TestPollResult:
    """Tests for PollResult."""

    def test_from_raw(self):
        result = PollResult.from_raw("update_in_progress")
        assert result.status == DeployStatus.UPDATE_IN_PROGRESS
        assert result.category == StatusCategory.IN_PROGRESS
        assert result.label == "update_in_progress"

    def test_label_for_missing_status(self):
        assert PollResult.from_raw(None).label == "<none>"


class TestServiceEndpoint:
    """Tests for ServiceEndpoint."""

    @pytest.mark.parametrize(
        "url",
        ["https://my-app.onrender.com", "https://my-app.onrender.com/"],
    )
    def test_health_url(self, url):
        endpoint = ServiceEndpoint(url)
        assert endpoint.health_url() == "https://my-app.onrender.com/health"

    def test_custom_path(self):
        endpoint = ServiceEndpoint("https://my-app.onrender.com")
        assert endpoint.health_url("healthz") == "https://my-app.onrender.com/healthz"


class TestResults:
    """Tests for result types."""

    def test_deploy_result_succeeded_only_when_live(self):
        assert DeployResult("dep-1", DeployOutcome.LIVE).succeeded
        for outcome in (DeployOutcome.FAILED, DeployOutcome.TIMED_OUT, DeployOutcome.CANCELLED):
            assert not DeployResult("dep-1", outcome).succeeded

    def test_deploy_result_to_dict(self):
        result = DeployResult("dep-1", DeployOutcome.FAILED, status="build_failed", polls=2, elapsed=30.04)
        data = result.to_dict()
        assert data["outcome"] == "failed"
        assert data["status"] == "build_failed"
        assert data["elapsed"] == 30.0

    def test_health_result_to_dict(self):
        result = HealthResult(url="https://x/health", healthy=False, attempts=10, last_error="HTTP 503")
        assert result.to_dict()["healthy"] is False
        assert result.to_dict()["attempts"] == 10
