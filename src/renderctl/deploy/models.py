"""Deployment data models."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class StatusCategory(str, Enum):
    """Coarse classification of a remote deploy status."""

    IN_PROGRESS = "in_progress"
    SUCCESS = "success"
    FAILURE = "failure"
    UNKNOWN = "unknown"


class DeployStatus(str, Enum):
    """Deploy status values reported by the Render API."""

    CREATED = "created"
    QUEUED = "queued"
    BUILDING = "building"
    UPDATING = "updating"
    BUILD_IN_PROGRESS = "build_in_progress"
    UPDATE_IN_PROGRESS = "update_in_progress"
    PRE_DEPLOY_IN_PROGRESS = "pre_deploy_in_progress"
    LIVE = "live"
    BUILD_FAILED = "build_failed"
    UPDATE_FAILED = "update_failed"
    PRE_DEPLOY_FAILED = "pre_deploy_failed"
    CANCELED = "canceled"
    DEACTIVATED = "deactivated"

    @property
    def category(self) -> StatusCategory:
        return STATUS_CATEGORIES[self]

    @property
    def is_terminal(self) -> bool:
        return self.category in (StatusCategory.SUCCESS, StatusCategory.FAILURE)


STATUS_CATEGORIES: dict[DeployStatus, StatusCategory] = {
    DeployStatus.CREATED: StatusCategory.IN_PROGRESS,
    DeployStatus.QUEUED: StatusCategory.IN_PROGRESS,
    DeployStatus.BUILDING: StatusCategory.IN_PROGRESS,
    DeployStatus.UPDATING: StatusCategory.IN_PROGRESS,
    DeployStatus.BUILD_IN_PROGRESS: StatusCategory.IN_PROGRESS,
    DeployStatus.UPDATE_IN_PROGRESS: StatusCategory.IN_PROGRESS,
    DeployStatus.PRE_DEPLOY_IN_PROGRESS: StatusCategory.IN_PROGRESS,
    DeployStatus.LIVE: StatusCategory.SUCCESS,
    DeployStatus.BUILD_FAILED: StatusCategory.FAILURE,
    DeployStatus.UPDATE_FAILED: StatusCategory.FAILURE,
    DeployStatus.PRE_DEPLOY_FAILED: StatusCategory.FAILURE,
    DeployStatus.CANCELED: StatusCategory.FAILURE,
    DeployStatus.DEACTIVATED: StatusCategory.FAILURE,
}


def classify_status(raw: str | None) -> tuple[DeployStatus | None, StatusCategory]:
    """Map a raw status string to a known status and its category.

    Unrecognized or missing values map to (None, UNKNOWN).
    """
    if not raw:
        return None, StatusCategory.UNKNOWN
    try:
        status = DeployStatus(raw.strip().lower())
    except ValueError:
        return None, StatusCategory.UNKNOWN
    return status, status.category


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class PollResult:
    """Latest observed status of a deploy."""

    raw_status: str | None
    status: DeployStatus | None
    category: StatusCategory
    observed_at: datetime = field(default_factory=_utcnow)

    @classmethod
    def from_raw(cls, raw: str | None) -> "PollResult":
        status, category = classify_status(raw)
        return cls(raw_status=raw, status=status, category=category)

    @property
    def label(self) -> str:
        return self.raw_status if self.raw_status else "<none>"


@dataclass(frozen=True)
class ServiceEndpoint:
    """Public URL of a deployed service."""

    url: str

    def health_url(self, path: str = "/health") -> str:
        return self.url.rstrip("/") + "/" + path.lstrip("/")


class DeployOutcome(str, Enum):
    """How waiting for a deploy ended."""

    LIVE = "live"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    CANCELLED = "cancelled"


@dataclass
class DeployResult:
    """Result of waiting for a deploy to finish."""

    deploy_id: str
    outcome: DeployOutcome
    status: str | None = None
    polls: int = 0
    elapsed: float = 0.0
    message: str = ""

    @property
    def succeeded(self) -> bool:
        return self.outcome == DeployOutcome.LIVE

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "deploy_id": self.deploy_id,
            "outcome": self.outcome.value,
            "status": self.status,
            "polls": self.polls,
            "elapsed": round(self.elapsed, 1),
            "message": self.message,
        }


@dataclass
class HealthResult:
    """Result of probing a service's health endpoint."""

    url: str
    healthy: bool
    attempts: int = 0
    status_code: int | None = None
    last_error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "url": self.url,
            "healthy": self.healthy,
            "attempts": self.attempts,
            "status_code": self.status_code,
            "last_error": self.last_error,
        }
