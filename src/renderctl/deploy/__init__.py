"""Deployment monitoring module."""

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
from renderctl.deploy.monitor import DeploymentMonitor

__all__ = [
    "DeployOutcome",
    "DeployResult",
    "DeployStatus",
    "DeploymentMonitor",
    "HealthResult",
    "PollResult",
    "ServiceEndpoint",
    "StatusCategory",
    "classify_status",
]
