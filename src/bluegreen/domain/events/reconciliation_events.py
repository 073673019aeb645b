"""Reconciliation domain events."""

from __future__ import annotations

from bluegreen.domain.models.base import DomainEvent


class ReconciliationStarted(DomainEvent):
    """Emitted when a lifecycle request starts reconciling."""

    request_type: str
    deployment_group_name: str
    event_type: str = "reconciliation.started"


class ReconciliationSucceeded(DomainEvent):
    """Emitted when the deployment API accepted the reconciling call."""

    deployment_group_name: str
    event_type: str = "reconciliation.succeeded"


class ReconciliationFailed(DomainEvent):
    """Emitted when reconciliation fails for any reason."""

    error_type: str
    error_message: str
    event_type: str = "reconciliation.failed"
