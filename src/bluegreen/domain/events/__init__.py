"""Domain events package."""

from bluegreen.domain.events.reconciliation_events import (
    ReconciliationFailed,
    ReconciliationStarted,
    ReconciliationSucceeded,
)


__all__ = [
    "ReconciliationFailed",
    "ReconciliationStarted",
    "ReconciliationSucceeded",
]
