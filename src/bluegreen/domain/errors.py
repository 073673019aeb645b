"""Error taxonomy for deployment-group reconciliation."""

from __future__ import annotations


class BlueGreenError(Exception):
    """Base class for all reconciliation errors."""


class ConfigurationError(BlueGreenError):
    """Raised when a request or spec is malformed or incomplete.

    Always raised before any call to the deployment API is attempted.
    """


class ExternalApiError(BlueGreenError):
    """Raised when the deployment API rejects an operation."""

    def __init__(self, message: str, code: str = "", operation: str = "") -> None:
        super().__init__(message)
        self.code = code
        self.operation = operation


class DeploymentGroupAlreadyExistsError(ExternalApiError):
    """Raised when creating a deployment group whose name is taken."""


class DeploymentGroupNotFoundError(ExternalApiError):
    """Raised when the deployment group or its application does not exist."""


class TransportError(BlueGreenError):
    """Raised when the completion callback could not be delivered."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class ReconciliationTimeoutError(BlueGreenError):
    """Raised when reconciliation overruns the invocation deadline."""


class InvalidStateTransitionError(BlueGreenError):
    """Raised when an invalid reconciliation state transition is attempted."""
