"""Service port interfaces (hexagonal architecture)."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from bluegreen.domain.models.base import ValueObject


class DeploymentGroupClient(ABC):
    """Port for the external deployment API that owns deployment groups.

    Implementations raise ``ExternalApiError`` (or one of its subclasses)
    when the API rejects a call.
    """

    @abstractmethod
    async def create_deployment_group(self, payload: dict[str, Any]) -> str:
        """Create a deployment group. Returns the deployment group id."""

    @abstractmethod
    async def update_deployment_group(self, payload: dict[str, Any]) -> None:
        """Update (and possibly rename) a deployment group."""

    @abstractmethod
    async def delete_deployment_group(self, payload: dict[str, Any]) -> None:
        """Delete a deployment group."""


class CallbackResponse(ValueObject):
    """Response of the callback endpoint."""

    status: int
    reason: str = ""


class CallbackTransport(ABC):
    """Port for delivering a status document to the orchestrator."""

    @abstractmethod
    async def put(self, url: str, body: bytes, headers: dict[str, str]) -> CallbackResponse:
        """PUT ``body`` to ``url`` once, without retrying.

        Raises ``TransportError`` when the document was not accepted.
        """
