"""Lambda handler for the deployment-group custom resource."""

from __future__ import annotations

import asyncio
from typing import Any

import structlog
from pydantic import ValidationError

from bluegreen.api.dependencies.services import get_service_container, ServiceContainer
from bluegreen.domain.models.lifecycle import (
    CustomResourceEvent,
    InvocationContext,
    ReconciliationResult,
)


logger = structlog.get_logger(__name__)


async def handle_event(
    event: dict[str, Any],
    context: Any,
    container: ServiceContainer,
) -> ReconciliationResult:
    """Validate the envelope and run one reconciliation.

    An envelope without a callback URL cannot be answered at all, so it is
    the one malformed input that raises instead of reporting.
    """
    try:
        envelope = CustomResourceEvent.model_validate(event)
    except ValidationError:
        logger.exception("invalid_custom_resource_event", event=event)
        raise

    structlog.contextvars.bind_contextvars(
        stack_id=envelope.stack_id,
        request_id=envelope.request_id,
        logical_resource_id=envelope.logical_resource_id,
        request_type=envelope.request_type,
    )
    try:
        logger.info(
            "custom_resource_event_received",
            physical_resource_id=envelope.physical_resource_id,
            resource_properties=envelope.resource_properties,
            old_resource_properties=envelope.old_resource_properties,
        )
        controller = container.lifecycle_controller()
        return await controller.handle(
            envelope, InvocationContext.from_lambda_context(context)
        )
    finally:
        structlog.contextvars.clear_contextvars()


def handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Lambda entrypoint."""
    container = get_service_container()
    result = asyncio.run(handle_event(event, context, container))
    return {"Status": result.status.value, "Data": result.data}
