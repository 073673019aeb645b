"""Delivery of reconciliation outcomes to the provisioning orchestrator."""

from __future__ import annotations

import structlog

from bluegreen.domain.errors import TransportError
from bluegreen.domain.models.base import generate_id
from bluegreen.domain.models.lifecycle import (
    CallbackDocument,
    CustomResourceEvent,
    InvocationContext,
    ReconciliationResult,
)
from bluegreen.domain.ports.services import CallbackResponse, CallbackTransport


logger = structlog.get_logger(__name__)

MAX_ERROR_LENGTH = 512


class CallbackReporter:
    """Reports a reconciliation result over the request's callback URL.

    This is the only way the orchestrator learns that an operation
    finished, so a delivery failure is logged in full and re-raised.
    """

    def __init__(self, transport: CallbackTransport) -> None:
        self._transport = transport

    @staticmethod
    def resolve_physical_resource_id(
        event: CustomResourceEvent,
        result: ReconciliationResult,
        context: InvocationContext,
    ) -> str:
        """Pick the identifier the orchestrator tracks the resource by.

        A failed attempt keeps the identifier the orchestrator already
        knows, so that a failure is never mistaken for a replacement. A
        Create that fails has no identifier yet and never gets the group
        name, which keeps its rollback Delete away from the group.
        """
        if result.succeeded:
            candidates = (result.physical_resource_id, event.physical_resource_id)
        else:
            candidates = (event.physical_resource_id,)
        for candidate in (*candidates, context.log_stream_name):
            if candidate:
                return candidate
        return generate_id()

    @staticmethod
    def build_reason(result: ReconciliationResult, context: InvocationContext) -> str:
        location = f"See the details in CloudWatch Log Stream: {context.log_stream_name}"
        if result.succeeded or not result.error_type:
            return location
        message = result.error_message[:MAX_ERROR_LENGTH]
        return f"{result.error_type}: {message}. {location}"

    def build_document(
        self,
        event: CustomResourceEvent,
        result: ReconciliationResult,
        context: InvocationContext,
    ) -> CallbackDocument:
        return CallbackDocument(
            status=result.status,
            reason=self.build_reason(result, context),
            physical_resource_id=self.resolve_physical_resource_id(event, result, context),
            stack_id=event.stack_id,
            request_id=event.request_id,
            logical_resource_id=event.logical_resource_id,
            data=result.data if result.succeeded else {},
        )

    async def report(
        self,
        event: CustomResourceEvent,
        result: ReconciliationResult,
        context: InvocationContext,
    ) -> CallbackResponse:
        """Deliver the status document once.

        Raises:
            TransportError: if the document could not be delivered.
        """
        document = self.build_document(event, result, context)
        body = document.to_json_bytes()
        headers = {
            "Content-Type": "application/json",
            "Content-Length": str(len(body)),
        }

        logger.info(
            "callback_sending",
            status=document.status.value,
            physical_resource_id=document.physical_resource_id,
            content_length=len(body),
        )
        try:
            response = await self._transport.put(event.response_url, body, headers)
        except TransportError as e:
            logger.exception(
                "callback_delivery_failed",
                url=event.response_url,
                headers=headers,
                body=body.decode("utf-8"),
                response_status=e.status,
                error=str(e),
            )
            raise

        logger.info(
            "callback_delivered",
            response_status=response.status,
            response_reason=response.reason,
        )
        return response
