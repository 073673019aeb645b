"""Reconciliation of deployment groups driven by lifecycle requests."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Coroutine
from typing import Any

import structlog

from bluegreen.domain.errors import (
    ConfigurationError,
    DeploymentGroupNotFoundError,
    ReconciliationTimeoutError,
)
from bluegreen.domain.models.deployment_group import DeploymentGroupRef
from bluegreen.domain.models.lifecycle import (
    CreateRequest,
    CustomResourceEvent,
    DeleteRequest,
    InvocationContext,
    LifecycleRequest,
    Reconciliation,
    ReconciliationResult,
    RequestType,
    UpdateRequest,
)
from bluegreen.domain.ports.services import DeploymentGroupClient
from bluegreen.domain.services.callback_reporter import CallbackReporter
from bluegreen.domain.services.payloads import (
    build_create_payload,
    build_delete_payload,
    build_update_payload,
)


logger = structlog.get_logger(__name__)


class LifecycleController:
    """Reconciles one custom-resource request against the deployment API.

    The controller keeps no state between invocations. Every invocation
    walks a fresh ``Reconciliation`` from idle to succeeded or failed and
    always ends by handing the result to the ``CallbackReporter``; any
    error raised while reconciling becomes a failed result. Only a failure
    to deliver the callback itself propagates to the caller.

    ``reserved_time`` is the number of seconds of the invocation budget
    kept back for delivering the callback.
    """

    def __init__(
        self,
        client: DeploymentGroupClient,
        reporter: CallbackReporter,
        reserved_time: float = 16.0,
    ) -> None:
        self._client = client
        self._reporter = reporter
        self._reserved_time = reserved_time
        self._handlers: dict[
            RequestType, Callable[[LifecycleRequest], Awaitable[dict[str, Any]]]
        ] = {
            RequestType.CREATE: self._on_create,
            RequestType.UPDATE: self._on_update,
            RequestType.DELETE: self._on_delete,
        }

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    async def handle(
        self, event: CustomResourceEvent, context: InvocationContext | None = None
    ) -> ReconciliationResult:
        """Reconcile ``event`` and report the outcome.

        Raises:
            TransportError: if the outcome could not be delivered.
        """
        context = context or InvocationContext()
        reconciliation = Reconciliation(correlation_id=event.request_id)

        try:
            request = LifecycleRequest.from_event(event)
            reconciliation.start(request)
            self._log_events(reconciliation)
            data = await self._with_deadline(self._reconcile(request), context)
            result = reconciliation.succeed(data)
        except Exception as e:
            logger.exception(
                "reconciliation_error",
                request_type=event.request_type,
                error_type=type(e).__name__,
                error=str(e),
            )
            result = reconciliation.fail(e)
        self._log_events(reconciliation)

        await self._reporter.report(event, result, context)
        return result

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _reconcile(self, request: LifecycleRequest) -> dict[str, Any]:
        handler = self._handlers.get(request.request_type)
        if handler is None:
            raise ConfigurationError(f"Invalid request type: {request.request_type}")
        return await handler(request)

    async def _with_deadline(
        self, operation: Coroutine[Any, Any, dict[str, Any]], context: InvocationContext
    ) -> dict[str, Any]:
        """Run ``operation`` leaving enough of the budget to report."""
        if context.remaining_time_ms is None:
            return await operation

        timeout = context.remaining_time_ms / 1000 - self._reserved_time
        if timeout <= 0:
            operation.close()
            raise ReconciliationTimeoutError(
                "No time left in the invocation budget to reconcile"
            )
        try:
            return await asyncio.wait_for(operation, timeout=timeout)
        except asyncio.TimeoutError as e:
            raise ReconciliationTimeoutError(
                f"Reconciliation did not finish within {timeout:.1f}s"
            ) from e

    def _log_events(self, reconciliation: Reconciliation) -> None:
        for event in reconciliation.collect_events():
            logger.info(
                event.event_type,
                **event.model_dump(exclude={"event_id", "occurred_at", "event_type", "metadata"}),
            )

    # ------------------------------------------------------------------
    # Lifecycle operations
    # ------------------------------------------------------------------

    async def _on_create(self, request: CreateRequest) -> dict[str, Any]:
        payload = build_create_payload(request.spec)
        logger.info("deployment_group_create_payload", payload=payload)

        deployment_group_id = await self._client.create_deployment_group(payload)

        logger.info(
            "deployment_group_created",
            application_name=request.spec.application_name,
            deployment_group_name=request.spec.deployment_group_name,
            deployment_group_id=deployment_group_id,
        )
        return {
            "event": "Resource created",
            "deploymentGroupName": request.spec.deployment_group_name,
        }

    async def _on_update(self, request: UpdateRequest) -> dict[str, Any]:
        current = request.previous
        try:
            await self._update(current, request)
        except DeploymentGroupNotFoundError:
            if current.deployment_group_name == request.spec.deployment_group_name:
                raise
            # a rename already applied by a re-delivered or rolled back update
            current = DeploymentGroupRef(
                application_name=current.application_name,
                deployment_group_name=request.spec.deployment_group_name,
            )
            logger.info(
                "deployment_group_previous_name_absent",
                previous_name=request.previous.deployment_group_name,
                deployment_group_name=current.deployment_group_name,
            )
            await self._update(current, request)

        logger.info(
            "deployment_group_updated",
            application_name=current.application_name,
            previous_name=request.previous.deployment_group_name,
            deployment_group_name=request.spec.deployment_group_name,
        )
        return {
            "event": "Resource updated",
            "deploymentGroupName": request.spec.deployment_group_name,
        }

    async def _update(self, current: DeploymentGroupRef, request: UpdateRequest) -> None:
        payload = build_update_payload(current, request.spec)
        logger.info("deployment_group_update_payload", payload=payload)
        await self._client.update_deployment_group(payload)

    async def _on_delete(self, request: DeleteRequest) -> dict[str, Any]:
        data: dict[str, Any] = {"event": "Resource deleted"}
        if request.group is None or not request.was_created_here:
            # nothing was ever created under this resource
            logger.info(
                "deployment_group_delete_skipped",
                deployment_group_name=request.deployment_group_name,
                physical_resource_id=request.physical_resource_id,
            )
            return data

        group = request.group
        data["deploymentGroupName"] = group.deployment_group_name
        try:
            await self._client.delete_deployment_group(build_delete_payload(group))
        except DeploymentGroupNotFoundError as e:
            # re-delivered deletes and post-rename cleanups land here
            logger.info(
                "deployment_group_already_absent",
                deployment_group_name=group.deployment_group_name,
                code=e.code,
            )
        else:
            logger.info(
                "deployment_group_deleted",
                application_name=group.application_name,
                deployment_group_name=group.deployment_group_name,
            )
        return data
