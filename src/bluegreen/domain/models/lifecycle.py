"""Lifecycle requests and the reconciliation state machine."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import Field

from bluegreen.domain.errors import ConfigurationError, InvalidStateTransitionError
from bluegreen.domain.events.reconciliation_events import (
    ReconciliationFailed,
    ReconciliationStarted,
    ReconciliationSucceeded,
)
from bluegreen.domain.models.base import AggregateRoot, generate_id, ValueObject
from bluegreen.domain.models.deployment_group import DeploymentGroupRef, DeploymentGroupSpec


class RequestType(str, Enum):
    """Lifecycle request kinds issued by the provisioning orchestrator."""

    CREATE = "Create"
    UPDATE = "Update"
    DELETE = "Delete"


class CustomResourceEvent(ValueObject):
    """Raw custom-resource event as delivered by CloudFormation.

    ``RequestType`` is kept as a plain string so that an unknown kind can
    still be answered through the callback.
    """

    request_type: str = Field(..., alias="RequestType")
    response_url: str = Field(..., min_length=1, alias="ResponseURL")
    stack_id: str = Field(..., alias="StackId")
    request_id: str = Field(..., alias="RequestId")
    logical_resource_id: str = Field(..., alias="LogicalResourceId")
    resource_type: str = Field(default="", alias="ResourceType")
    physical_resource_id: str | None = Field(default=None, alias="PhysicalResourceId")
    resource_properties: dict[str, Any] = Field(default_factory=dict, alias="ResourceProperties")
    old_resource_properties: dict[str, Any] | None = Field(
        default=None, alias="OldResourceProperties"
    )

    model_config = {"frozen": True, "extra": "ignore", "populate_by_name": True}


class LifecycleRequest(ValueObject):
    """A validated Create, Update or Delete request.

    ``from_event`` returns the variant matching the request type; each
    variant carries only what its operation needs.
    """

    request_type: RequestType
    stack_id: str
    request_id: str
    logical_resource_id: str
    response_url: str
    physical_resource_id: str | None = None

    @property
    def deployment_group_name(self) -> str | None:
        """Name of the group the request reconciles towards."""
        return None

    @property
    def resulting_physical_id(self) -> str | None:
        """Identifier reported back when the request succeeds."""
        return self.deployment_group_name

    @classmethod
    def from_event(cls, event: CustomResourceEvent) -> LifecycleRequest:
        """Validate a raw event into a typed request.

        Create and the new side of Update get the full spec validation.
        Delete and the previous side of Update only need the group's
        identity, so invalid unrelated properties never block a rollback.

        Raises:
            ConfigurationError: on an unknown request type, invalid new
                properties, or an Update without previous properties.
        """
        try:
            request_type = RequestType(event.request_type)
        except ValueError as e:
            raise ConfigurationError(f"Invalid request type: {event.request_type}") from e

        common: dict[str, Any] = {
            "request_type": request_type,
            "stack_id": event.stack_id,
            "request_id": event.request_id,
            "logical_resource_id": event.logical_resource_id,
            "response_url": event.response_url,
            "physical_resource_id": event.physical_resource_id,
        }

        if request_type == RequestType.DELETE:
            try:
                group = DeploymentGroupRef.from_resource_properties(event.resource_properties)
            except ConfigurationError:
                # nothing can have been created under a missing name
                group = None
            return DeleteRequest(group=group, **common)

        spec = DeploymentGroupSpec.from_resource_properties(event.resource_properties)
        if request_type == RequestType.CREATE:
            return CreateRequest(spec=spec, **common)

        if not event.old_resource_properties:
            raise ConfigurationError("Update request carries no OldResourceProperties")
        previous = DeploymentGroupRef.from_resource_properties(event.old_resource_properties)
        return UpdateRequest(spec=spec, previous=previous, **common)


class CreateRequest(LifecycleRequest):
    spec: DeploymentGroupSpec

    @property
    def deployment_group_name(self) -> str | None:
        return self.spec.deployment_group_name


class UpdateRequest(LifecycleRequest):
    """Moves the ``previous`` group to ``spec``, renaming it if needed."""

    spec: DeploymentGroupSpec
    previous: DeploymentGroupRef

    @property
    def deployment_group_name(self) -> str | None:
        return self.spec.deployment_group_name


class DeleteRequest(LifecycleRequest):
    """Removes ``group``; ``None`` when the properties name no group."""

    group: DeploymentGroupRef | None = None

    @property
    def deployment_group_name(self) -> str | None:
        return self.group.deployment_group_name if self.group else None

    @property
    def resulting_physical_id(self) -> str | None:
        return self.physical_resource_id or self.deployment_group_name

    @property
    def was_created_here(self) -> bool:
        """Whether the orchestrator tracks ``group`` as this resource.

        A failed Create never reports the group name as its identifier, so
        the Delete that rolls it back carries a different one.
        """
        if self.group is None:
            return False
        if self.physical_resource_id is None:
            return True
        return self.physical_resource_id == self.group.deployment_group_name


class InvocationContext(ValueObject):
    """What the controller needs to know about the hosting invocation."""

    log_stream_name: str = ""
    remaining_time_ms: int | None = None

    @classmethod
    def from_lambda_context(cls, context: Any) -> InvocationContext:
        if context is None:
            return cls()
        remaining = None
        if hasattr(context, "get_remaining_time_in_millis"):
            remaining = int(context.get_remaining_time_in_millis())
        return cls(
            log_stream_name=getattr(context, "log_stream_name", "") or "",
            remaining_time_ms=remaining,
        )


class ResultStatus(str, Enum):
    """Outcome reported to the orchestrator."""

    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


class ReconciliationResult(ValueObject):
    """Outcome of one reconciliation attempt."""

    status: ResultStatus
    data: dict[str, Any] = Field(default_factory=dict)
    physical_resource_id: str | None = None
    error_type: str = ""
    error_message: str = ""

    @property
    def succeeded(self) -> bool:
        return self.status == ResultStatus.SUCCESS


class ReconciliationState(str, Enum):
    """Reconciliation lifecycle states."""

    IDLE = "idle"
    RECONCILING = "reconciling"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


# State machine transitions
VALID_TRANSITIONS: dict[ReconciliationState, set[ReconciliationState]] = {
    # an invalid request fails straight from idle
    ReconciliationState.IDLE: {ReconciliationState.RECONCILING, ReconciliationState.FAILED},
    ReconciliationState.RECONCILING: {
        ReconciliationState.SUCCEEDED, ReconciliationState.FAILED,
    },
    ReconciliationState.SUCCEEDED: set(),
    ReconciliationState.FAILED: set(),
}


class Reconciliation(AggregateRoot):
    """One reconciliation attempt for a single lifecycle request."""

    correlation_id: str = Field(default_factory=generate_id)
    state: ReconciliationState = ReconciliationState.IDLE
    request_type: str = ""
    deployment_group_name: str | None = None
    physical_resource_id: str | None = None
    result: ReconciliationResult | None = None

    def _transition_to(self, new_state: ReconciliationState) -> None:
        """Validate and execute state transition."""
        valid = VALID_TRANSITIONS.get(self.state, set())
        if new_state not in valid:
            raise InvalidStateTransitionError(
                f"Cannot transition from {self.state.value} to {new_state.value}. "
                f"Valid transitions: {[s.value for s in valid]}"
            )
        self.state = new_state
        self.touch()

    def start(self, request: LifecycleRequest) -> None:
        """Begin reconciling a validated request."""
        self._transition_to(ReconciliationState.RECONCILING)
        self.request_type = request.request_type.value
        self.deployment_group_name = request.deployment_group_name
        self.physical_resource_id = request.resulting_physical_id
        self.add_event(ReconciliationStarted(
            request_type=self.request_type,
            deployment_group_name=self.deployment_group_name or "",
            correlation_id=self.correlation_id,
        ))

    def succeed(self, data: dict[str, Any]) -> ReconciliationResult:
        """Record a successful reconciling call."""
        self._transition_to(ReconciliationState.SUCCEEDED)
        self.result = ReconciliationResult(
            status=ResultStatus.SUCCESS,
            data=data,
            physical_resource_id=self.physical_resource_id,
        )
        self.add_event(ReconciliationSucceeded(
            deployment_group_name=self.deployment_group_name or "",
            correlation_id=self.correlation_id,
        ))
        return self.result

    def fail(self, error: BaseException) -> ReconciliationResult:
        """Record a failure; the result carries no data.

        A failed result never claims the group name as its identifier, so
        the rollback Delete that follows a failed Create cannot remove a
        group this resource never created.
        """
        self._transition_to(ReconciliationState.FAILED)
        self.result = ReconciliationResult(
            status=ResultStatus.FAILED,
            error_type=type(error).__name__,
            error_message=str(error),
        )
        self.add_event(ReconciliationFailed(
            error_type=self.result.error_type,
            error_message=self.result.error_message,
            correlation_id=self.correlation_id,
        ))
        return self.result

    @property
    def is_terminal(self) -> bool:
        return self.state in {ReconciliationState.SUCCEEDED, ReconciliationState.FAILED}


class CallbackDocument(ValueObject):
    """JSON status document delivered to the callback URL."""

    status: ResultStatus = Field(..., serialization_alias="Status")
    reason: str = Field(..., serialization_alias="Reason")
    physical_resource_id: str = Field(..., serialization_alias="PhysicalResourceId")
    stack_id: str = Field(..., serialization_alias="StackId")
    request_id: str = Field(..., serialization_alias="RequestId")
    logical_resource_id: str = Field(..., serialization_alias="LogicalResourceId")
    no_echo: bool = Field(default=False, serialization_alias="NoEcho")
    data: dict[str, Any] = Field(default_factory=dict, serialization_alias="Data")

    def to_json_bytes(self) -> bytes:
        return self.model_dump_json(by_alias=True).encode("utf-8")
