"""Unit tests for lifecycle requests and the reconciliation state machine."""

from __future__ import annotations

import json
from typing import Any, Callable
from unittest.mock import MagicMock

import pytest

from bluegreen.domain.errors import ConfigurationError, InvalidStateTransitionError
from bluegreen.domain.models.deployment_group import DeploymentGroupRef
from bluegreen.domain.models.lifecycle import (
    CallbackDocument,
    CreateRequest,
    CustomResourceEvent,
    DeleteRequest,
    InvocationContext,
    LifecycleRequest,
    Reconciliation,
    ReconciliationState,
    RequestType,
    ResultStatus,
    UpdateRequest,
    VALID_TRANSITIONS,
)


class TestLifecycleRequest:
    def test_create(self, make_event: Callable[..., CustomResourceEvent]) -> None:
        request = LifecycleRequest.from_event(make_event("Create"))
        assert isinstance(request, CreateRequest)
        assert request.request_type == RequestType.CREATE
        assert request.spec.deployment_group_name == "api-deployment-group"
        assert request.resulting_physical_id == "api-deployment-group"
        assert request.request_id == "request-1"

    def test_update_carries_spec_and_previous_group(
        self,
        make_event: Callable[..., CustomResourceEvent],
        resource_properties: dict[str, Any],
    ) -> None:
        new_properties = {**resource_properties, "DeploymentGroupName": "api-dg-v2"}
        request = LifecycleRequest.from_event(
            make_event("Update", properties=new_properties, old_properties=resource_properties)
        )
        assert isinstance(request, UpdateRequest)
        assert request.previous == DeploymentGroupRef(
            application_name="api-application", deployment_group_name="api-deployment-group"
        )
        assert request.spec.deployment_group_name == "api-dg-v2"

    def test_update_ignores_invalid_previous_settings(
        self,
        make_event: Callable[..., CustomResourceEvent],
        resource_properties: dict[str, Any],
    ) -> None:
        old_properties = {
            **resource_properties,
            "DeploymentConfigName": "CodeDeployDefault.Nope",
            "GreenTargetGroup": resource_properties["BlueTargetGroup"],
        }
        request = LifecycleRequest.from_event(
            make_event("Update", old_properties=old_properties)
        )
        assert isinstance(request, UpdateRequest)
        assert request.previous.deployment_group_name == "api-deployment-group"

    def test_update_validates_new_properties(
        self,
        make_event: Callable[..., CustomResourceEvent],
        resource_properties: dict[str, Any],
    ) -> None:
        new_properties = {**resource_properties, "DeploymentConfigName": "CodeDeployDefault.Nope"}
        with pytest.raises(ConfigurationError, match="Invalid deployment group properties"):
            LifecycleRequest.from_event(make_event(
                "Update", properties=new_properties, old_properties=resource_properties
            ))

    def test_update_without_old_properties(
        self, make_event: Callable[..., CustomResourceEvent]
    ) -> None:
        with pytest.raises(ConfigurationError, match="OldResourceProperties"):
            LifecycleRequest.from_event(make_event("Update"))

    def test_delete_needs_only_names(
        self,
        make_event: Callable[..., CustomResourceEvent],
        resource_properties: dict[str, Any],
    ) -> None:
        properties = {**resource_properties, "GreenTargetGroup": "blue-tg"}
        del properties["ServiceRoleArn"]
        request = LifecycleRequest.from_event(
            make_event("Delete", properties=properties, physical_resource_id="api-deployment-group")
        )
        assert isinstance(request, DeleteRequest)
        assert request.group is not None
        assert request.group.application_name == "api-application"
        assert request.was_created_here
        assert request.resulting_physical_id == "api-deployment-group"

    def test_delete_without_names(self, make_event: Callable[..., CustomResourceEvent]) -> None:
        request = LifecycleRequest.from_event(
            make_event("Delete", properties={}, physical_resource_id="stream")
        )
        assert isinstance(request, DeleteRequest)
        assert request.group is None
        assert not request.was_created_here
        assert request.resulting_physical_id == "stream"

    def test_delete_of_other_resource_id(
        self, make_event: Callable[..., CustomResourceEvent]
    ) -> None:
        request = LifecycleRequest.from_event(
            make_event("Delete", physical_resource_id="2026/10/19/[$LATEST]abcdef")
        )
        assert isinstance(request, DeleteRequest)
        assert not request.was_created_here

    def test_unknown_request_type(self, make_event: Callable[..., CustomResourceEvent]) -> None:
        with pytest.raises(ConfigurationError, match="Invalid request type: Replace"):
            LifecycleRequest.from_event(make_event("Replace"))


class TestInvocationContext:
    def test_from_lambda_context(self) -> None:
        context = MagicMock()
        context.log_stream_name = "stream"
        context.get_remaining_time_in_millis.return_value = 30_000
        invocation = InvocationContext.from_lambda_context(context)
        assert invocation.log_stream_name == "stream"
        assert invocation.remaining_time_ms == 30_000

    def test_without_context(self) -> None:
        invocation = InvocationContext.from_lambda_context(None)
        assert invocation.remaining_time_ms is None
        assert invocation.log_stream_name == ""


class TestReconciliation:
    def test_initial_state(self) -> None:
        assert Reconciliation().state == ReconciliationState.IDLE

    def test_success_path(self, make_event: Callable[..., CustomResourceEvent]) -> None:
        reconciliation = Reconciliation()
        reconciliation.start(LifecycleRequest.from_event(make_event()))
        assert reconciliation.state == ReconciliationState.RECONCILING
        result = reconciliation.succeed({"event": "Resource created"})
        assert reconciliation.state == ReconciliationState.SUCCEEDED
        assert reconciliation.is_terminal
        assert result.status == ResultStatus.SUCCESS
        assert result.physical_resource_id == "api-deployment-group"

    def test_fail_from_idle(self) -> None:
        reconciliation = Reconciliation()
        result = reconciliation.fail(ConfigurationError("bad"))
        assert reconciliation.state == ReconciliationState.FAILED
        assert result.data == {}
        assert result.error_type == "ConfigurationError"
        assert result.physical_resource_id is None

    def test_failure_after_start_claims_no_physical_id(
        self, make_event: Callable[..., CustomResourceEvent]
    ) -> None:
        reconciliation = Reconciliation()
        reconciliation.start(LifecycleRequest.from_event(make_event()))
        result = reconciliation.fail(RuntimeError("boom"))
        assert result.physical_resource_id is None

    def test_emits_events(self, make_event: Callable[..., CustomResourceEvent]) -> None:
        reconciliation = Reconciliation(correlation_id="request-1")
        reconciliation.start(LifecycleRequest.from_event(make_event()))
        reconciliation.fail(RuntimeError("boom"))
        events = reconciliation.collect_events()
        assert [e.event_type for e in events] == [
            "reconciliation.started",
            "reconciliation.failed",
        ]
        assert all(e.correlation_id == "request-1" for e in events)

    def test_terminal_states_are_final(self) -> None:
        reconciliation = Reconciliation()
        reconciliation.fail(RuntimeError("boom"))
        with pytest.raises(InvalidStateTransitionError):
            reconciliation.succeed({})

    def test_cannot_succeed_from_idle(self) -> None:
        with pytest.raises(InvalidStateTransitionError):
            Reconciliation().succeed({})

    def test_transition_table(self) -> None:
        assert VALID_TRANSITIONS[ReconciliationState.SUCCEEDED] == set()
        assert VALID_TRANSITIONS[ReconciliationState.FAILED] == set()


class TestCallbackDocument:
    def test_serialized_with_callback_field_names(self) -> None:
        document = CallbackDocument(
            status=ResultStatus.SUCCESS,
            reason="See the details in CloudWatch Log Stream: stream",
            physical_resource_id="api-deployment-group",
            stack_id="stack",
            request_id="request-1",
            logical_resource_id="customEcsDeploymentGroup",
            data={"deploymentGroupName": "api-deployment-group"},
        )
        body = json.loads(document.to_json_bytes())
        assert body == {
            "Status": "SUCCESS",
            "Reason": "See the details in CloudWatch Log Stream: stream",
            "PhysicalResourceId": "api-deployment-group",
            "StackId": "stack",
            "RequestId": "request-1",
            "LogicalResourceId": "customEcsDeploymentGroup",
            "NoEcho": False,
            "Data": {"deploymentGroupName": "api-deployment-group"},
        }
