"""Shared test fixtures."""

from __future__ import annotations

from typing import Any, Callable

import pytest

from bluegreen.config import Environment, Settings
from bluegreen.domain.models.deployment_group import DeploymentGroupSpec
from bluegreen.domain.models.lifecycle import CustomResourceEvent, InvocationContext
from bluegreen.domain.services.callback_reporter import CallbackReporter
from bluegreen.domain.services.lifecycle_controller import LifecycleController
from bluegreen.infrastructure.aws.codedeploy_client import InMemoryDeploymentGroupClient
from bluegreen.infrastructure.http.callback_transport import InMemoryCallbackTransport


RESPONSE_URL = "https://cloudformation-custom-resource-response.s3.amazonaws.com/signed?X-Amz=1"
STACK_ID = "arn:aws:cloudformation:us-east-1:123456789012:stack/api-bluegreen/abc"


@pytest.fixture
def settings() -> Settings:
    return Settings(environment=Environment.TESTING)


@pytest.fixture
def resource_properties() -> dict[str, Any]:
    return {
        "ServiceToken": "arn:aws:lambda:us-east-1:123456789012:function:deployment-group-lambda",
        "ApplicationName": "api-application",
        "DeploymentGroupName": "api-deployment-group",
        "DeploymentConfigName": "CodeDeployDefault.ECSCanary10Percent5Minutes",
        "ServiceRoleArn": "arn:aws:iam::123456789012:role/codedeploy-ecs",
        "BlueTargetGroup": "blue-tg",
        "GreenTargetGroup": "green-tg",
        "ProdListenerArn": "arn:aws:elasticloadbalancing:us-east-1:123456789012:listener/app/api/1/prod",
        "TestListenerArn": "arn:aws:elasticloadbalancing:us-east-1:123456789012:listener/app/api/1/test",
        "EcsClusterName": "api-cluster",
        "EcsServiceName": "api-service",
        "TerminationWaitTime": "5",
        "TargetGroupAlarms": ["api-blue-5xx-Alarm", "api-green-5xx-Alarm"],
    }


@pytest.fixture
def spec(resource_properties: dict[str, Any]) -> DeploymentGroupSpec:
    return DeploymentGroupSpec.from_resource_properties(resource_properties)


@pytest.fixture
def make_event(resource_properties: dict[str, Any]) -> Callable[..., CustomResourceEvent]:
    """Factory for custom-resource events with sensible defaults."""

    def _make(
        request_type: str = "Create",
        properties: dict[str, Any] | None = None,
        old_properties: dict[str, Any] | None = None,
        physical_resource_id: str | None = None,
    ) -> CustomResourceEvent:
        raw: dict[str, Any] = {
            "RequestType": request_type,
            "ResponseURL": RESPONSE_URL,
            "StackId": STACK_ID,
            "RequestId": "request-1",
            "LogicalResourceId": "customEcsDeploymentGroup",
            "ResourceType": "AWS::CloudFormation::CustomResource",
            "ResourceProperties": properties if properties is not None else resource_properties,
        }
        if old_properties is not None:
            raw["OldResourceProperties"] = old_properties
        if physical_resource_id is not None:
            raw["PhysicalResourceId"] = physical_resource_id
        return CustomResourceEvent.model_validate(raw)

    return _make


@pytest.fixture
def invocation_context() -> InvocationContext:
    return InvocationContext(log_stream_name="2026/10/19/[$LATEST]abcdef", remaining_time_ms=60_000)


@pytest.fixture
def deployment_group_client() -> InMemoryDeploymentGroupClient:
    return InMemoryDeploymentGroupClient()


@pytest.fixture
def callback_transport() -> InMemoryCallbackTransport:
    return InMemoryCallbackTransport()


@pytest.fixture
def reporter(callback_transport: InMemoryCallbackTransport) -> CallbackReporter:
    return CallbackReporter(callback_transport)


@pytest.fixture
def controller(
    deployment_group_client: InMemoryDeploymentGroupClient, reporter: CallbackReporter
) -> LifecycleController:
    return LifecycleController(client=deployment_group_client, reporter=reporter)
