"""Desired state of an ECS blue/green deployment group."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import Field, field_validator, model_validator, ValidationError

from bluegreen.domain.errors import ConfigurationError
from bluegreen.domain.models.base import ValueObject


class DeploymentConfigName(str, Enum):
    """Traffic-shifting strategies available to ECS deployment groups."""

    LINEAR_10_PERCENT_EVERY_1_MINUTE = "CodeDeployDefault.ECSLinear10PercentEvery1Minutes"
    LINEAR_10_PERCENT_EVERY_3_MINUTES = "CodeDeployDefault.ECSLinear10PercentEvery3Minutes"
    CANARY_10_PERCENT_5_MINUTES = "CodeDeployDefault.ECSCanary10Percent5Minutes"
    CANARY_10_PERCENT_15_MINUTES = "CodeDeployDefault.ECSCanary10Percent15Minutes"
    ALL_AT_ONCE = "CodeDeployDefault.ECSAllAtOnce"


class RollbackEvent(str, Enum):
    """Events that trigger an automatic rollback."""

    DEPLOYMENT_FAILURE = "DEPLOYMENT_FAILURE"
    DEPLOYMENT_STOP_ON_ALARM = "DEPLOYMENT_STOP_ON_ALARM"
    DEPLOYMENT_STOP_ON_REQUEST = "DEPLOYMENT_STOP_ON_REQUEST"


def _validation_problems(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in err['loc']) or 'spec'}: {err['msg']}"
        for err in error.errors()
    )


class DeploymentGroupRef(ValueObject):
    """Identity of a deployment group: its application and name.

    This is all that Delete, and the previous side of an Update, need.
    Parsing it ignores every other property, so a property set that failed
    full validation can still be deleted or rolled back.
    """

    application_name: str = Field(..., min_length=1, alias="ApplicationName")
    deployment_group_name: str = Field(..., min_length=1, alias="DeploymentGroupName")

    model_config = {"frozen": True, "extra": "ignore", "populate_by_name": True}

    @classmethod
    def from_resource_properties(cls, properties: dict[str, Any] | None) -> DeploymentGroupRef:
        """Parse the application and group names.

        Raises:
            ConfigurationError: if either name is missing.
        """
        try:
            return cls.model_validate(properties or {})
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid deployment group reference: {_validation_problems(e)}"
            ) from e


class DeploymentGroupSpec(ValueObject):
    """Validated deployment-group parameters of a single request.

    Field aliases are the custom-resource property names, so a spec can be
    parsed straight from ``ResourceProperties``.
    """

    application_name: str = Field(..., min_length=1, alias="ApplicationName")
    deployment_group_name: str = Field(..., min_length=1, alias="DeploymentGroupName")
    deployment_config_name: DeploymentConfigName = Field(..., alias="DeploymentConfigName")
    service_role_arn: str = Field(..., min_length=1, alias="ServiceRoleArn")
    blue_target_group: str = Field(..., min_length=1, alias="BlueTargetGroup")
    green_target_group: str = Field(..., min_length=1, alias="GreenTargetGroup")
    prod_listener_arn: str = Field(..., min_length=1, alias="ProdListenerArn")
    test_listener_arn: str = Field(..., min_length=1, alias="TestListenerArn")
    cluster_name: str = Field(..., min_length=1, alias="EcsClusterName")
    service_name: str = Field(..., min_length=1, alias="EcsServiceName")
    termination_wait_time: int = Field(..., ge=0, alias="TerminationWaitTime")
    target_group_alarms: tuple[str, ...] = Field(..., min_length=1, alias="TargetGroupAlarms")

    model_config = {"frozen": True, "extra": "ignore", "populate_by_name": True}

    @field_validator("target_group_alarms")
    @classmethod
    def _unique_alarm_names(cls, alarms: tuple[str, ...]) -> tuple[str, ...]:
        if any(not name for name in alarms):
            raise ValueError("alarm names must not be empty")
        # keep the first occurrence, preserving order
        return tuple(dict.fromkeys(alarms))

    @model_validator(mode="after")
    def _distinct_pairs(self) -> DeploymentGroupSpec:
        if self.blue_target_group == self.green_target_group:
            raise ValueError("blue and green target groups must be distinct")
        if self.prod_listener_arn == self.test_listener_arn:
            raise ValueError("prod and test listeners must be distinct")
        return self

    @property
    def ref(self) -> DeploymentGroupRef:
        return DeploymentGroupRef(
            application_name=self.application_name,
            deployment_group_name=self.deployment_group_name,
        )

    @classmethod
    def from_resource_properties(cls, properties: dict[str, Any] | None) -> DeploymentGroupSpec:
        """Parse custom-resource properties into a spec.

        Raises:
            ConfigurationError: if any property is missing or invalid.
        """
        if not properties:
            raise ConfigurationError("Resource properties are missing")
        try:
            return cls.model_validate(properties)
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid deployment group properties: {_validation_problems(e)}"
            ) from e
