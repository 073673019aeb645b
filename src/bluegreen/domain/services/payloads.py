"""Builders for deployment API payloads.

The keys follow the CodeDeploy API parameter names, so a payload can be
passed to the SDK as keyword arguments unchanged.
"""

from __future__ import annotations

from typing import Any

from bluegreen.domain.models.deployment_group import (
    DeploymentGroupRef,
    DeploymentGroupSpec,
    RollbackEvent,
)


AUTO_ROLLBACK_EVENTS: tuple[RollbackEvent, ...] = (
    RollbackEvent.DEPLOYMENT_FAILURE,
    RollbackEvent.DEPLOYMENT_STOP_ON_REQUEST,
    RollbackEvent.DEPLOYMENT_STOP_ON_ALARM,
)


def _deployment_settings(spec: DeploymentGroupSpec) -> dict[str, Any]:
    """Blue/green settings shared by create and update."""
    return {
        "deploymentConfigName": spec.deployment_config_name.value,
        "serviceRoleArn": spec.service_role_arn,
        "deploymentStyle": {
            "deploymentType": "BLUE_GREEN",
            "deploymentOption": "WITH_TRAFFIC_CONTROL",
        },
        "blueGreenDeploymentConfiguration": {
            "terminateBlueInstancesOnDeploymentSuccess": {
                "action": "TERMINATE",
                "terminationWaitTimeInMinutes": spec.termination_wait_time,
            },
            "deploymentReadyOption": {
                "actionOnTimeout": "CONTINUE_DEPLOYMENT",
            },
        },
        "alarmConfiguration": {
            "enabled": True,
            "ignorePollAlarmFailure": False,
            "alarms": [{"name": name} for name in spec.target_group_alarms],
        },
        "autoRollbackConfiguration": {
            "enabled": True,
            "events": [event.value for event in AUTO_ROLLBACK_EVENTS],
        },
        "ecsServices": [
            {
                "clusterName": spec.cluster_name,
                "serviceName": spec.service_name,
            },
        ],
        "loadBalancerInfo": {
            "targetGroupPairInfoList": [
                {
                    "prodTrafficRoute": {"listenerArns": [spec.prod_listener_arn]},
                    "testTrafficRoute": {"listenerArns": [spec.test_listener_arn]},
                    "targetGroups": [
                        {"name": spec.blue_target_group},
                        {"name": spec.green_target_group},
                    ],
                },
            ],
        },
    }


def build_create_payload(spec: DeploymentGroupSpec) -> dict[str, Any]:
    """Build the create-deployment-group payload."""
    return {
        "applicationName": spec.application_name,
        "deploymentGroupName": spec.deployment_group_name,
        **_deployment_settings(spec),
    }


def build_update_payload(
    current: DeploymentGroupRef, new_spec: DeploymentGroupSpec
) -> dict[str, Any]:
    """Build the update payload moving the ``current`` group to ``new_spec``.

    The application never changes across an update, so its name comes
    from ``current``; every other setting comes from the new spec.
    """
    return {
        "applicationName": current.application_name,
        "currentDeploymentGroupName": current.deployment_group_name,
        "newDeploymentGroupName": new_spec.deployment_group_name,
        **_deployment_settings(new_spec),
    }


def build_delete_payload(group: DeploymentGroupRef) -> dict[str, Any]:
    return {
        "applicationName": group.application_name,
        "deploymentGroupName": group.deployment_group_name,
    }
