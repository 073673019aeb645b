"""Deployment API adapters."""

from __future__ import annotations

import asyncio
import copy
from typing import Any

import boto3
import structlog
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from bluegreen.config import AwsSettings
from bluegreen.domain.errors import (
    DeploymentGroupAlreadyExistsError,
    DeploymentGroupNotFoundError,
    ExternalApiError,
)
from bluegreen.domain.models.base import generate_id
from bluegreen.domain.ports.services import DeploymentGroupClient


logger = structlog.get_logger(__name__)

ALREADY_EXISTS_CODES = frozenset({"DeploymentGroupAlreadyExistsException"})
NOT_FOUND_CODES = frozenset({
    "DeploymentGroupDoesNotExistException",
    "ApplicationDoesNotExistException",
})


def create_codedeploy_client(settings: AwsSettings) -> Any:
    """Create a boto3 CodeDeploy client that does not retry on its own."""
    config = Config(
        region_name=settings.region,
        connect_timeout=settings.connect_timeout,
        read_timeout=settings.read_timeout,
        retries={"max_attempts": settings.codedeploy_max_attempts, "mode": "standard"},
    )
    return boto3.client(
        "codedeploy",
        endpoint_url=settings.codedeploy_endpoint_url,
        config=config,
    )


def translate_client_error(error: ClientError, operation: str) -> ExternalApiError:
    """Map a botocore ``ClientError`` onto the domain error taxonomy."""
    details = error.response.get("Error", {})
    code = details.get("Code", "")
    message = details.get("Message") or str(error)
    if code in ALREADY_EXISTS_CODES:
        return DeploymentGroupAlreadyExistsError(message, code=code, operation=operation)
    if code in NOT_FOUND_CODES:
        return DeploymentGroupNotFoundError(message, code=code, operation=operation)
    return ExternalApiError(message, code=code, operation=operation)


class CodeDeployDeploymentGroupClient(DeploymentGroupClient):
    """boto3 implementation of DeploymentGroupClient.

    The SDK is synchronous, so every call runs in a worker thread.
    """

    def __init__(self, client: Any) -> None:
        self._client = client

    async def _call(self, operation: str, payload: dict[str, Any]) -> dict[str, Any]:
        method = getattr(self._client, operation)
        try:
            response: dict[str, Any] = await asyncio.to_thread(method, **payload)
        except ClientError as e:
            error = translate_client_error(e, operation)
            logger.warning(
                "codedeploy_call_rejected",
                operation=operation,
                code=error.code,
                error=str(error),
            )
            raise error from e
        except BotoCoreError as e:
            logger.warning("codedeploy_call_failed", operation=operation, error=str(e))
            raise ExternalApiError(str(e), operation=operation) from e

        logger.debug(
            "codedeploy_call_succeeded",
            operation=operation,
            request_id=response.get("ResponseMetadata", {}).get("RequestId"),
        )
        return response

    async def create_deployment_group(self, payload: dict[str, Any]) -> str:
        response = await self._call("create_deployment_group", payload)
        return str(response.get("deploymentGroupId", ""))

    async def update_deployment_group(self, payload: dict[str, Any]) -> None:
        response = await self._call("update_deployment_group", payload)
        hooks = response.get("hooksNotCleanedUp") or []
        if hooks:
            logger.warning("codedeploy_hooks_not_cleaned_up", hooks=hooks)

    async def delete_deployment_group(self, payload: dict[str, Any]) -> None:
        response = await self._call("delete_deployment_group", payload)
        hooks = response.get("hooksNotCleanedUp") or []
        if hooks:
            logger.warning("codedeploy_hooks_not_cleaned_up", hooks=hooks)


class InMemoryDeploymentGroupClient(DeploymentGroupClient):
    """In-memory deployment API for development/testing.

    Mirrors the API's behaviour for duplicate names and missing groups.
    """

    def __init__(self) -> None:
        self._groups: dict[tuple[str, str], dict[str, Any]] = {}
        self._calls: list[tuple[str, dict[str, Any]]] = []

    async def create_deployment_group(self, payload: dict[str, Any]) -> str:
        self._calls.append(("create", copy.deepcopy(payload)))
        key = (payload["applicationName"], payload["deploymentGroupName"])
        if key in self._groups:
            raise DeploymentGroupAlreadyExistsError(
                f"Deployment group {key[1]} already exists",
                code="DeploymentGroupAlreadyExistsException",
                operation="create_deployment_group",
            )
        group_id = generate_id()
        self._groups[key] = {**copy.deepcopy(payload), "deploymentGroupId": group_id}
        return group_id

    async def update_deployment_group(self, payload: dict[str, Any]) -> None:
        self._calls.append(("update", copy.deepcopy(payload)))
        application = payload["applicationName"]
        current = (application, payload["currentDeploymentGroupName"])
        if current not in self._groups:
            raise DeploymentGroupNotFoundError(
                f"Deployment group {current[1]} does not exist",
                code="DeploymentGroupDoesNotExistException",
                operation="update_deployment_group",
            )
        new_name = payload.get("newDeploymentGroupName") or current[1]
        target = (application, new_name)
        if target != current and target in self._groups:
            raise DeploymentGroupAlreadyExistsError(
                f"Deployment group {new_name} already exists",
                code="DeploymentGroupAlreadyExistsException",
                operation="update_deployment_group",
            )
        group = self._groups.pop(current)
        settings = {
            key: value for key, value in copy.deepcopy(payload).items()
            if key not in {"currentDeploymentGroupName", "newDeploymentGroupName"}
        }
        self._groups[target] = {**group, **settings, "deploymentGroupName": new_name}

    async def delete_deployment_group(self, payload: dict[str, Any]) -> None:
        self._calls.append(("delete", copy.deepcopy(payload)))
        key = (payload["applicationName"], payload["deploymentGroupName"])
        if key not in self._groups:
            raise DeploymentGroupNotFoundError(
                f"Deployment group {key[1]} does not exist",
                code="DeploymentGroupDoesNotExistException",
                operation="delete_deployment_group",
            )
        del self._groups[key]

    def get_group(self, application_name: str, name: str) -> dict[str, Any] | None:
        return self._groups.get((application_name, name))

    @property
    def calls(self) -> list[tuple[str, dict[str, Any]]]:
        return list(self._calls)

    def clear(self) -> None:
        self._groups.clear()
        self._calls.clear()
