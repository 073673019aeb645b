"""Service dependencies for the Lambda entrypoint."""

from __future__ import annotations

from bluegreen.config import get_settings, Settings
from bluegreen.domain.ports.services import CallbackTransport, DeploymentGroupClient
from bluegreen.domain.services.callback_reporter import CallbackReporter
from bluegreen.domain.services.lifecycle_controller import LifecycleController
from bluegreen.infrastructure.aws.codedeploy_client import (
    CodeDeployDeploymentGroupClient,
    create_codedeploy_client,
)
from bluegreen.infrastructure.http.callback_transport import (
    create_pool_manager,
    Urllib3CallbackTransport,
)


class ServiceContainer:
    """Composition root for the controller.

    One container lives per warm Lambda execution environment. It holds
    clients only; nothing about a request survives the invocation.
    """

    _instance: ServiceContainer | None = None

    def __init__(
        self,
        settings: Settings | None = None,
        deployment_group_client: DeploymentGroupClient | None = None,
        callback_transport: CallbackTransport | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        # clients are created lazily
        self._deployment_group_client = deployment_group_client
        self._callback_transport = callback_transport

    @classmethod
    def get_instance(cls) -> ServiceContainer:
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        cls._instance = None

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def deployment_group_client(self) -> DeploymentGroupClient:
        if self._deployment_group_client is None:
            client = create_codedeploy_client(self._settings.aws)
            self._deployment_group_client = CodeDeployDeploymentGroupClient(client)
        return self._deployment_group_client

    @property
    def callback_transport(self) -> CallbackTransport:
        if self._callback_transport is None:
            http = create_pool_manager(self._settings.callback)
            self._callback_transport = Urllib3CallbackTransport(http)
        return self._callback_transport

    def lifecycle_controller(self) -> LifecycleController:
        return LifecycleController(
            client=self.deployment_group_client,
            reporter=CallbackReporter(self.callback_transport),
            reserved_time=self._settings.callback.reserved_time,
        )


def get_service_container() -> ServiceContainer:
    return ServiceContainer.get_instance()
