"""Domain models package."""

from bluegreen.domain.models.alarms import (
    AlarmDefinition,
    AlarmKind,
    AlarmMetric,
    AlarmSet,
    build_alarm_set,
    TargetGroupRole,
)
from bluegreen.domain.models.base import (
    AggregateRoot,
    DomainEvent,
    generate_id,
    utc_now,
    ValueObject,
)
from bluegreen.domain.models.deployment_group import (
    DeploymentConfigName,
    DeploymentGroupRef,
    DeploymentGroupSpec,
    RollbackEvent,
)
from bluegreen.domain.models.lifecycle import (
    CallbackDocument,
    CreateRequest,
    CustomResourceEvent,
    DeleteRequest,
    InvocationContext,
    LifecycleRequest,
    Reconciliation,
    ReconciliationResult,
    ReconciliationState,
    RequestType,
    ResultStatus,
    UpdateRequest,
    VALID_TRANSITIONS,
)


__all__ = [
    "AggregateRoot",
    "AlarmDefinition",
    "AlarmKind",
    "AlarmMetric",
    "AlarmSet",
    "CallbackDocument",
    "CreateRequest",
    "CustomResourceEvent",
    "DeleteRequest",
    "DeploymentConfigName",
    "DeploymentGroupRef",
    "DeploymentGroupSpec",
    "DomainEvent",
    "InvocationContext",
    "LifecycleRequest",
    "Reconciliation",
    "ReconciliationResult",
    "ReconciliationState",
    "RequestType",
    "ResultStatus",
    "RollbackEvent",
    "TargetGroupRole",
    "UpdateRequest",
    "VALID_TRANSITIONS",
    "ValueObject",
    "build_alarm_set",
    "generate_id",
    "utc_now",
]
