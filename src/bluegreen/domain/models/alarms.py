"""Target-group health alarms wired into the deployment group."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import Field

from bluegreen.config import AlarmSettings
from bluegreen.domain.errors import ConfigurationError
from bluegreen.domain.models.base import ValueObject


class TargetGroupRole(str, Enum):
    """Role of a target group in a blue/green pair."""

    BLUE = "blue"
    GREEN = "green"


class AlarmKind(str, Enum):
    """Error kind an alarm watches for."""

    UNHEALTHY_HOST = "UnhealthyHost"
    HTTP_5XX = "5xx"


class MetricStatistic(str, Enum):
    AVERAGE = "Average"
    SUM = "Sum"


METRIC_NAMES: dict[AlarmKind, str] = {
    AlarmKind.UNHEALTHY_HOST: "UnHealthyHostCount",
    AlarmKind.HTTP_5XX: "HTTPCode_Target_5XX_Count",
}

METRIC_STATISTICS: dict[AlarmKind, MetricStatistic] = {
    AlarmKind.UNHEALTHY_HOST: MetricStatistic.AVERAGE,
    AlarmKind.HTTP_5XX: MetricStatistic.SUM,
}


def alarm_name(prefix: str, role: TargetGroupRole, kind: AlarmKind) -> str:
    """Derive the alarm name, e.g. ``apiblue5xxAlarm``."""
    return f"{prefix}{role.value}{kind.value}Alarm"


class AlarmMetric(ValueObject):
    """Load-balancer metric an alarm evaluates."""

    namespace: str
    metric_name: str
    statistic: MetricStatistic
    period_seconds: int
    dimensions: dict[str, str] = Field(default_factory=dict)


class AlarmDefinition(ValueObject):
    """A single target-group health alarm."""

    name: str
    description: str
    role: TargetGroupRole
    kind: AlarmKind
    metric: AlarmMetric
    threshold: float
    evaluation_periods: int

    def to_put_metric_alarm_params(self) -> dict[str, Any]:
        """Render the parameters for CloudWatch ``put_metric_alarm``."""
        return {
            "AlarmName": self.name,
            "AlarmDescription": self.description,
            "Namespace": self.metric.namespace,
            "MetricName": self.metric.metric_name,
            "Statistic": self.metric.statistic.value,
            "Period": self.metric.period_seconds,
            "Dimensions": [
                {"Name": key, "Value": value}
                for key, value in self.metric.dimensions.items()
            ],
            "Threshold": self.threshold,
            "EvaluationPeriods": self.evaluation_periods,
            "ComparisonOperator": "GreaterThanOrEqualToThreshold",
        }


class AlarmSet(ValueObject):
    """The four health alarms of one blue/green target-group pair."""

    prefix: str
    alarms: tuple[AlarmDefinition, ...]

    @property
    def names(self) -> list[str]:
        return [alarm.name for alarm in self.alarms]

    def for_role(self, role: TargetGroupRole) -> list[AlarmDefinition]:
        return [alarm for alarm in self.alarms if alarm.role == role]


def build_alarm_set(
    prefix: str,
    load_balancer: str | None,
    blue_target_group: str | None,
    green_target_group: str | None,
    settings: AlarmSettings | None = None,
) -> AlarmSet:
    """Build the health alarms for a blue/green target-group pair.

    ``load_balancer`` and the target groups are the full names used as
    CloudWatch dimensions (``app/my-alb/...``, ``targetgroup/blue/...``).
    Names are derived only from ``prefix``, role and kind, so identical
    inputs always produce identical alarm names.

    Raises:
        ConfigurationError: if the prefix, the load balancer or either
            target group is missing.
    """
    missing = [
        label
        for label, value in (
            ("prefix", prefix),
            ("load_balancer", load_balancer),
            ("blue_target_group", blue_target_group),
            ("green_target_group", green_target_group),
        )
        if not value
    ]
    if missing:
        raise ConfigurationError(
            f"Cannot build target group alarms, missing: {', '.join(missing)}"
        )

    settings = settings or AlarmSettings()
    evaluation_periods = {
        AlarmKind.UNHEALTHY_HOST: settings.unhealthy_host_evaluation_periods,
        AlarmKind.HTTP_5XX: settings.http_5xx_evaluation_periods,
    }
    target_groups = {
        TargetGroupRole.BLUE: blue_target_group,
        TargetGroupRole.GREEN: green_target_group,
    }

    alarms: list[AlarmDefinition] = []
    for role in (TargetGroupRole.BLUE, TargetGroupRole.GREEN):
        for kind in (AlarmKind.UNHEALTHY_HOST, AlarmKind.HTTP_5XX):
            metric = AlarmMetric(
                namespace=settings.namespace,
                metric_name=METRIC_NAMES[kind],
                statistic=METRIC_STATISTICS[kind],
                period_seconds=settings.period_seconds,
                dimensions={
                    "TargetGroup": str(target_groups[role]),
                    "LoadBalancer": str(load_balancer),
                },
            )
            alarms.append(AlarmDefinition(
                name=alarm_name(prefix, role, kind),
                description=(
                    f"CloudWatch Alarm for the {kind.value} errors "
                    f"of {role.value} target group"
                ),
                role=role,
                kind=kind,
                metric=metric,
                threshold=settings.threshold,
                evaluation_periods=evaluation_periods[kind],
            ))

    return AlarmSet(prefix=prefix, alarms=tuple(alarms))
