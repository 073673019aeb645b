"""Controller configuration using pydantic-settings."""

from __future__ import annotations

from enum import Enum
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class Environment(str, Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class AwsSettings(BaseSettings):
    """Deployment API client configuration."""

    region: str = Field(default="us-east-1", alias="AWS_REGION")
    codedeploy_endpoint_url: str | None = Field(default=None, alias="CODEDEPLOY_ENDPOINT_URL")
    codedeploy_max_attempts: int = Field(default=1, ge=1, alias="CODEDEPLOY_MAX_ATTEMPTS")
    connect_timeout: int = Field(default=5, alias="CODEDEPLOY_CONNECT_TIMEOUT")
    read_timeout: int = Field(default=20, alias="CODEDEPLOY_READ_TIMEOUT")

    model_config = {"extra": "ignore", "populate_by_name": True}


class CallbackSettings(BaseSettings):
    """Callback delivery configuration."""

    connect_timeout: float = Field(default=5.0, gt=0, alias="CALLBACK_CONNECT_TIMEOUT")
    read_timeout: float = Field(default=10.0, gt=0, alias="CALLBACK_READ_TIMEOUT")
    # Slack on top of the worst-case PUT, for building and logging the document
    deadline_margin: float = Field(default=1.0, ge=0, alias="CALLBACK_DEADLINE_MARGIN")

    model_config = {"env_prefix": "CALLBACK_", "extra": "ignore", "populate_by_name": True}

    @property
    def reserved_time(self) -> float:
        """Seconds of the invocation budget held back for the callback.

        Covers a PUT that uses up both its connect and read timeouts.
        """
        return self.connect_timeout + self.read_timeout + self.deadline_margin


class AlarmSettings(BaseSettings):
    """Target-group health alarm constants."""

    namespace: str = Field(default="AWS/ApplicationELB", alias="ALARM_NAMESPACE")
    threshold: float = Field(default=1, alias="ALARM_THRESHOLD")
    period_seconds: int = Field(default=300, alias="ALARM_PERIOD_SECONDS")
    unhealthy_host_evaluation_periods: int = Field(
        default=2, ge=1, alias="ALARM_UNHEALTHY_HOST_EVALUATION_PERIODS"
    )
    http_5xx_evaluation_periods: int = Field(
        default=1, ge=1, alias="ALARM_5XX_EVALUATION_PERIODS"
    )

    model_config = {"env_prefix": "ALARM_", "extra": "ignore", "populate_by_name": True}


class ObservabilitySettings(BaseSettings):
    """Observability configuration."""

    service_name: str = Field(default="deployment-group-controller", alias="SERVICE_NAME")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    model_config = {"env_prefix": "OBS_", "extra": "ignore", "populate_by_name": True}


class Settings(BaseSettings):
    """Main controller settings."""

    environment: Environment = Field(default=Environment.PRODUCTION, alias="ENVIRONMENT")

    aws: AwsSettings = Field(default_factory=AwsSettings)
    callback: CallbackSettings = Field(default_factory=CallbackSettings)
    alarms: AlarmSettings = Field(default_factory=AlarmSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    model_config = {"env_prefix": "", "extra": "ignore", "populate_by_name": True}


@lru_cache
def get_settings() -> Settings:
    """Get cached controller settings."""
    return Settings()
