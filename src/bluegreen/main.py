"""Lambda entrypoint (``bluegreen.main.handler``)."""

from __future__ import annotations

from bluegreen.api.handler import handler
from bluegreen.config import get_settings
from bluegreen.infrastructure.observability.logging import setup_logging


settings = get_settings()
setup_logging(settings.observability.log_level, settings.observability.service_name)


__all__ = ["handler"]
