"""
Core components for mfictl.

Provides configuration, data models, errors, and the run controller.
"""

from mfictl.core.config import Config, load_config
from mfictl.core.exceptions import MfiError, ProtocolError, TransportError, UsageError
from mfictl.core.models import (
    Credentials,
    DeviceTarget,
    Operation,
    RunConfig,
    SensorReading,
)

__all__ = [
    "Config",
    "load_config",
    "MfiError",
    "ProtocolError",
    "TransportError",
    "UsageError",
    "Credentials",
    "DeviceTarget",
    "Operation",
    "RunConfig",
    "SensorReading",
]
