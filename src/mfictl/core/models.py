"""
Data models for mfictl.

Defines the device target, credentials, per-port sensor readings and the
immutable run configuration built from the command line.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from mfictl.core.exceptions import UsageError

DEFAULT_USERNAME = "ubnt"
DEFAULT_PASSWORD = "ubnt"
DEFAULT_PORT = 1
DEFAULT_DIM_LEVEL = 100
SWITCH_MODE = "switch"

logger = logging.getLogger(__name__)


class Operation(Enum):
    """Operations supported against a device."""

    STATUS = "STATUS"
    ON = "ON"
    OFF = "OFF"

    @classmethod
    def parse(cls, keyword: str) -> "Operation":
        """
        Parse an operation keyword, ignoring case.

        Raises:
            UsageError: If the keyword is not a supported operation
        """
        try:
            return cls(keyword.upper())
        except ValueError:
            raise UsageError(f"Unsupported operation: {keyword}") from None

    @property
    def is_mutating(self) -> bool:
        return self is not Operation.STATUS


@dataclass(frozen=True)
class DeviceTarget:
    """Address of an mFi device and the port being controlled."""

    address: str
    port: int = DEFAULT_PORT
    scheme: str = "http"

    @property
    def base_url(self) -> str:
        """Base URL for the device, honoring an explicit scheme in the address."""
        if "://" in self.address:
            return self.address.rstrip("/")
        return f"{self.scheme}://{self.address}"

    def url(self, endpoint: str) -> str:
        """Build the full URL for an API endpoint (e.g. "sensors/1")."""
        return f"{self.base_url}/{endpoint.lstrip('/')}"


@dataclass(frozen=True)
class Credentials:
    """Login credentials for the device."""

    username: str = DEFAULT_USERNAME
    password: str = field(default=DEFAULT_PASSWORD, repr=False)


@dataclass(frozen=True)
class SensorReading:
    """State of one device port as reported by ``GET /sensors``."""

    port: int
    output: int
    dimmer_level: int
    dimmer_mode: str

    # Metering fields, present on most firmware
    relay: Optional[int] = None
    power: Optional[float] = None
    current: Optional[float] = None
    voltage: Optional[float] = None
    powerfactor: Optional[float] = None
    enabled: Optional[int] = None
    lock: Optional[int] = None
    thismonth: Optional[int] = None
    prevmonth: Optional[int] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SensorReading":
        """
        Create SensorReading from a JSON sensor entry.

        Raises:
            KeyError: If a required field is missing
            ValueError: If a required field is not numeric
        """
        return cls(
            port=int(data["port"]),
            output=int(data["output"]),
            dimmer_level=int(data.get("dimmer_level", DEFAULT_DIM_LEVEL)),
            dimmer_mode=str(data.get("dimmer_mode", SWITCH_MODE)),
            relay=data.get("relay"),
            power=data.get("power"),
            current=data.get("current"),
            voltage=data.get("voltage"),
            powerfactor=data.get("powerfactor"),
            enabled=data.get("enabled"),
            lock=data.get("lock"),
            thismonth=data.get("thismonth"),
            prevmonth=data.get("prevmonth"),
        )

    @property
    def is_on(self) -> bool:
        return self.output != 0

    @property
    def is_switch_mode(self) -> bool:
        return self.dimmer_mode == SWITCH_MODE

    @property
    def displayed_level(self) -> int:
        """Level shown to the user; switches always report full scale."""
        if self.is_switch_mode:
            return 100
        return self.dimmer_level

    @property
    def qualifier(self) -> str:
        # A dimmer at a low level is only mostly off
        if self.is_switch_mode:
            return ""
        return " (mostly)"

    def describe(self, address: str, now: Optional[datetime] = None) -> str:
        """
        Format the timestamped status line for this reading.

        Args:
            address: Device address to show
            now: Timestamp to use (defaults to the current local time)

        Returns:
            Status line, e.g. "... : The mFi 10.0.0.5 port 1 is now ON at 100%."
        """
        if now is None:
            now = datetime.now().astimezone()
        ts = now.strftime("%a %b %d %H:%M:%S %Z %Y")
        state = "ON" if self.is_on else "OFF"
        return (
            f"{ts} : The mFi {address} port {self.port} is now {state} "
            f"at {self.displayed_level}%{self.qualifier}."
        )


def index_readings(sensors: list[dict[str, Any]]) -> dict[int, SensorReading]:
    """Build a port-number lookup from the ``sensors`` array."""
    readings = {}
    for entry in sensors:
        reading = SensorReading.from_dict(entry)
        readings[reading.port] = reading
    return readings


def parse_dim_level(value: str) -> int:
    """
    Parse a dim percentage such as "50" or "50%".

    The level is never sent to the device, so a value that is not an
    integer between 0 and 100 falls back to the default instead of
    stopping the run.
    """
    text = value.strip().rstrip("%")
    try:
        level = int(text)
    except ValueError:
        logger.debug(f"Ignoring invalid dim level {value!r}, using {DEFAULT_DIM_LEVEL}")
        return DEFAULT_DIM_LEVEL
    if not 0 <= level <= 100:
        logger.debug(f"Ignoring out of range dim level {value!r}, using {DEFAULT_DIM_LEVEL}")
        return DEFAULT_DIM_LEVEL
    return level


@dataclass(frozen=True)
class RunConfig:
    """Everything one invocation needs, built once from the command line."""

    target: DeviceTarget
    operation: str
    credentials: Credentials = field(default_factory=Credentials)
    dim_level: int = DEFAULT_DIM_LEVEL
    show_status: bool = False
    timeout: Optional[float] = None
