"""
Device session handling.

A session is an opaque 32-digit identifier the device accepts as the
``AIROS_SESSIONID`` cookie. One is generated per invocation and released
by logging out.
"""

import logging
import secrets
from dataclasses import dataclass
from types import TracebackType
from typing import TYPE_CHECKING, Callable, Optional

from mfictl.core.exceptions import TransportError
from mfictl.core.models import Credentials, DeviceTarget

if TYPE_CHECKING:
    from mfictl.device.client import MfiClient

logger = logging.getLogger(__name__)

SESSION_COOKIE = "AIROS_SESSIONID"
SESSION_GROUPS = 8


def generate_session_id() -> str:
    """Return a 32-character decimal session id made of eight 4-digit groups."""
    return "".join(f"{secrets.randbelow(10000):04d}" for _ in range(SESSION_GROUPS))


@dataclass(frozen=True)
class Session:
    """An authenticated session with one device."""

    session_id: str
    target: DeviceTarget

    @classmethod
    def create(cls, target: DeviceTarget) -> "Session":
        return cls(session_id=generate_session_id(), target=target)

    @property
    def cookies(self) -> dict[str, str]:
        return {SESSION_COOKIE: self.session_id}


class DeviceSession:
    """
    Context manager that logs into a device and always logs out again.

    Entering logs in; a login failure propagates without any logout since
    no session was established. Leaving normally logs out and lets a
    logout failure propagate. Leaving with an error makes a
    best-effort logout and keeps the original error.
    """

    def __init__(
        self,
        client: "MfiClient",
        target: DeviceTarget,
        credentials: Credentials,
        echo: Optional[Callable[[str], None]] = None,
    ):
        """
        Initialize device session.

        Args:
            client: HTTP client used for login/logout
            target: Device to log into
            credentials: Login credentials
            echo: Optional callable used to report a failed cleanup logout
        """
        self.client = client
        self.target = target
        self.credentials = credentials
        self.echo = echo
        self.session: Optional[Session] = None

    def __enter__(self) -> Session:
        session = Session.create(self.target)
        self.client.login(session, self.credentials)
        self.session = session
        return session

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        if self.session is None:
            return

        session, self.session = self.session, None

        if exc is None:
            self.client.logout(session)
            return

        if not isinstance(exc, Exception):
            return

        try:
            self.client.logout(session)
        except TransportError as e:
            logger.warning(f"Cleanup logout failed: {e.message}")
            if self.echo is not None:
                self.echo(e.message)
