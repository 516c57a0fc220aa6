"""
mFi HTTP client.

Talks to the mFi sensors API:
- Login:  POST http://<ip>/login.cgi  (username=<u>&password=<p>)
- Logout: GET  http://<ip>/logout.cgi
- Status: GET  http://<ip>/sensors
- Update: PUT  http://<ip>/sensors/<port>

Every request carries the ``AIROS_SESSIONID`` cookie of the session.
"""

import logging
from typing import Any, Optional

import requests

from mfictl.core.exceptions import ProtocolError, TransportError
from mfictl.core.models import Credentials, SensorReading, index_readings
from mfictl.device.session import Session

logger = logging.getLogger(__name__)

SUCCESS = "success"


class MfiClient:
    """HTTP client for a single mFi device."""

    def __init__(self, timeout: Optional[float] = None):
        """
        Initialize client.

        Args:
            timeout: Request timeout in seconds; None waits indefinitely
        """
        self.timeout = timeout

    def _request(
        self,
        method: str,
        session: Session,
        endpoint: str,
        step: str,
        data: Optional[dict[str, Any]] = None,
    ) -> requests.Response:
        """
        Send one request to the device.

        HTTP error statuses are not treated as transport failures; the
        body is judged by the caller.

        Raises:
            TransportError: If the request could not complete
        """
        url = session.target.url(endpoint)
        try:
            return requests.request(
                method,
                url,
                data=data,
                cookies=session.cookies,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.debug(f"{method} {url} failed: {e}")
            raise TransportError.from_request_error(
                step, session.target.address, session.session_id, e
            ) from e

    def _json(self, response: requests.Response, session: Session, step: str) -> dict:
        """
        Decode a JSON reply and require a successful status.

        Raises:
            ProtocolError: If the body is not JSON or status is not "success"
        """
        logger.debug(f"The JSON output is: {response.text}")
        address = session.target.address
        try:
            body = response.json()
        except ValueError:
            raise ProtocolError(step, address, session.session_id, "invalid JSON") from None

        if not isinstance(body, dict):
            raise ProtocolError(step, address, session.session_id, "invalid JSON")

        status = body.get("status")
        if status != SUCCESS:
            detail = f'"{status}"' if status is not None else None
            raise ProtocolError(step, address, session.session_id, detail)
        return body

    def login(self, session: Session, credentials: Credentials) -> None:
        """
        Log into the device.

        The reply is not inspected; wrong credentials only show up when a
        later call is rejected.
        """
        logger.debug(
            f"Calling login with USERNAME={credentials.username} "
            f"SESSION_ID={session.session_id} IP_ADDR={session.target.address}"
        )
        self._request(
            "POST",
            session,
            "login.cgi",
            "Login to",
            data={"username": credentials.username, "password": credentials.password},
        )

    def logout(self, session: Session) -> None:
        """Log out of the device, releasing the session."""
        logger.debug(
            f"Calling logout with SESSION_ID={session.session_id} "
            f"IP_ADDR={session.target.address}"
        )
        self._request("GET", session, "logout.cgi", "Logout from")

    def get_status(self, session: Session, port: int) -> SensorReading:
        """
        Read the state of one port.

        Raises:
            TransportError: If the request could not complete
            ProtocolError: If the device did not report success or the
                port is missing from the reply
        """
        step = "Status retrieval from"
        logger.debug(
            f"Calling get_status with SESSION_ID={session.session_id} "
            f"IP_ADDR={session.target.address} PORT={port}"
        )
        response = self._request("GET", session, "sensors", step)
        body = self._json(response, session, step)

        try:
            readings = index_readings(body.get("sensors") or [])
        except (KeyError, TypeError, ValueError):
            raise ProtocolError(
                step, session.target.address, session.session_id, "malformed sensor entry"
            ) from None

        reading = readings.get(port)
        if reading is None:
            raise ProtocolError(
                step, session.target.address, session.session_id, f"port {port} not reported"
            )
        logger.debug(f"Port {port} reading: {reading}")
        return reading

    def turn_on(self, session: Session, port: int, dim_level: int = 100) -> None:
        """
        Turn a port on.

        Forces switch mode, then sets output and relay. ``dim_level`` is
        accepted but not sent; the device is only switched on.
        """
        logger.debug(
            f"Calling turn_on with SESSION_ID={session.session_id} "
            f"IP_ADDR={session.target.address} PORT={port} DIMMER_LEVEL={dim_level}"
        )
        self._set_output(session, port, 1, "Turning on")

    def turn_off(self, session: Session, port: int) -> None:
        """Turn a port off."""
        logger.debug(
            f"Calling turn_off with SESSION_ID={session.session_id} "
            f"IP_ADDR={session.target.address} PORT={port}"
        )
        self._set_output(session, port, 0, "Turning off")

    def _set_output(self, session: Session, port: int, value: int, step: str) -> None:
        endpoint = f"sensors/{port}"

        # Mode reply is not checked; only the output update decides success
        response = self._request("PUT", session, endpoint, step, data={"dimmer_mode": "switch"})
        logger.debug(f"Mode reply: {response.text}")

        response = self._request(
            "PUT", session, endpoint, step, data={"output": value, "relay": value}
        )
        self._json(response, session, step)
