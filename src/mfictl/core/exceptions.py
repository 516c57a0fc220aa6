"""
Error types for mfictl.

Every error is terminal for the invocation; the CLI reports the message
and exits with ``exit_code``.
"""

from typing import Optional

import requests


class MfiError(Exception):
    """Base class for mFi control errors."""

    exit_code: int = 1

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class TransportError(MfiError):
    """An HTTP request to the device could not complete."""

    def __init__(self, step: str, address: str, session_id: str, code: int):
        """
        Initialize transport error.

        Args:
            step: Human description of the failing step (e.g. "Login to")
            address: Device address
            session_id: Session identifier in use
            code: curl-compatible exit code
        """
        super().__init__(
            f"{step} {address} session {session_id} failed with code {code}"
        )
        self.step = step
        self.address = address
        self.session_id = session_id
        self.code = code
        self.exit_code = code

    @classmethod
    def from_request_error(
        cls,
        step: str,
        address: str,
        session_id: str,
        error: requests.RequestException,
    ) -> "TransportError":
        """Build a TransportError from a requests exception."""
        return cls(step, address, session_id, transport_code(error))


class ProtocolError(MfiError):
    """The device answered but did not report success."""

    def __init__(
        self,
        step: str,
        address: str,
        session_id: str,
        detail: Optional[str] = None,
    ):
        if detail is None:
            detail = "no status"
        super().__init__(
            f"Status in JSON output was not success: {detail}. "
            f"{step} {address} session {session_id} failed."
        )
        self.step = step
        self.address = address
        self.session_id = session_id
        self.detail = detail


class UsageError(MfiError):
    """Invalid command line input or unsupported operation."""


# Mirrors the curl exit codes the original shell tool surfaced
CURL_UNSUPPORTED_PROTOCOL = 1
CURL_URL_MALFORMAT = 3
CURL_COULDNT_RESOLVE_HOST = 6
CURL_COULDNT_CONNECT = 7
CURL_OPERATION_TIMEDOUT = 28
CURL_TOO_MANY_REDIRECTS = 47


def transport_code(error: requests.RequestException) -> int:
    """
    Map a requests exception to a curl-compatible exit code.

    Args:
        error: Exception raised by requests

    Returns:
        Non-zero exit code
    """
    if isinstance(error, requests.Timeout):
        return CURL_OPERATION_TIMEDOUT
    if isinstance(error, (requests.exceptions.InvalidURL, requests.exceptions.MissingSchema)):
        return CURL_URL_MALFORMAT
    if isinstance(error, requests.exceptions.InvalidSchema):
        return CURL_UNSUPPORTED_PROTOCOL
    if isinstance(error, requests.TooManyRedirects):
        return CURL_TOO_MANY_REDIRECTS
    if isinstance(error, requests.ConnectionError):
        if _is_name_resolution_failure(error):
            return CURL_COULDNT_RESOLVE_HOST
        return CURL_COULDNT_CONNECT
    return 1


def _is_name_resolution_failure(error: requests.ConnectionError) -> bool:
    """Check whether a connection error was caused by DNS resolution."""
    reason = str(error)
    return (
        "NameResolutionError" in reason
        or "Name or service not known" in reason
        or "nodename nor servname" in reason
        or "getaddrinfo failed" in reason
    )
