"""
Run one operation against a device.

Logs in, dispatches the requested operation, and logs out. Errors
propagate to the caller after the session has been cleaned up.
"""

import logging
from typing import Callable, Optional

from mfictl.core.models import Operation, RunConfig
from mfictl.device.client import MfiClient
from mfictl.device.session import DeviceSession, Session

logger = logging.getLogger(__name__)


def execute(
    run: RunConfig,
    client: Optional[MfiClient] = None,
    echo: Callable[[str], None] = print,
    echo_err: Optional[Callable[[str], None]] = None,
) -> None:
    """
    Carry out one authenticated operation.

    Args:
        run: Parsed run configuration
        client: HTTP client (created from ``run.timeout`` if not given)
        echo: Output function for status lines
        echo_err: Output function for a failed cleanup logout

    Raises:
        MfiError: On any transport, protocol, or usage failure
    """
    if client is None:
        client = MfiClient(timeout=run.timeout)

    with DeviceSession(client, run.target, run.credentials, echo=echo_err) as session:
        operation = Operation.parse(run.operation)
        logger.debug(f"Executing {operation.value} command")
        _dispatch(client, session, run, operation, echo)


def _dispatch(
    client: MfiClient,
    session: Session,
    run: RunConfig,
    operation: Operation,
    echo: Callable[[str], None],
) -> None:
    port = run.target.port

    if operation is Operation.ON:
        client.turn_on(session, port, run.dim_level)
    elif operation is Operation.OFF:
        client.turn_off(session, port)

    if not operation.is_mutating or run.show_status:
        reading = client.get_status(session, port)
        echo(reading.describe(run.target.address))
