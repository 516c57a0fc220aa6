"""
Command-line interface for mfictl.

Turns a Ubiquiti mFi port on or off, or reports its status.
"""

import logging
import sys
from pathlib import Path

import click

from mfictl import __version__
from mfictl.core.config import Config, load_config
from mfictl.core.controller import execute
from mfictl.core.exceptions import MfiError
from mfictl.core.models import (
    DEFAULT_DIM_LEVEL,
    DEFAULT_PASSWORD,
    DEFAULT_USERNAME,
    Credentials,
    DeviceTarget,
    RunConfig,
    parse_dim_level,
)

logger = logging.getLogger(__name__)

CONTEXT_SETTINGS = {
    "help_option_names": ["-h", "--help"],
    "ignore_unknown_options": True,
}


class MfiCommand(click.Command):
    """Command whose option parsing errors exit with status 1."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as e:
            e.exit_code = 1
            raise


def _setup_logging(verbose: bool, config: Config) -> None:
    """Send log output to stderr at DEBUG (verbose) or the configured level."""
    if verbose:
        level = logging.DEBUG
    else:
        level = logging.getLevelName(str(config.log_level).upper())
        if not isinstance(level, int):
            level = logging.WARNING
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )
    logging.getLogger().setLevel(level)


def _usage_exit(ctx: click.Context, message: str) -> None:
    """Print usage and an error message to stderr, then exit 1."""
    click.echo(ctx.get_usage(), err=True)
    click.echo(message, err=True)
    sys.exit(1)


@click.command(cls=MfiCommand, context_settings=CONTEXT_SETTINGS)
@click.version_option(version=__version__, prog_name="mfictl")
@click.option("-v", "--verbose", is_flag=True, help="Print debugging output to stderr")
@click.option(
    "-l", "--log-status", "show_status", is_flag=True,
    help="Print the device status after ON or OFF completes",
)
@click.option("-p", "--port", type=int, help="Device port to control (default: 1)")
@click.option(
    "-u", "--username", default=DEFAULT_USERNAME, show_default=True,
    help="User name to log into the device",
)
@click.option(
    "-a", "--password", default=DEFAULT_PASSWORD,
    help="Password to log into the device (default: factory password)",
)
@click.option(
    "-c", "--config", "config_path", type=click.Path(exists=True, path_type=Path),
    help="Path to config file"
)
@click.argument(
    "args", nargs=-1, type=click.UNPROCESSED,
    metavar="<device_ip> ON [<dim%>] | OFF | STATUS",
)
@click.pass_context
def main(
    ctx: click.Context,
    verbose: bool,
    show_status: bool,
    port: int | None,
    username: str,
    password: str,
    config_path: Path | None,
    args: tuple[str, ...],
) -> None:
    """Control a Ubiquiti mFi device.

    The device at DEVICE_IP (an IP address or DNS name) is turned on at
    the given dim level (100% if not specified), turned off, or its
    current status is printed.

    The dim level is accepted for compatibility but is not sent to the
    device; ON only switches the output on.
    """
    config = load_config(config_path)
    _setup_logging(verbose, config)

    unknown = [arg for arg in args if arg.startswith("-") and len(arg) > 1]
    positionals = [arg for arg in args if arg not in unknown]

    for option in unknown:
        click.echo(ctx.get_usage(), err=True)
        click.echo(
            f"*** The command line option {option} is not recognized and will be ignored",
            err=True,
        )

    if not positionals:
        _usage_exit(ctx, "*** An IP address or DNS name of the mFi device is required.")
    if len(positionals) < 2:
        _usage_exit(ctx, "*** An operation to perform (ON, OFF, STATUS) is required.")

    address, operation, *extra = positionals

    dim_level = DEFAULT_DIM_LEVEL
    if operation.upper() == "ON" and extra:
        dim_level = parse_dim_level(extra.pop(0))
    if extra:
        logger.debug(f"Ignoring extra arguments: {' '.join(extra)}")

    run = RunConfig(
        target=DeviceTarget(
            address=address,
            port=port if port is not None else config.device.default_port,
            scheme=config.device.scheme,
        ),
        operation=operation,
        credentials=Credentials(username=username, password=password),
        dim_level=dim_level,
        show_status=show_status,
        timeout=config.device.timeout,
    )

    try:
        execute(run, echo=click.echo, echo_err=lambda msg: click.echo(msg, err=True))
    except MfiError as e:
        click.echo(e.message, err=True)
        sys.exit(e.exit_code)


if __name__ == "__main__":
    main()
