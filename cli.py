"""
xapi JSON CLI.

Runs one xapi XML-RPC call inside a login/logout session and prints the
result as JSON on stdout. Arguments are typed automatically: true/false,
integers, floats, otherwise strings. Never pass a session; one is created
for the call and released afterwards.

Usage:
    python cli.py VM get_all
    python cli.py --host https://xenserver.example -u root -p secret VM get_by_name_label vm01
    python cli.py --compact pool get_all
    python cli.py VM set_memory -- <vm-ref> -1      # use -- before negative numbers
"""

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

import click
import structlog
import yaml

from xapi_bridge import __version__
from xapi_bridge.core.config import resolve_connection
from xapi_bridge.core.exceptions import BridgeError
from xapi_bridge.core.logging import get_logger, setup_logging
from xapi_bridge.mapping.inference import infer_all
from xapi_bridge.mapping.json_converter import JSONValue, render
from xapi_bridge.orchestration.invoke import invoke
from xapi_bridge.rpc.client import RPCClient

logger = get_logger(__name__)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--host",
    envvar="XAPI_HOST",
    metavar="HOST",
    help="xapi host URL. Can be passed with the XAPI_HOST env variable. [default: http://127.0.0.1]",
)
@click.option(
    "--user",
    "-u",
    envvar="XAPI_USER",
    metavar="USER",
    help="Host user name. Can be passed with the XAPI_USER env variable. [default: guest]",
)
@click.option(
    "--pass",
    "-p",
    "password",
    envvar="XAPI_PASSWORD",
    metavar="PASSWORD",
    help="Host user password. Can be passed with the XAPI_PASSWORD env variable. [default: guest]",
)
@click.option(
    "--timeout",
    type=float,
    envvar="XAPI_TIMEOUT",
    metavar="SECONDS",
    help="Per-request timeout. Can be passed with the XAPI_TIMEOUT env variable. [default: 60]",
)
@click.option("--compact", is_flag=True, help="Output the result as non-prettified json.")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output (INFO level logging).")
@click.option("--debug", "-d", is_flag=True, help="Enable debug output (DEBUG level logging).")
@click.version_option(__version__, prog_name="xapi-json")
@click.argument("class_name", metavar="CLASS")
@click.argument("method", metavar="METHOD")
@click.argument("args", nargs=-1, metavar="[ARGS]...")
def main(
    host: str | None,
    user: str | None,
    password: str | None,
    timeout: float | None,
    compact: bool,
    verbose: bool,
    debug: bool,
    class_name: str,
    method: str,
    args: tuple[str, ...],
) -> None:
    """Call the case-sensitive xapi CLASS.METHOD with ARGS and print the result as JSON."""
    try:
        if debug:
            setup_logging(level="DEBUG")
        elif verbose:
            setup_logging(level="INFO")
        else:
            setup_logging()
        settings = resolve_connection(host=host, user=user, password=password, timeout=timeout)
    except (yaml.YAMLError, ValueError) as e:
        raise click.ClickException(f"Invalid configuration: {e}") from e

    structlog.contextvars.bind_contextvars(source="cli")

    arguments = infer_all(args)

    logger.debug("Starting call", extra={"host": settings.host, "class": class_name, "method": method})

    def emit(document: JSONValue) -> None:
        click.echo(render(document, compact=compact))

    try:
        with RPCClient(settings.host, timeout=settings.timeout, verify=settings.verify_tls) as channel:
            invoke(
                channel,
                class_name,
                method,
                arguments,
                user=settings.user,
                password=settings.password,
                emit=emit,
            )
    except BridgeError as e:
        logger.debug("Call failed", extra={"kind": e.kind.value, **e.details})
        click.echo(f"Error: {e}", err=True)
        sys.exit(e.exit_code)
    finally:
        structlog.contextvars.unbind_contextvars("source")


if __name__ == "__main__":
    main()
