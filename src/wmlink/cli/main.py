from pathlib import Path
from typing import BinaryIO

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from wmlink import __version__
from wmlink.ipc.client import send_command
from wmlink.ipc.connector import resolve_socket_path
from wmlink.ipc.errors import IPCError
from wmlink.ipc.framing import MAX_U32
from wmlink.jsonstream.reformat import reformat
from wmlink.jsonstream.version import UNKNOWN_VERSION, parse_bar_header, probe_version
from wmlink.logging_config import configure_logging, get_logger
from wmlink.models.message import MessageType

console = Console()
err_console = Console(stderr=True)


def _fail(message: str) -> None:
    err_console.print(f"[red]{escape(message)}[/red]", soft_wrap=True)
    raise SystemExit(1)


def _parse_message_type(value: str) -> int:
    if value.isascii() and value.isdigit():
        number = int(value)
        if number > MAX_U32:
            _fail(f"Message type {number} does not fit in 32 bits")
        return number
    try:
        return MessageType.from_name(value)
    except ValueError as e:
        _fail(str(e))


@click.group()
@click.version_option(version=__version__, prog_name="wmlink")
@click.option("--socket-path", "-s", default=None, help="IPC socket path (default: $I3SOCK, config, /tmp/i3-ipc.sock)")
@click.option("--config", "config_path", default=None, type=click.Path(dir_okay=False), help="Config file path")
@click.option("--log-level", default=None, help="Log level (DEBUG, INFO, WARNING, ERROR)")
@click.pass_context
def cli(ctx: click.Context, socket_path: str | None, config_path: str | None, log_level: str | None) -> None:
    """wmlink: talk to the window manager over its IPC socket."""
    from wmlink.config.loader import ConfigError, ConfigLoader

    try:
        config = ConfigLoader(Path(config_path) if config_path else None).load()
    except ConfigError as e:
        _fail(f"Config error: {e}")

    configure_logging(log_level or config.log_level)

    ctx.ensure_object(dict)
    ctx.obj["socket_path"] = resolve_socket_path(socket_path, config_path=config.socket_path)
    ctx.obj["indent"] = " " * config.indent


@cli.command()
@click.option("--type", "-t", "type_name", default="command", help="Message type name or number")
@click.option("--quiet", "-q", is_flag=True, help="Send only, do not wait for a reply")
@click.option("--raw", is_flag=True, help="Print the reply without reformatting it")
@click.argument("words", nargs=-1)
@click.pass_context
def msg(ctx: click.Context, type_name: str, quiet: bool, raw: bool, words: tuple[str, ...]) -> None:
    """Send a message to the window manager and print its reply.

    All WORDS are joined with spaces to form the payload, so
    ``wmlink msg mark foo`` works without quoting.
    """
    message_type = _parse_message_type(type_name)
    payload = " ".join(words)
    log = get_logger(tool="msg", socket_path=ctx.obj["socket_path"])
    log.debug("sending_message", message_type=int(message_type), payload_size=len(payload))

    try:
        reply = send_command(
            message_type,
            payload,
            socket_path=ctx.obj["socket_path"],
            wait_reply=not quiet,
        )
    except IPCError as e:
        _fail(str(e))

    if reply is None or not reply.payload:
        return
    if raw:
        console.out(reply.payload.decode("utf-8", errors="replace"), highlight=False)
        return

    result = reformat(reply.payload, indent=ctx.obj["indent"])
    if not result.ok:
        _fail(f"Could not reformat reply: {result.error}")
    console.out(result.text, highlight=False, end="")


@cli.command("reformat")
@click.argument("source", type=click.File("rb"), default="-")
@click.pass_context
def reformat_cmd(ctx: click.Context, source: BinaryIO) -> None:
    """Pretty-print a JSON document read from SOURCE (default: stdin)."""
    result = reformat(source.read(), indent=ctx.obj["indent"])
    if not result.ok:
        get_logger(tool="reformat").debug("reformat_failed", error=result.error)
        _fail(f"Invalid JSON: {result.error}")
    console.out(result.text, highlight=False, end="")


@cli.command()
@click.argument("source", type=click.File("rb"), default="-")
@click.option("--bar-header", is_flag=True, help="Decode the full status feed header")
def probe(source: BinaryIO, bar_header: bool) -> None:
    """Detect the protocol version announced at the start of SOURCE."""
    data = source.read()

    if bar_header:
        header, consumed = parse_bar_header(data)
        if consumed == 0:
            _fail("No status feed header found")

        table = Table(title="Status feed header", show_header=False)
        table.add_column("Field", style="cyan")
        table.add_column("Value")
        table.add_row("version", str(header.version))
        table.add_row("stop_signal", str(header.stop_signal))
        table.add_row("cont_signal", str(header.cont_signal))
        table.add_row("click_events", str(header.click_events).lower())
        table.add_row("consumed", str(consumed))
        console.print(table)
        return

    version, consumed = probe_version(data)
    if version == UNKNOWN_VERSION:
        _fail(f"Could not determine protocol version (consumed {consumed} bytes)")
    console.print(f"version: {version}")
    console.print(f"consumed: {consumed}")
