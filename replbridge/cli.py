"""
REPL Bridge Command Line Interface - Inspect and send regions of a file.

Usage:
    replbridge region <file> --line 12 --mode chunk
    replbridge region <file> --mode selection --selection 3:0-5:4
    replbridge chunks <file>
    replbridge send <file> --line 12 --mode chunk --command "R --quiet"
"""

import dataclasses
import logging
import re
from typing import Optional

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

import replbridge
from replbridge.bridge import Bridge
from replbridge.config import BridgeConfig
from replbridge.core.host import MemoryEditor
from replbridge.core.types import RegionKind
from replbridge.exceptions import ConfigurationError


MODES = [kind.value for kind in RegionKind]
SELECTION_RE = re.compile(r"^([1-9]\d*):(\d+)-([1-9]\d*):(\d+)$")


def build_config(command: Optional[str] = None, width: Optional[int] = None) -> BridgeConfig:
    """Environment configuration with command-line overrides applied."""
    overrides = {}
    if command:
        overrides["command"] = command
    if width is not None:
        overrides["width"] = width
    try:
        config = BridgeConfig.from_env()
        return dataclasses.replace(config, **overrides) if overrides else config
    except ConfigurationError as e:
        raise click.ClickException(f"Invalid configuration: {e}")


def open_editor(path: str, line: int, selection: Optional[str]) -> MemoryEditor:
    """Load a file into an in-memory editor positioned at `line`."""
    editor = MemoryEditor.from_file(path, cursor=(line, 0))
    if line > max(len(editor.lines), 1):
        raise click.BadParameter(f"File has only {len(editor.lines)} lines", param_hint="--line")

    if selection:
        match = SELECTION_RE.match(selection)
        if not match:
            raise click.BadParameter(
                f"Expected LINE:COL-LINE:COL, got {selection!r}", param_hint="--selection"
            )
        l1, c1, l2, c2 = (int(g) for g in match.groups())
        editor.select((l1, c1), (l2, c2))
    return editor


@click.group()
@click.version_option(version=replbridge.__version__, prog_name="replbridge")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.pass_context
def cli(ctx, verbose):
    """REPL Bridge - send document regions to an interactive process."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.argument("document", type=click.Path(exists=True, dir_okay=False))
@click.option("--line", "-l", type=click.IntRange(min=1), default=1, help="Cursor line (1-indexed)")
@click.option("--mode", "-m", type=click.Choice(MODES), default="line",
              help="Extraction mode")
@click.option("--selection", "-s", default=None,
              help="Selection as LINE:COL-LINE:COL (columns 0-indexed, end exclusive)")
def region(document, line, mode, selection):
    """
    Print the region a dispatch would send.

    Examples:
        replbridge region report.Rmd --line 14 --mode chunk
        replbridge region script.R --mode selection --selection 3:4-3:12
    """
    editor = open_editor(document, line, selection)
    bridge = Bridge(editor, config=build_config())

    lines = bridge.region_for(RegionKind(mode))
    if not lines:
        message = editor.last_message or f"Empty {mode} region"
        raise click.ClickException(message)
    for text in lines:
        click.echo(text)


@cli.command()
@click.argument("document", type=click.Path(exists=True, dir_okay=False))
def chunks(document):
    """
    List the code chunks of a document.

    Examples:
        replbridge chunks report.Rmd
    """
    editor = open_editor(document, 1, None)
    bridge = Bridge(editor, config=build_config())
    found = bridge.chunks()

    if not found:
        click.echo("No chunks found")
        return

    table = Table(title=f"Chunks in {document}")
    table.add_column("#", justify="right")
    table.add_column("Start", justify="right")
    table.add_column("End", justify="right")
    table.add_column("Lines", justify="right")
    table.add_column("Header")
    for i, (start, end) in enumerate(found, 1):
        table.add_row(str(i), str(start), str(end), str(end - start - 1), editor.lines[start - 1].strip())
    Console().print(table)


@cli.command()
@click.argument("document", type=click.Path(exists=True, dir_okay=False))
@click.option("--line", "-l", type=click.IntRange(min=1), default=1, help="Cursor line (1-indexed)")
@click.option("--mode", "-m", type=click.Choice(MODES), default="line",
              help="Extraction mode")
@click.option("--selection", "-s", default=None,
              help="Selection as LINE:COL-LINE:COL (columns 0-indexed, end exclusive)")
@click.option("--command", "-c", "repl_command", default=None,
              help="REPL command line (default: $REPLBRIDGE_COMMAND or R)")
@click.option("--width", "-w", type=int, default=None, help="REPL view width (30-300)")
def send(document, line, mode, selection, repl_command, width):
    """
    Start the REPL, send a region to it, then close it.

    Examples:
        replbridge send report.Rmd --line 14 --mode chunk
        replbridge send report.Rmd --line 80 --mode previous
        replbridge send script.py -m block -l 3 -c "python3 -i -q"
    """
    editor = open_editor(document, line, selection)
    bridge = Bridge(editor, config=build_config(repl_command, width))

    try:
        ok = bridge.dispatch(RegionKind(mode))
    finally:
        bridge.shutdown()

    for message, error in editor.messages:
        if not error:
            click.echo(message)
    if not ok:
        errors = [message for message, error in editor.messages if error]
        raise click.ClickException(errors[-1] if errors else f"Sending {mode} failed")
    click.echo(f"Cursor now at line {editor.cursor().line}")


def main():
    """Entry point for the CLI."""
    load_dotenv()
    cli()


if __name__ == "__main__":
    main()
