"""
REPL Bridge Transmission Strategies - How lines reach the REPL.

Two strategies:
- send_lines(): one write per non-blank line, with a short pause between
  writes so the REPL echoes each statement as if typed
- source_lines(): write all lines to a fresh temp file and send a single
  command that sources it with echo, so multi-line constructs are evaluated
  as one unit

Temp files are not deleted here; they are left to the OS temp-file cleanup.
"""

import logging
import tempfile
import time
from pathlib import Path
from typing import List

from replbridge.config import BridgeConfig
from replbridge.exceptions import TransmissionError
from replbridge.core.process import ProcessBackend, ProcessHandle


logger = logging.getLogger(__name__)


def send_line(backend: ProcessBackend, handle: ProcessHandle, text: str) -> None:
    """Write a single line plus terminator."""
    backend.write(handle, (text + "\n").encode("utf-8"))


def send_lines(
    backend: ProcessBackend,
    handle: ProcessHandle,
    lines: List[str],
    settle_delay: float = 0.05
) -> int:
    """
    Send non-blank lines one at a time.

    Returns:
        Number of lines written
    """
    sent = 0
    for line in lines:
        if not line.strip():
            continue
        if sent and settle_delay:
            time.sleep(settle_delay)
        send_line(backend, handle, line)
        sent += 1
    return sent


def write_temp_file(lines: List[str], suffix: str = ".R") -> Path:
    """
    Write lines verbatim to a new temp file, one line per file line.

    Raises:
        TransmissionError: If the file cannot be written
    """
    try:
        with tempfile.NamedTemporaryFile(
            "w", suffix=suffix, prefix="replbridge_", delete=False, encoding="utf-8"
        ) as f:
            f.write("\n".join(lines) + "\n")
            return Path(f.name)
    except OSError as e:
        raise TransmissionError(f"Cannot write temp source file: {e}") from e


def source_lines(
    backend: ProcessBackend,
    handle: ProcessHandle,
    lines: List[str],
    config: BridgeConfig
) -> Path:
    """
    Send lines through a temp file and a single source command.

    Returns:
        Path of the temp file that was sourced
    """
    path = write_temp_file(lines, config.temp_suffix)
    logger.debug(f"Wrote {len(lines)} lines to {path}")
    send_line(backend, handle, config.source_command(path.as_posix()))
    return path
