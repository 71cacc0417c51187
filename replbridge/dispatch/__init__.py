"""
REPL Bridge Dispatch - Deliver regions to the REPL.
"""

from replbridge.dispatch.engine import DispatchEngine, STRATEGIES, LINE_BY_LINE, SOURCE_FILE
from replbridge.dispatch.strategies import send_line, send_lines, source_lines, write_temp_file

__all__ = [
    "DispatchEngine",
    "STRATEGIES",
    "LINE_BY_LINE",
    "SOURCE_FILE",
    "send_line",
    "send_lines",
    "source_lines",
    "write_temp_file",
]
