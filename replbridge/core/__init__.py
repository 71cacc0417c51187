"""
REPL Bridge Core - Sessions, process backends, editor hosts and shared types.

Main classes:
- SessionManager, SessionRegistry, Session: REPL lifecycle per editing context
- ProcessBackend, SubprocessBackend: Spawn and talk to the REPL
- EditorHost, MemoryEditor: The editor as seen by the bridge
"""

from replbridge.core.types import (
    Command,
    CursorPosition,
    DispatchOptions,
    Region,
    RegionKind,
    SelectionBounds,
    SessionResult,
    SessionState,
    SessionStatus,
)
from replbridge.core.host import EditorHost, MemoryEditor
from replbridge.core.process import ProcessBackend, ProcessHandle, SubprocessBackend
from replbridge.core.session import Session, SessionManager, SessionRegistry

__all__ = [
    # Types
    "Command",
    "CursorPosition",
    "DispatchOptions",
    "Region",
    "RegionKind",
    "SelectionBounds",
    "SessionResult",
    "SessionState",
    "SessionStatus",
    # Host
    "EditorHost",
    "MemoryEditor",
    # Process
    "ProcessBackend",
    "ProcessHandle",
    "SubprocessBackend",
    # Sessions
    "Session",
    "SessionManager",
    "SessionRegistry",
]
