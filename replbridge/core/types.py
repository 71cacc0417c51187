"""
REPL Bridge Core Types - Pydantic models shared across the bridge.

These types are used throughout the library and returned by the public API.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class CursorPosition(BaseModel):
    """
    A cursor location in the document.

    Attributes:
        line: Line number (1-indexed)
        column: Column offset (0-indexed)
    """
    line: int = Field(..., ge=1, description="Line number (1-indexed)")
    column: int = Field(default=0, ge=0, description="Column offset (0-indexed)")


class SelectionBounds(BaseModel):
    """
    A visual selection. The end column is exclusive.

    Example:
        bounds = SelectionBounds(
            start=CursorPosition(line=3, column=4),
            end=CursorPosition(line=5, column=2),
        )
    """
    start: CursorPosition
    end: CursorPosition


class RegionKind(str, Enum):
    """Extraction modes. Each has exactly one dispatch handler."""
    LINE = "line"
    SELECTION = "selection"
    CHUNK = "chunk"
    PREVIOUS_CHUNKS = "previous"
    BLOCK = "block"


class Region(BaseModel):
    """
    An ordered set of lines selected by one extraction mode.

    Attributes:
        kind: Extraction mode that produced the region
        lines: Extracted lines in document order
        start_line: First document line covered (1-indexed), if known
        end_line: Last document line covered (1-indexed), if known
    """
    kind: RegionKind
    lines: List[str] = Field(default_factory=list)
    start_line: Optional[int] = None
    end_line: Optional[int] = None

    @property
    def is_empty(self) -> bool:
        return not any(line.strip() for line in self.lines)


class Command(BaseModel):
    """A string handed to the REPL, with a description for messages."""
    text: str = Field(..., description="Text written to the REPL input")
    description: str = Field(default="", description="Human-readable label")


class SessionState(str, Enum):
    """Lifecycle of a REPL session."""
    ABSENT = "absent"
    ACTIVE = "active"
    DEAD = "dead"


class SessionStatus(BaseModel):
    """Snapshot reported by Bridge.session_status()."""
    state: SessionState
    process_id: Optional[int] = None
    context_id: str = ""


class SessionResult(BaseModel):
    """Outcome of SessionManager.create()."""
    ok: bool
    message: str = ""
    spawned: bool = False


class DispatchOptions(BaseModel):
    """
    Per-call dispatch options.

    Attributes:
        stay: Keep the cursor in place after a Line dispatch
        description: Label used in messages for literal commands
    """
    stay: bool = False
    description: str = ""
