"""
REPL Bridge Editor Host - The editor as seen by the bridge.

The bridge never reads ambient editor state. Everything it needs (document
lines, cursor, selection, focus, messages) goes through an EditorHost that
is passed in explicitly.

Example:
    editor = MemoryEditor(["```{r}", "x <- 1", "```"], cursor=(2, 0))
    bridge = Bridge(editor)
    bridge.dispatch(RegionKind.CHUNK)
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Tuple

from replbridge.core.types import CursorPosition, SelectionBounds


class EditorHost(ABC):
    """
    Abstract editor interface.

    The document is read-only to the bridge; only the cursor, selection mode
    and focus are changed through this interface.
    """

    @abstractmethod
    def context_id(self) -> str:
        """Identifier of the editing context (tab, window group) in use."""
        pass

    @abstractmethod
    def document_lines(self) -> List[str]:
        """Current document as a list of lines (line 1 is index 0)."""
        pass

    @abstractmethod
    def cursor(self) -> CursorPosition:
        pass

    @abstractmethod
    def selection(self) -> Optional[SelectionBounds]:
        """Active selection, or None outside selection mode."""
        pass

    @abstractmethod
    def set_cursor(self, line: int, column: int = 0) -> None:
        pass

    @abstractmethod
    def exit_selection(self) -> None:
        pass

    def restore_focus(self) -> None:
        """Return focus to the document after a REPL view was opened."""
        pass

    def notify(self, message: str, error: bool = False) -> None:
        """Show a message to the user."""
        pass


class MemoryEditor(EditorHost):
    """
    In-memory editor used by the command line and in tests.

    Example:
        editor = MemoryEditor.from_file("analysis.Rmd", cursor=(12, 0))
        editor.select((3, 0), (5, 4))
        print(editor.messages)
    """

    def __init__(
        self,
        lines: List[str],
        cursor: Tuple[int, int] = (1, 0),
        context: str = "main"
    ):
        self.lines = list(lines)
        self._cursor = CursorPosition(line=cursor[0], column=cursor[1])
        self._selection: Optional[SelectionBounds] = None
        self._context = context
        self.messages: List[Tuple[str, bool]] = []
        self.focus_restored = 0

    @classmethod
    def from_file(cls, path: str, cursor: Tuple[int, int] = (1, 0), context: str = "main") -> "MemoryEditor":
        text = Path(path).read_text(encoding="utf-8")
        return cls(text.splitlines(), cursor=cursor, context=context)

    def context_id(self) -> str:
        return self._context

    def document_lines(self) -> List[str]:
        return self.lines

    def cursor(self) -> CursorPosition:
        return self._cursor

    def selection(self) -> Optional[SelectionBounds]:
        return self._selection

    def select(self, start: Tuple[int, int], end: Tuple[int, int]) -> None:
        self._selection = SelectionBounds(
            start=CursorPosition(line=start[0], column=start[1]),
            end=CursorPosition(line=end[0], column=end[1]),
        )

    def set_cursor(self, line: int, column: int = 0) -> None:
        line = max(1, min(line, max(len(self.lines), 1)))
        self._cursor = CursorPosition(line=line, column=column)

    def exit_selection(self) -> None:
        self._selection = None

    def restore_focus(self) -> None:
        self.focus_restored += 1

    def notify(self, message: str, error: bool = False) -> None:
        self.messages.append((message, error))

    @property
    def last_message(self) -> Optional[str]:
        return self.messages[-1][0] if self.messages else None
