"""
REPL Bridge Region Extractor - Pull the requested lines out of a document.

Modes:
- LINE: the cursor line
- SELECTION: the selected text, trimmed to the selection's columns
- CHUNK: the body of the chunk around the cursor, delimiters excluded
- PREVIOUS_CHUNKS: the bodies of every chunk from the top down to the cursor
- BLOCK: the bracket-balanced expression starting at the cursor line

Extraction never modifies the document.

Example:
    extractor = RegionExtractor(config.chunk_pattern)
    region = extractor.extract(
        RegionKind.CHUNK,
        ["```{r}", "x=1", "y=2", "```"],
        CursorPosition(line=2),
    )
    region.lines  # ["x=1", "y=2"]
"""

import logging
from typing import Callable, Dict, List, Optional

from replbridge.exceptions import ExtractionError
from replbridge.core.types import CursorPosition, Region, RegionKind, SelectionBounds
from replbridge.document.blocks import find_block
from replbridge.document.patterns import ChunkPattern, find_end_after, find_start_above


logger = logging.getLogger(__name__)


class RegionExtractor:
    """
    Extract regions according to per-mode boundary rules.

    Example:
        extractor = RegionExtractor(ChunkPattern.compile(r"^```\\{", r"^```$"))
        region = extractor.chunk(lines, CursorPosition(line=5))
    """

    def __init__(self, pattern: ChunkPattern):
        self.pattern = pattern
        self._handlers: Dict[RegionKind, Callable[..., Region]] = {
            RegionKind.LINE: self.line,
            RegionKind.SELECTION: self.selection,
            RegionKind.CHUNK: self.chunk,
            RegionKind.PREVIOUS_CHUNKS: self.previous_chunks,
            RegionKind.BLOCK: self.block,
        }
        missing = set(RegionKind) - set(self._handlers)
        if missing:
            raise TypeError(f"No extractor for {sorted(k.value for k in missing)}")

    def extract(
        self,
        kind: RegionKind,
        lines: List[str],
        cursor: CursorPosition,
        selection: Optional[SelectionBounds] = None
    ) -> Region:
        """
        Extract a region of the given kind.

        Raises:
            ExtractionError: If the mode's boundaries cannot be found
        """
        return self._handlers[RegionKind(kind)](lines, cursor, selection)

    def line(self, lines: List[str], cursor: CursorPosition, selection=None) -> Region:
        _check_line(lines, cursor.line)
        return Region(
            kind=RegionKind.LINE,
            lines=[lines[cursor.line - 1]],
            start_line=cursor.line,
            end_line=cursor.line,
        )

    def selection(
        self,
        lines: List[str],
        cursor: CursorPosition,
        selection: Optional[SelectionBounds] = None
    ) -> Region:
        if selection is None:
            raise ExtractionError("No active selection")

        start, end = selection.start, selection.end
        if (end.line, end.column) < (start.line, start.column):
            start, end = end, start
        _check_line(lines, start.line)
        _check_line(lines, end.line)

        if start.line == end.line:
            text = [lines[start.line - 1][start.column:end.column]]
        else:
            text = [lines[start.line - 1][start.column:]]
            text.extend(lines[start.line:end.line - 1])
            text.append(lines[end.line - 1][:end.column])

        if not any(t.strip() for t in text):
            text = []
        return Region(
            kind=RegionKind.SELECTION,
            lines=text,
            start_line=start.line,
            end_line=end.line,
        )

    def chunk(self, lines: List[str], cursor: CursorPosition, selection=None) -> Region:
        """
        Body of the chunk enclosing the cursor.

        The cursor may sit on either delimiter line as well as inside the body.
        """
        start = find_start_above(lines, self.pattern, cursor.line)
        if start is None:
            raise ExtractionError(f"No chunk start found above line {cursor.line}")

        end = find_end_after(lines, self.pattern, start)
        if end is None:
            raise ExtractionError(f"Chunk starting at line {start} has no end delimiter")

        if not start <= cursor.line <= end:
            raise ExtractionError(f"Line {cursor.line} is not inside a chunk")

        return Region(
            kind=RegionKind.CHUNK,
            lines=lines[start:end - 1],
            start_line=start,
            end_line=end,
        )

    def previous_chunks(self, lines: List[str], cursor: CursorPosition, selection=None) -> Region:
        """
        Non-blank chunk body lines from line 1 through the cursor line.

        Nesting is not validated: a second start before an end keeps
        collecting lines.
        """
        collected = []
        inside = False
        last = min(cursor.line, len(lines))
        for text in lines[:last]:
            if self.pattern.is_start(text):
                inside = True
            elif self.pattern.is_end(text):
                inside = False
            elif inside and text.strip():
                collected.append(text)

        return Region(
            kind=RegionKind.PREVIOUS_CHUNKS,
            lines=collected,
            start_line=1,
            end_line=last,
        )

    def block(self, lines: List[str], cursor: CursorPosition, selection=None) -> Region:
        first, last = find_block(lines, cursor.line)
        logger.debug(f"Block at lines {first}-{last}")
        return Region(
            kind=RegionKind.BLOCK,
            lines=lines[first - 1:last],
            start_line=first,
            end_line=last,
        )


def _check_line(lines: List[str], line: int) -> None:
    if not 1 <= line <= len(lines):
        raise ExtractionError(f"Line {line} is outside the document ({len(lines)} lines)")
