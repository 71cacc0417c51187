"""
REPL Bridge Chunk Patterns - Compiled start/end delimiters for code chunks.

A chunk is a block of lines fenced by a start line and an end line, e.g. an
R Markdown code chunk:

    ```{r}
    x <- 1
    ```

Patterns are compiled once, when the configuration is built, and reused by
every search afterwards.

Example:
    from replbridge.document.patterns import ChunkPattern, list_chunks

    pattern = ChunkPattern.compile(r"^\\s*```\\s*\\{", r"^\\s*```\\s*$")
    for start, end in list_chunks(lines, pattern):
        print(f"chunk at lines {start}-{end}")
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from replbridge.exceptions import ConfigurationError


@dataclass(frozen=True)
class ChunkPattern:
    """Pair of line-anchored regular expressions delimiting a chunk."""

    start: "re.Pattern[str]"
    end: "re.Pattern[str]"

    @classmethod
    def compile(cls, start: str, end: str) -> "ChunkPattern":
        """
        Compile start/end pattern strings.

        Raises:
            ConfigurationError: If either pattern is empty or invalid, or the
                two are identical
        """
        compiled = []
        for name, source in (("start", start), ("end", end)):
            if not source:
                raise ConfigurationError(f"Chunk {name} pattern is empty")
            try:
                compiled.append(re.compile(source))
            except re.error as e:
                raise ConfigurationError(
                    f"Invalid chunk {name} pattern {source!r}: {e}"
                ) from e
        if start == end:
            raise ConfigurationError(f"Chunk start and end patterns must differ: {start!r}")
        return cls(start=compiled[0], end=compiled[1])

    def is_start(self, line: str) -> bool:
        return self.start.search(line) is not None

    def is_end(self, line: str) -> bool:
        return self.end.search(line) is not None


def find_start_above(lines: List[str], pattern: ChunkPattern, line: int) -> Optional[int]:
    """Nearest start delimiter at or above `line` (1-indexed), or None."""
    for lnum in range(min(line, len(lines)), 0, -1):
        if pattern.is_start(lines[lnum - 1]):
            return lnum
    return None


def find_end_after(lines: List[str], pattern: ChunkPattern, start: int) -> Optional[int]:
    """Nearest end delimiter strictly after the start line, or None."""
    for lnum in range(start + 1, len(lines) + 1):
        if pattern.is_end(lines[lnum - 1]):
            return lnum
    return None


def find_start_after(lines: List[str], pattern: ChunkPattern, line: int) -> Optional[int]:
    """Nearest start delimiter strictly after `line`, or None."""
    for lnum in range(line + 1, len(lines) + 1):
        if pattern.is_start(lines[lnum - 1]):
            return lnum
    return None


def list_chunks(lines: List[str], pattern: ChunkPattern) -> List[Tuple[int, int]]:
    """
    Find every complete chunk in the document.

    Args:
        lines: Document lines
        pattern: Compiled chunk delimiters

    Returns:
        List of (start, end) delimiter line numbers, in document order.
        A trailing start with no end is left out.
    """
    chunks = []
    lnum = 1
    while True:
        start = find_start_after(lines, pattern, lnum - 1)
        if start is None:
            break
        end = find_end_after(lines, pattern, start)
        if end is None:
            break
        chunks.append((start, end))
        lnum = end + 1
    return chunks
