"""
REPL Bridge Blocks - Find the complete expression that starts on a line.

A line that opens a bracket, or ends in a continuation operator, does not make
sense on its own in the REPL:

    my_function <- function(a, b) {
        a + b
    }

    penguins %>%
      filter(!is.na(bill_len))

find_block() extends such a line forward until every bracket is closed and
no continuation operator is left dangling. Brackets inside quoted strings and
after a `#` comment are ignored.
"""

from typing import List, Optional, Tuple

from replbridge.exceptions import ExtractionError


OPENERS = "([{"
CLOSERS = ")]}"
QUOTES = "\"'`"
CONTINUATIONS = ("%>%", "|>", "+", ",", "<-", "=", "&", "|")


def _scan(line: str, depth: int, quote: Optional[str]) -> Tuple[str, int, Optional[str]]:
    """
    Scan one line, carrying bracket depth and open-quote state across lines.

    Returns:
        (code part of the line without comment, new depth, open quote or None)
    """
    escaped = False
    for i, ch in enumerate(line):
        if quote:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == quote:
                quote = None
            continue

        if ch == "#":
            return line[:i], depth, None
        if ch in QUOTES:
            quote = ch
        elif ch in OPENERS:
            depth += 1
        elif ch in CLOSERS:
            depth -= 1
    return line, depth, quote


def _continues(code: str) -> bool:
    return code.rstrip().endswith(CONTINUATIONS)


def find_block(lines: List[str], line: int) -> Tuple[int, int]:
    """
    Locate the expression starting at `line`.

    Args:
        lines: Document lines
        line: Starting line (1-indexed)

    Returns:
        (first line, last line) of the expression, both inclusive

    Raises:
        ExtractionError: If the expression runs past the end of the document
    """
    if not 1 <= line <= len(lines):
        raise ExtractionError(f"Line {line} is outside the document")

    depth = 0
    quote = None
    for lnum in range(line, len(lines) + 1):
        code, depth, quote = _scan(lines[lnum - 1], depth, quote)
        # A stray closer (cursor inside a block) counts as balanced
        depth = max(depth, 0)
        if depth == 0 and quote is None and not _continues(code):
            return line, lnum

    raise ExtractionError(f"Expression starting at line {line} is never closed")
