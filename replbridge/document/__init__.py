"""
REPL Bridge Document - Region extraction and chunk boundaries.

Main entry points:
- RegionExtractor: Extract Line/Selection/Chunk/PreviousChunks/Block regions
- ChunkPattern: Compiled chunk delimiters
- list_chunks(): Every complete chunk in a document
- find_block(): Bracket-balanced expression starting at a line
"""

from replbridge.document.patterns import (
    ChunkPattern,
    find_end_after,
    find_start_above,
    find_start_after,
    list_chunks,
)
from replbridge.document.blocks import find_block
from replbridge.document.extractor import RegionExtractor

__all__ = [
    "ChunkPattern",
    "RegionExtractor",
    "find_block",
    "find_end_after",
    "find_start_above",
    "find_start_after",
    "list_chunks",
]
