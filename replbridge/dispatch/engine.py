"""
REPL Bridge Dispatch Engine - Turn regions into REPL input.

For every dispatch the engine:
1. Makes sure a live REPL exists (SessionManager.ensure)
2. Extracts the region for the requested kind
3. Transmits it with the strategy fixed for that kind
4. Moves the cursor the way that kind prescribes

Transmission is fire-and-forget. Success means the bytes were handed to the
REPL's input, not that the REPL evaluated them.

Example:
    engine = DispatchEngine(manager, extractor, host, config)
    engine.dispatch(RegionKind.CHUNK)
    engine.send("summary(mtcars)")
"""

import logging
from typing import Callable, Dict, List, Optional, Union

from replbridge.config import BridgeConfig
from replbridge.exceptions import ExtractionError, TransmissionError
from replbridge.core.host import EditorHost
from replbridge.core.session import SessionManager
from replbridge.core.types import Command, DispatchOptions, Region, RegionKind
from replbridge.document.extractor import RegionExtractor
from replbridge.document.patterns import find_start_after
from replbridge.dispatch.strategies import send_line, send_lines, source_lines


logger = logging.getLogger(__name__)


LINE_BY_LINE = "line-by-line"
SOURCE_FILE = "source-file"

# Strategy is a property of the region kind, not of the call
STRATEGIES: Dict[RegionKind, str] = {
    RegionKind.LINE: LINE_BY_LINE,
    RegionKind.SELECTION: LINE_BY_LINE,
    RegionKind.CHUNK: SOURCE_FILE,
    RegionKind.PREVIOUS_CHUNKS: SOURCE_FILE,
    RegionKind.BLOCK: SOURCE_FILE,
}


class DispatchEngine:
    """
    Deliver regions and literal commands to the session's REPL.

    Each RegionKind has exactly one navigation handler; construction fails if
    a kind is left without one.
    """

    def __init__(
        self,
        manager: SessionManager,
        extractor: RegionExtractor,
        host: EditorHost,
        config: BridgeConfig
    ):
        self.manager = manager
        self.extractor = extractor
        self.host = host
        self.config = config

        self._navigators: Dict[RegionKind, Callable[[Region, DispatchOptions], None]] = {
            RegionKind.LINE: self._after_line,
            RegionKind.SELECTION: self._after_selection,
            RegionKind.CHUNK: self._after_chunk,
            RegionKind.PREVIOUS_CHUNKS: self._after_previous_chunks,
            RegionKind.BLOCK: self._after_block,
        }
        for table in (self._navigators, STRATEGIES):
            missing = set(RegionKind) - set(table)
            if missing:
                raise TypeError(f"Unhandled region kinds: {sorted(k.value for k in missing)}")

    def dispatch(self, kind: RegionKind, options: Optional[DispatchOptions] = None) -> bool:
        """
        Extract the region for `kind` at the cursor and send it.

        Returns:
            True if the region was handed to the REPL (or was empty)
        """
        kind = RegionKind(kind)
        options = options or DispatchOptions()

        if not self.manager.ensure():
            return False

        try:
            region = self.extractor.extract(
                kind,
                self.host.document_lines(),
                self.host.cursor(),
                self.host.selection(),
            )
        except ExtractionError as e:
            logger.info(f"{kind.value} extraction failed: {e}")
            self.host.notify(str(e), error=True)
            return False

        return self._send_region(region, options)

    def send(
        self,
        content: Union[Region, Command, str],
        options: Optional[DispatchOptions] = None
    ) -> bool:
        """
        Send an already extracted region or a literal command.

        Literal commands are sent line by line and never move the cursor.
        """
        options = options or DispatchOptions()
        if not self.manager.ensure():
            return False

        if isinstance(content, Region):
            return self._send_region(content, options)

        if isinstance(content, str):
            content = Command(text=content, description=options.description)
        lines = content.text.splitlines() or [content.text]
        return self._transmit(lines, LINE_BY_LINE, content.description or "command")

    def _send_region(self, region: Region, options: DispatchOptions) -> bool:
        if region.is_empty:
            logger.debug(f"Empty {region.kind.value} region, nothing sent")
        elif not self._transmit(region.lines, STRATEGIES[region.kind], region.kind.value):
            return False

        self._navigators[region.kind](region, options)
        return True

    def _transmit(self, lines: List[str], strategy: str, description: str) -> bool:
        content = [line for line in lines if line.strip()]
        if not content:
            return True

        handle = self.manager.session.handle
        try:
            if len(content) == 1:
                send_line(self.manager.backend, handle, content[0])
            elif strategy == SOURCE_FILE:
                source_lines(self.manager.backend, handle, lines, self.config)
            else:
                send_lines(self.manager.backend, handle, lines, self.config.settle_delay)
        except TransmissionError as e:
            logger.warning(f"Sending {description} failed: {e}")
            self.manager.discard()
            self.host.notify(f"Could not send {description}: {e}", error=True)
            return False

        logger.info(f"Sent {description} ({len(content)} lines, {strategy})")
        return True

    # Navigation, one handler per region kind

    def _last_line(self) -> int:
        return max(len(self.host.document_lines()), 1)

    def _end_line(self, region: Region) -> int:
        return region.end_line or self.host.cursor().line

    def _after_line(self, region: Region, options: DispatchOptions) -> None:
        if not options.stay:
            self.host.set_cursor(min(self._end_line(region) + 1, self._last_line()))

    def _after_selection(self, region: Region, options: DispatchOptions) -> None:
        self.host.exit_selection()
        self.host.set_cursor(min(self._end_line(region) + 1, self._last_line()))

    def _after_chunk(self, region: Region, options: DispatchOptions) -> None:
        lines = self.host.document_lines()
        start = find_start_after(lines, self.extractor.pattern, self._end_line(region))
        if start is None:
            self.host.set_cursor(self._end_line(region))
        else:
            self.host.set_cursor(min(start + 1, self._last_line()))

    def _after_previous_chunks(self, region: Region, options: DispatchOptions) -> None:
        pass

    def _after_block(self, region: Region, options: DispatchOptions) -> None:
        self.host.set_cursor(min(self._end_line(region) + 1, self._last_line()))
