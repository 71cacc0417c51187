"""
REPL Bridge - Public entry point tying sessions, extraction and dispatch together.

A Bridge serves one editor host. Sessions are kept in a registry keyed by
the host's current editing context, so switching context (tab, window group)
switches REPL without any global state.

Example:
    editor = MemoryEditor(lines, cursor=(4, 0))
    bridge = Bridge(editor, config=BridgeConfig(command="R --quiet"))

    bridge.ensure_session()
    bridge.dispatch(RegionKind.CHUNK)
    print(bridge.session_status())
"""

import logging
from typing import List, Optional, Tuple

from replbridge.config import BridgeConfig, get_config
from replbridge.exceptions import ExtractionError
from replbridge.core.host import EditorHost
from replbridge.core.process import ProcessBackend, SubprocessBackend
from replbridge.core.session import SessionManager, SessionRegistry
from replbridge.core.types import Command, DispatchOptions, RegionKind, SessionStatus
from replbridge.document.extractor import RegionExtractor
from replbridge.document.patterns import (
    find_end_after,
    find_start_above,
    find_start_after,
    list_chunks,
)
from replbridge.dispatch.engine import DispatchEngine


logger = logging.getLogger(__name__)


class Bridge:
    """
    Editor-to-REPL bridge.

    Exposes ensure_session(), dispatch(), region_for() and session_status(),
    plus chunk navigation and literal commands.
    """

    def __init__(
        self,
        host: EditorHost,
        config: BridgeConfig = None,
        backend: ProcessBackend = None,
        registry: SessionRegistry = None
    ):
        """
        Initialize the bridge.

        Args:
            host: Editor the bridge reads from and navigates
            config: Configuration (default: global config from environment)
            backend: Process backend (default: SubprocessBackend)
            registry: Session registry, shareable between bridges
        """
        self.host = host
        self.config = config or get_config()
        self.backend = backend or SubprocessBackend()
        self.registry = registry if registry is not None else SessionRegistry()
        self.extractor = RegionExtractor(self.config.chunk_pattern)

    def manager(self) -> SessionManager:
        """Session manager for the host's current editing context."""
        session = self.registry.get(self.host.context_id())
        return SessionManager(session, self.backend, self.host, self.config)

    def engine(self) -> DispatchEngine:
        return DispatchEngine(self.manager(), self.extractor, self.host, self.config)

    def ensure_session(self) -> bool:
        return self.manager().ensure()

    def dispatch(self, kind: RegionKind, options: Optional[DispatchOptions] = None) -> bool:
        return self.engine().dispatch(kind, options)

    def send_command(self, text: str, description: str = "") -> bool:
        """Send a literal command string to the REPL."""
        return self.engine().send(Command(text=text, description=description))

    def region_for(self, kind: RegionKind) -> List[str]:
        """
        Lines that dispatch(kind) would send, without sending them.

        Returns:
            Region lines, or an empty list if extraction fails
        """
        try:
            region = self.extractor.extract(
                kind,
                self.host.document_lines(),
                self.host.cursor(),
                self.host.selection(),
            )
        except ExtractionError as e:
            logger.info(f"No {RegionKind(kind).value} region: {e}")
            self.host.notify(str(e), error=True)
            return []
        return [] if region.is_empty else region.lines

    def session_status(self) -> SessionStatus:
        """Current session state, after a liveness check."""
        manager = self.manager()
        manager.check_liveness()
        return manager.session.status()

    def chunks(self) -> List[Tuple[int, int]]:
        """Every complete chunk in the document as (start, end) lines."""
        return list_chunks(self.host.document_lines(), self.config.chunk_pattern)

    def next_chunk(self) -> bool:
        """Move the cursor to the first line of the next chunk."""
        lines = self.host.document_lines()
        start = find_start_after(lines, self.config.chunk_pattern, self.host.cursor().line)
        if start is None:
            self.host.notify("No next chunk", error=True)
            return False
        self.host.set_cursor(min(start + 1, len(lines)))
        return True

    def previous_chunk(self) -> bool:
        """Move the cursor to the first line of the chunk before the current one."""
        lines = self.host.document_lines()
        pattern = self.config.chunk_pattern
        line = self.host.cursor().line
        previous = find_start_above(lines, pattern, line)
        if previous is not None:
            end = find_end_after(lines, pattern, previous)
            # Inside a chunk: skip past the chunk we are in
            if end is None or end >= line:
                previous = find_start_above(lines, pattern, previous - 1)
        if previous is None:
            self.host.notify("No previous chunk", error=True)
            return False
        self.host.set_cursor(min(previous + 1, len(lines)))
        return True

    def shutdown(self) -> None:
        """Close every REPL owned by this bridge and forget all sessions."""
        for session in self.registry:
            if session.handle is not None:
                logger.info(f"Closing REPL pid {session.handle.pid}")
            SessionManager(session, self.backend, self.host, self.config).discard()
        self.registry.clear()
