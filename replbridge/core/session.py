"""
REPL Bridge Session Manager - One REPL process per editing context.

Sessions follow a small state machine:

    Absent --create()--> Active
    Active --check_liveness() finds exit / missing view--> Dead
    Dead   --cleanup()--> Absent

Death is only ever discovered lazily, by the next operation that checks
liveness. There is no background polling and no exit notification.

Example:
    registry = SessionRegistry()
    manager = SessionManager(registry.get("tab-1"), backend, host, config)

    if manager.ensure():
        backend.write(manager.session.handle, b"x <- 1\\n")
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Iterator, List, Optional

from replbridge.exceptions import ConfigurationError, SessionError
from replbridge.core.host import EditorHost
from replbridge.core.process import ProcessBackend, ProcessHandle
from replbridge.core.types import SessionResult, SessionState, SessionStatus

if TYPE_CHECKING:
    # config imports the document package, which imports core
    from replbridge.config import BridgeConfig


logger = logging.getLogger(__name__)


@dataclass
class Session:
    """
    REPL session bound to one editing context.

    Attributes:
        context_id: Editing context the session belongs to
        handle: Process handle while a REPL is attached
        state: Current lifecycle state
    """
    context_id: str
    handle: Optional[ProcessHandle] = None
    state: SessionState = SessionState.ABSENT

    def status(self) -> SessionStatus:
        return SessionStatus(
            state=self.state,
            process_id=self.handle.pid if self.handle else None,
            context_id=self.context_id,
        )


class SessionRegistry:
    """Owns the Session of every editing context, keyed by context id."""

    def __init__(self):
        self._sessions: Dict[str, Session] = {}

    def get(self, context_id: str) -> Session:
        """Session for the context, created Absent on first use."""
        session = self._sessions.get(context_id)
        if session is None:
            session = Session(context_id=context_id)
            self._sessions[context_id] = session
        return session

    def __contains__(self, context_id: str) -> bool:
        return context_id in self._sessions

    def __iter__(self) -> Iterator[Session]:
        return iter(list(self._sessions.values()))

    def __len__(self) -> int:
        return len(self._sessions)

    def clear(self) -> None:
        self._sessions.clear()


class SessionManager:
    """
    Lifecycle of the REPL process for a single session.

    The manager holds no state of its own; everything lives on the Session
    passed in, so several contexts can be managed side by side.
    """

    def __init__(
        self,
        session: Session,
        backend: ProcessBackend,
        host: EditorHost,
        config: "BridgeConfig"
    ):
        self.session = session
        self.backend = backend
        self.host = host
        self.config = config

    def check_liveness(self) -> bool:
        """
        Check that the stored REPL is still usable.

        Returns:
            True if a handle is stored, its view exists and the process runs.
            Otherwise the session is cleared and False is returned.
        """
        handle = self.session.handle
        if handle is None:
            return False

        try:
            alive = self.backend.buffer_exists(handle) and self.backend.is_running(handle)
        except Exception as e:
            logger.warning(f"Liveness check for pid {handle.pid} failed: {e}")
            alive = False

        if alive:
            return True

        logger.info(f"REPL pid {handle.pid} in context {self.session.context_id} is gone")
        self.session.state = SessionState.DEAD
        self.discard()
        return False

    def create(self) -> SessionResult:
        """
        Start the REPL for this session unless one is already active.

        Returns:
            SessionResult with ok flag and a message for the user
        """
        try:
            argv = self._resolve()
        except ConfigurationError as e:
            logger.warning(f"Could not start REPL: {e}")
            return SessionResult(ok=False, message=str(e))

        if self.check_liveness():
            return SessionResult(ok=True, message="REPL already active")

        try:
            handle = self.backend.spawn(argv, self.config.width)
        except SessionError as e:
            logger.warning(f"Could not start REPL: {e}")
            self.cleanup()
            return SessionResult(ok=False, message=str(e))

        self.session.handle = handle
        self.session.state = SessionState.ACTIVE
        self.host.restore_focus()

        logger.info(f"Started REPL pid {handle.pid} for context {self.session.context_id}")
        return SessionResult(ok=True, message=f"REPL started (pid {handle.pid})", spawned=True)

    def _resolve(self) -> List[str]:
        argv = self.config.argv
        if self.backend.resolve(argv[0]) is None:
            raise ConfigurationError(f"REPL executable not found: {argv[0]}")
        return argv

    def ensure(self) -> bool:
        """Make sure a live REPL exists, starting one if needed."""
        if self.check_liveness():
            return True

        result = self.create()
        if not result.ok:
            self.host.notify(result.message, error=True)
        elif result.spawned:
            self.host.notify(result.message)
        return result.ok

    def cleanup(self) -> None:
        """Forget the stored handle. Safe to call repeatedly."""
        if self.session.handle is not None:
            logger.debug(f"Clearing session for context {self.session.context_id}")
        self.session.handle = None
        self.session.state = SessionState.ABSENT

    def discard(self) -> None:
        """Release the stored process through the backend, then clean up."""
        handle = self.session.handle
        if handle is not None:
            self.backend.close(handle)
        self.cleanup()
