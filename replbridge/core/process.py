"""
REPL Bridge Process Backend - Spawn, probe and write to the REPL process.

This module defines the contract the session manager relies on, plus a
default implementation built on subprocess. Editors with their own terminal
views implement ProcessBackend on top of those.

Example:
    backend = SubprocessBackend()
    handle = backend.spawn(["R", "--no-save", "--quiet"], width=80)
    backend.write(handle, b"x <- 1\\n")
    backend.is_running(handle)  # True
"""

import logging
import os
import shutil
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from replbridge.exceptions import SessionError, TransmissionError


logger = logging.getLogger(__name__)


@dataclass
class ProcessHandle:
    """
    Reference to a spawned REPL and the view (buffer) that hosts it.

    Attributes:
        pid: Operating system process id
        buffer_id: Identifier of the view the process is attached to
        process: Backend-specific process object
    """
    pid: int
    buffer_id: str
    process: Any = field(default=None, repr=False, compare=False)


class ProcessBackend(ABC):
    """
    Abstract process interface.

    Implementations must never block on the REPL: write() hands bytes to the
    process input and returns.
    """

    def resolve(self, executable: str) -> Optional[str]:
        """Full path of the executable, or None if it cannot be found."""
        return shutil.which(executable)

    @abstractmethod
    def spawn(self, argv: List[str], width: int) -> ProcessHandle:
        """
        Start the REPL attached to a new view.

        Raises:
            SessionError: If the process cannot be started
        """
        pass

    @abstractmethod
    def buffer_exists(self, handle: ProcessHandle) -> bool:
        pass

    @abstractmethod
    def is_running(self, handle: ProcessHandle) -> bool:
        pass

    @abstractmethod
    def write(self, handle: ProcessHandle, data: bytes) -> None:
        """
        Hand bytes to the process input.

        Raises:
            TransmissionError: If the write fails
        """
        pass

    def close(self, handle: ProcessHandle) -> None:
        """Release the process. The default does nothing."""
        pass


class SubprocessBackend(ProcessBackend):
    """
    ProcessBackend built on subprocess.Popen.

    The REPL inherits the terminal's stdout/stderr and reads commands from a
    pipe. The view width is passed through the COLUMNS environment variable.
    """

    def __init__(self, close_timeout: float = 5.0):
        self.close_timeout = close_timeout
        self._buffers: Dict[str, subprocess.Popen] = {}

    def spawn(self, argv: List[str], width: int) -> ProcessHandle:
        env = dict(os.environ, COLUMNS=str(width))
        try:
            process = subprocess.Popen(argv, stdin=subprocess.PIPE, env=env)
        except OSError as e:
            raise SessionError(f"Failed to start {argv[0]}: {e}") from e

        buffer_id = f"repl-{process.pid}"
        self._buffers[buffer_id] = process
        logger.debug(f"Spawned {argv} as pid {process.pid} (width={width})")
        return ProcessHandle(pid=process.pid, buffer_id=buffer_id, process=process)

    def buffer_exists(self, handle: ProcessHandle) -> bool:
        return handle.buffer_id in self._buffers

    def is_running(self, handle: ProcessHandle) -> bool:
        process = handle.process
        return process is not None and process.poll() is None

    def write(self, handle: ProcessHandle, data: bytes) -> None:
        process = handle.process
        if process is None or process.stdin is None:
            raise TransmissionError(f"No input pipe for pid {handle.pid}")
        try:
            process.stdin.write(data)
            process.stdin.flush()
        except (BrokenPipeError, ValueError, OSError) as e:
            raise TransmissionError(f"Write to pid {handle.pid} failed: {e}") from e

    def close(self, handle: ProcessHandle) -> None:
        process = self._buffers.pop(handle.buffer_id, None)
        if process is None:
            return
        try:
            if process.stdin:
                process.stdin.close()
            process.wait(timeout=self.close_timeout)
        except (OSError, ValueError) as e:
            logger.debug(f"Closing pid {process.pid}: {e}")
        except subprocess.TimeoutExpired:
            logger.warning(f"pid {process.pid} did not exit, terminating")
            process.terminate()
