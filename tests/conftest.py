"""Shared fixtures: a recording process backend and sample documents."""

import re
from pathlib import Path
from typing import Dict, List

import pytest

from replbridge.config import BridgeConfig
from replbridge.exceptions import SessionError, TransmissionError
from replbridge.core.host import MemoryEditor
from replbridge.core.process import ProcessBackend, ProcessHandle


SOURCE_RE = re.compile(r"^source\('(.+)', echo=TRUE\)\n$")


class FakeBackend(ProcessBackend):
    """Backend that records spawns and writes instead of starting processes."""

    def __init__(self, resolvable: bool = True):
        self.resolvable = resolvable
        self.fail_spawn = False
        self.fail_writes = False
        self.spawned: List[ProcessHandle] = []
        self.writes: List[str] = []
        self.closed: List[int] = []
        self._running: Dict[int, bool] = {}
        self._buffers = set()
        self._next_pid = 1000

    def resolve(self, executable):
        return f"/usr/bin/{executable}" if self.resolvable else None

    def spawn(self, argv, width):
        if self.fail_spawn:
            raise SessionError(f"Failed to start {argv[0]}: boom")
        self._next_pid += 1
        handle = ProcessHandle(pid=self._next_pid, buffer_id=f"buf-{self._next_pid}")
        self._running[handle.pid] = True
        self._buffers.add(handle.buffer_id)
        self.spawned.append(handle)
        self.last_argv = argv
        self.last_width = width
        return handle

    def buffer_exists(self, handle):
        return handle.buffer_id in self._buffers

    def is_running(self, handle):
        return self._running.get(handle.pid, False)

    def write(self, handle, data):
        if self.fail_writes:
            raise TransmissionError("Broken pipe")
        self.writes.append(data.decode("utf-8"))

    def close(self, handle):
        self.closed.append(handle.pid)
        self._running[handle.pid] = False

    # Simulate things happening outside the bridge

    def kill(self, handle):
        self._running[handle.pid] = False

    def wipe_buffer(self, handle):
        self._buffers.discard(handle.buffer_id)

    def sourced_lines(self, index: int = -1) -> List[str]:
        """Lines of the temp file named by a recorded source command."""
        match = SOURCE_RE.match(self.writes[index])
        assert match, f"not a source command: {self.writes[index]!r}"
        return Path(match.group(1)).read_text(encoding="utf-8").splitlines()


RMD = [
    "# Analysis",          # 1
    "",                    # 2
    "```{r}",              # 3
    "x <- 1",              # 4
    "y <- 2",              # 5
    "z <- x + y",          # 6
    "```",                 # 7
    "Some prose here.",    # 8
    "```{r setup}",        # 9
    "",                    # 10
    "library(stats)",      # 11
    "```",                 # 12
    "The end.",            # 13
]


@pytest.fixture
def config():
    return BridgeConfig(command="R --no-save --quiet", settle_delay=0)


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def rmd_editor():
    return MemoryEditor(RMD, cursor=(4, 0))
