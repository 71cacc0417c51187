"""Test dispatching regions and commands to the REPL.

Run with: pytest tests/test_dispatch.py -v
"""

import pytest

from replbridge.config import BridgeConfig
from replbridge.exceptions import TransmissionError
from replbridge.core.host import MemoryEditor
from replbridge.core.session import Session, SessionManager
from replbridge.core.types import DispatchOptions, Region, RegionKind, SessionState
from replbridge.document.extractor import RegionExtractor
from replbridge.dispatch import strategies
from replbridge.dispatch.engine import STRATEGIES, SOURCE_FILE, LINE_BY_LINE, DispatchEngine

from conftest import FakeBackend, RMD


def make_engine(editor, backend, config):
    manager = SessionManager(Session(context_id=editor.context_id()), backend, editor, config)
    return DispatchEngine(manager, RegionExtractor(config.chunk_pattern), editor, config)


def test_every_kind_has_a_strategy():
    assert set(STRATEGIES) == set(RegionKind)
    assert STRATEGIES[RegionKind.LINE] == LINE_BY_LINE
    assert STRATEGIES[RegionKind.CHUNK] == SOURCE_FILE


# Line

def test_line_sent_and_cursor_advances(backend, config):
    editor = MemoryEditor(RMD, cursor=(4, 0))
    engine = make_engine(editor, backend, config)

    assert engine.dispatch(RegionKind.LINE) is True

    assert backend.writes == ["x <- 1\n"]
    assert editor.cursor().line == 5


def test_line_stay(backend, config):
    editor = MemoryEditor(RMD, cursor=(4, 0))
    engine = make_engine(editor, backend, config)

    engine.dispatch(RegionKind.LINE, DispatchOptions(stay=True))

    assert editor.cursor().line == 4


def test_blank_line_not_sent_but_cursor_moves(backend, config):
    editor = MemoryEditor(RMD, cursor=(2, 0))
    engine = make_engine(editor, backend, config)

    assert engine.dispatch(RegionKind.LINE) is True

    assert backend.writes == []
    assert editor.cursor().line == 3


def test_last_line_keeps_cursor(backend, config):
    editor = MemoryEditor(RMD, cursor=(13, 0))
    engine = make_engine(editor, backend, config)

    engine.dispatch(RegionKind.LINE)

    assert editor.cursor().line == 13


# Chunk

def test_chunk_sourced_through_temp_file(backend, config):
    """A three-line chunk becomes one source command, not three sends."""
    editor = MemoryEditor(RMD, cursor=(5, 0))
    engine = make_engine(editor, backend, config)

    assert engine.dispatch(RegionKind.CHUNK) is True

    assert len(backend.writes) == 1
    assert backend.sourced_lines() == ["x <- 1", "y <- 2", "z <- x + y"]


def test_chunk_moves_to_next_chunk(backend, config):
    editor = MemoryEditor(RMD, cursor=(5, 0))
    engine = make_engine(editor, backend, config)

    engine.dispatch(RegionKind.CHUNK)

    assert editor.cursor().line == 10


def test_last_chunk_stays_on_end_delimiter(backend, config):
    editor = MemoryEditor(RMD, cursor=(11, 0))
    engine = make_engine(editor, backend, config)

    engine.dispatch(RegionKind.CHUNK)

    # single non-blank line goes straight to the REPL
    assert backend.writes == ["library(stats)\n"]
    assert editor.cursor().line == 12


def test_chunk_extraction_failure(backend, config):
    """Outside a chunk nothing is sent and the cursor does not move."""
    editor = MemoryEditor(RMD, cursor=(8, 0))
    engine = make_engine(editor, backend, config)

    assert engine.dispatch(RegionKind.CHUNK) is False

    assert backend.writes == []
    assert editor.cursor().line == 8
    errors = [m for m, error in editor.messages if error]
    assert len(errors) == 1
    assert "not inside" in errors[0]


def test_empty_chunk_still_navigates(backend, config):
    lines = ["```{r}", "", "```", "```{r}", "a <- 1", "```"]
    editor = MemoryEditor(lines, cursor=(2, 0))
    engine = make_engine(editor, backend, config)

    assert engine.dispatch(RegionKind.CHUNK) is True

    assert backend.writes == []
    assert editor.cursor().line == 5


# Selection

def test_selection_sent_line_by_line(backend, config):
    editor = MemoryEditor(RMD, cursor=(4, 0))
    editor.select((4, 0), (6, 10))
    engine = make_engine(editor, backend, config)

    assert engine.dispatch(RegionKind.SELECTION) is True

    assert backend.writes == ["x <- 1\n", "y <- 2\n", "z <- x + y\n"]
    assert editor.selection() is None
    assert editor.cursor().line == 7


def test_selection_pauses_between_lines(backend, monkeypatch):
    """Line-by-line sends settle between writes, not after the last one."""
    pauses = []
    monkeypatch.setattr(strategies.time, "sleep", pauses.append)
    config = BridgeConfig(settle_delay=0.25)
    editor = MemoryEditor(RMD, cursor=(4, 0))
    editor.select((4, 0), (6, 10))

    make_engine(editor, backend, config).dispatch(RegionKind.SELECTION)

    assert pauses == [0.25, 0.25]


def test_selection_skips_blank_lines(backend, config):
    editor = MemoryEditor(["a <- 1", "", "b <- 2"], cursor=(1, 0))
    editor.select((1, 0), (3, 6))
    engine = make_engine(editor, backend, config)

    engine.dispatch(RegionKind.SELECTION)

    assert backend.writes == ["a <- 1\n", "b <- 2\n"]


# Previous chunks and block

def test_previous_chunks_do_not_move_cursor(backend, config):
    editor = MemoryEditor(RMD, cursor=(13, 0))
    engine = make_engine(editor, backend, config)

    assert engine.dispatch(RegionKind.PREVIOUS_CHUNKS) is True

    assert backend.sourced_lines() == ["x <- 1", "y <- 2", "z <- x + y", "library(stats)"]
    assert editor.cursor().line == 13


def test_block_sourced_and_cursor_after_block(backend, config):
    lines = ["f <- function(x) {", "  x * 2", "}", "f(2)"]
    editor = MemoryEditor(lines, cursor=(1, 0))
    engine = make_engine(editor, backend, config)

    engine.dispatch(RegionKind.BLOCK)

    assert backend.sourced_lines() == lines[:3]
    assert editor.cursor().line == 4


# Empty content never reaches the REPL

@pytest.mark.parametrize("kind,lines,cursor", [
    (RegionKind.LINE, ["   "], 1),
    (RegionKind.CHUNK, ["```{r}", "  ", "```"], 2),
    (RegionKind.PREVIOUS_CHUNKS, ["text", "more"], 2),
    (RegionKind.BLOCK, [""], 1),
])
def test_empty_regions_never_written(backend, config, kind, lines, cursor):
    editor = MemoryEditor(lines, cursor=(cursor, 0))
    engine = make_engine(editor, backend, config)

    assert engine.dispatch(kind) is True
    assert backend.writes == []


def test_empty_selection_never_written(backend, config):
    editor = MemoryEditor(["a  b", "c"], cursor=(1, 0))
    editor.select((1, 1), (1, 3))
    engine = make_engine(editor, backend, config)

    assert engine.dispatch(RegionKind.SELECTION) is True

    assert backend.writes == []
    assert editor.selection() is None
    assert editor.cursor().line == 2


# Session handling

def test_no_session_no_transmission(config):
    backend = FakeBackend(resolvable=False)
    editor = MemoryEditor(RMD, cursor=(4, 0))
    engine = make_engine(editor, backend, config)

    assert engine.dispatch(RegionKind.LINE) is False

    assert backend.writes == []
    assert editor.cursor().line == 4
    assert len(editor.messages) == 1


def test_write_failure_resets_session(backend, config):
    """A failed write clears the session; the next dispatch respawns."""
    editor = MemoryEditor(RMD, cursor=(4, 0))
    engine = make_engine(editor, backend, config)

    backend.fail_writes = True
    assert engine.dispatch(RegionKind.LINE) is False
    assert engine.manager.session.state is SessionState.ABSENT
    assert editor.cursor().line == 4
    assert "Broken pipe" in editor.last_message

    backend.fail_writes = False
    assert engine.dispatch(RegionKind.LINE) is True
    assert len(backend.spawned) == 2
    assert backend.closed == [backend.spawned[0].pid]
    assert backend.writes == ["x <- 1\n"]


def test_temp_file_failure_closes_healthy_repl(backend, config, monkeypatch):
    """A REPL left running after a failed send is closed before respawning."""
    editor = MemoryEditor(RMD, cursor=(4, 0))
    engine = make_engine(editor, backend, config)

    def no_temp_dir(lines, suffix):
        raise TransmissionError("No usable temporary directory")

    monkeypatch.setattr(strategies, "write_temp_file", no_temp_dir)
    assert engine.dispatch(RegionKind.CHUNK) is False
    first = backend.spawned[0]
    assert backend.closed == [first.pid]
    assert backend.is_running(first) is False

    monkeypatch.undo()
    assert engine.dispatch(RegionKind.LINE) is True

    assert len(backend.spawned) == 2
    assert [h for h in backend.spawned if backend.is_running(h)] == [backend.spawned[1]]


def test_dispatch_after_external_kill_respawns(backend, config):
    editor = MemoryEditor(RMD, cursor=(4, 0))
    engine = make_engine(editor, backend, config)
    engine.dispatch(RegionKind.LINE)

    backend.kill(engine.manager.session.handle)
    engine.dispatch(RegionKind.LINE)

    assert len(backend.spawned) == 2
    assert backend.writes == ["x <- 1\n", "y <- 2\n"]


# Literal commands and pre-extracted regions

def test_send_literal_command(backend, config):
    editor = MemoryEditor(RMD, cursor=(4, 0))
    engine = make_engine(editor, backend, config)

    assert engine.send("summary(mtcars)") is True

    assert backend.writes == ["summary(mtcars)\n"]
    assert editor.cursor().line == 4


def test_send_multi_line_command(backend, config):
    engine = make_engine(MemoryEditor(["x"]), backend, config)

    engine.send("a <- 1\nb <- 2")

    assert backend.writes == ["a <- 1\n", "b <- 2\n"]


def test_send_blank_command(backend, config):
    engine = make_engine(MemoryEditor(["x"]), backend, config)

    assert engine.send("   ") is True
    assert backend.writes == []


def test_send_region(backend, config):
    editor = MemoryEditor(RMD, cursor=(4, 0))
    engine = make_engine(editor, backend, config)
    region = Region(kind=RegionKind.CHUNK, lines=["a <- 1", "b <- 2"], start_line=3, end_line=7)

    assert engine.send(region) is True

    assert backend.sourced_lines() == ["a <- 1", "b <- 2"]
    assert editor.cursor().line == 10


def test_temp_file_suffix(backend):
    """Template and suffix make the temp-file route work for other REPLs."""
    editor = MemoryEditor(["# %%", "a = 1", "b = 2", "# --"], cursor=(2, 0))
    config = BridgeConfig(
        command="python3 -i",
        source_template="exec(open('{path}').read())",
        temp_suffix=".py",
        chunk_start=r"^# %%",
        chunk_end=r"^# --",
        settle_delay=0,
    )
    engine = make_engine(editor, backend, config)

    engine.dispatch(RegionKind.CHUNK)

    assert backend.writes[0].startswith("exec(open('")
    assert ".py')" in backend.writes[0]
