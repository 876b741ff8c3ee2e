"""Shared fixtures for wm_trace tests."""

import pytest

from sample_traces import chrome_opening_trace, encode, launcher_snapshot

from wm_trace.entry import TraceEntry
from wm_trace.parser import WindowManagerTraceParser
from wm_trace.trace import Trace


@pytest.fixture
def parser() -> WindowManagerTraceParser:
    return WindowManagerTraceParser()


@pytest.fixture
def launcher_entry(parser) -> TraceEntry:
    """Single entry: launcher on the home screen."""
    return parser.parse_from_dump(encode(launcher_snapshot())).first()


@pytest.fixture
def chrome_trace(parser) -> Trace:
    """Three entries of Chrome opening over the launcher."""
    return parser.parse_from_trace(encode(chrome_opening_trace()), source="chrome_opening.json")


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Keep tests off the user's checker config."""
    monkeypatch.setenv("WM_TRACE_CONFIG", str(tmp_path / "missing-config.json"))
