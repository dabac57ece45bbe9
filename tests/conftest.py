"""Pytest configuration for issuecsv tests.

Puts the in-repo ``src`` directory on ``sys.path`` so the package imports
without an editable install.
"""

from __future__ import annotations

import os
import sys
import time
from pathlib import Path

import pytest

_TEST_START_TIMES: dict[str, float] = {}
_TEST_DURATIONS: list[tuple[str, float]] = []

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

os.environ.setdefault("NO_COLOR", "1")

SAMPLE_CSV = (
    "Issue Id,Project,Summary,Description,State,Tags\r\n"
    "A-1,P1,Fix bug,\"Crash on save,\nsee log\",Open,\"bug, ui\"\r\n"
    "A-2,P1,Feature,,Open,\r\n"
)


@pytest.fixture
def sample_csv() -> str:
    return SAMPLE_CSV


@pytest.fixture(autouse=True)
def _fresh_logger() -> None:
    # Rebind the global logger to the current (possibly captured) stdout
    from issuecsv.logging import configure_logging

    configure_logging()


def pytest_runtest_setup(item):  # type: ignore
    _TEST_START_TIMES[item.nodeid] = time.perf_counter()


def pytest_runtest_teardown(item):  # type: ignore
    start = _TEST_START_TIMES.pop(item.nodeid, None)
    if start is not None:
        _TEST_DURATIONS.append((item.nodeid, time.perf_counter() - start))


def pytest_sessionfinish(session, exitstatus):  # type: ignore
    if not _TEST_DURATIONS:
        return
    slow = sorted(_TEST_DURATIONS, key=lambda x: x[1], reverse=True)[:5]
    print("\n=== Slowest Tests (top 5) ===")
    for nodeid, secs in slow:
        print(f"{secs:0.3f}s  {nodeid}")
