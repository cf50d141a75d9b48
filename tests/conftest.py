from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from commit_canvas import git_client
from commit_canvas.config import AppConfig
from commit_canvas.errors import GitCommandError
from commit_canvas.grid import GRID_COLS, GRID_ROWS, blank_levels
from commit_canvas.models import DateRange, GridPayload
from commit_canvas.planner import default_intensity_map
from commit_canvas.progress import ProgressTracker

START_DATE = "2023-01-01"
END_DATE = "2023-12-23"


@pytest.fixture
def date_range() -> DateRange:
    return DateRange(start_date=START_DATE, end_date=END_DATE)


@pytest.fixture
def make_grid() -> Callable[..., GridPayload]:
    def _make(cells: dict[tuple[int, int], int] | None = None, fill: int = 0) -> GridPayload:
        levels = blank_levels(fill)
        for (row, col), level in (cells or {}).items():
            levels[row][col] = level
        return GridPayload(rows=GRID_ROWS, cols=GRID_COLS, levels=levels)

    return _make


@pytest.fixture
def app_config(tmp_path) -> AppConfig:
    output_root = tmp_path / "output"
    output_root.mkdir()
    return AppConfig(output_root=output_root.resolve(), intensity_map=default_intensity_map())


@pytest.fixture
def tracker():
    progress_tracker = ProgressTracker(eviction_delay=600)
    yield progress_tracker
    progress_tracker.close()


class FakeGit:
    """Records git invocations in place of a real ``git`` binary."""

    def __init__(self) -> None:
        self.calls: list[dict[str, object]] = []
        self.fail_on: str | None = None
        self.log_output = "abc1234 chore(history): 2023-01-01 #1\n"

    def __call__(self, cmd: list[str], cwd: Path | None = None, env=None) -> str:
        self.calls.append({"cmd": cmd, "cwd": cwd, "env": env})
        if self.fail_on and self.fail_on in cmd:
            raise GitCommandError(cmd, 1, f"simulated {self.fail_on} failure")
        if "log" in cmd:
            return self.log_output
        return ""

    def commands(self, name: str) -> list[dict[str, object]]:
        return [call for call in self.calls if name in call["cmd"]]


@pytest.fixture
def fake_git(monkeypatch: pytest.MonkeyPatch) -> FakeGit:
    fake = FakeGit()
    monkeypatch.setattr(git_client, "run_cmd", fake)
    return fake
