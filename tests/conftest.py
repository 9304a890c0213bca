# tests/conftest.py
"""Pytest configuration with shared fixtures for the gitdeck tests."""

from __future__ import annotations

import queue
import tempfile
from pathlib import Path
from typing import Any, Generator
from unittest.mock import MagicMock, Mock, patch

import pytest

from gitdeck.core.Dashboard import Dashboard
from gitdeck.core.Messages import ResizeMsg, TaskErrorMsg
from gitdeck.integrations.GitBridge import Branch, CommitLog, GitBridge, GitError, Stash
from gitdeck.utils.utils import DEFAULT_CONFIG, deep_merge


# --- Automatic mocking of the curses module ---
@pytest.fixture(autouse=True)
def mock_curses_functions() -> Generator[None, None, None]:
    """Replaces `curses` in `sys.modules` for code that imports it lazily.

    Modules that imported `curses` at collection time keep the real module;
    tests that touch the terminal patch the module attribute directly.
    """
    curses_mock = MagicMock()
    curses_mock.initscr.return_value = MagicMock()
    curses_mock.color_pair.side_effect = lambda n: n << 8
    curses_mock.has_colors.return_value = True
    curses_mock.COLORS = 256
    curses_mock.COLOR_PAIRS = 256
    curses_mock.A_NORMAL = 0
    curses_mock.A_BOLD = 1
    curses_mock.A_REVERSE = 4

    with patch.dict("sys.modules", {"curses": curses_mock}):
        yield


# --- Base fixtures for curses and configuration ---
@pytest.fixture
def mock_stdscr() -> MagicMock:
    """A mocked `stdscr` with terminal size set to (24, 80)."""
    stdscr = MagicMock()
    stdscr.getmaxyx.return_value = (24, 80)
    return stdscr


@pytest.fixture
def mock_config() -> dict[str, Any]:
    """Default configuration with the file watcher switched off."""
    return deep_merge(DEFAULT_CONFIG, {"watcher": {"enabled": False}})


# --- Engine double ---
class SyncEngine:
    """Runs submitted tasks immediately on the calling thread.

    Results land on `to_ui_queue` exactly as `AsyncEngine.run_task`
    would put them there, so tests drive the dashboard with
    `process_pending()`.
    """

    def __init__(self, to_ui_queue: "queue.Queue[Any]") -> None:
        self.to_ui_queue = to_ui_queue
        self.submitted: list[dict[str, Any]] = []
        self.started = False
        self.stopped = False

    def submit_task(self, task_data: dict[str, Any]) -> None:
        self.submitted.append(task_data)
        try:
            result = task_data["func"]()
            self.to_ui_queue.put(task_data["on_result"](result))
        except GitError as e:
            on_error = task_data.get("on_error")
            if on_error is None:
                self.to_ui_queue.put(TaskErrorMsg(task=task_data["name"], error=str(e)))
            else:
                self.to_ui_queue.put(on_error(e))

    def start(self) -> None:
        self.started = True

    def stop(self) -> None:
        self.stopped = True


# --- Git bridge double ---
@pytest.fixture
def fake_git() -> Mock:
    """A `GitBridge` double holding a small repository.

    Two changed files, two branches, one merge history and one stash.
    """
    git = Mock(spec=GitBridge)
    git.repo_info.return_value = ("demo", "main")
    git.user_name.return_value = "Alice"
    git.status.return_value = "M  src/app.py\n?? notes.txt\n"
    git.branches.return_value = [
        Branch(name="main", last_commit="2 hours ago", is_current=True),
        Branch(name="feature", last_commit="3 days ago", is_current=False),
    ]
    git.commit_graph.return_value = [
        CommitLog(graph="○ ", sha="abc1234", author_initials="AL", subject="Merge feature"),
        CommitLog(graph="|\\", sha="", author_initials="", subject=""),
        CommitLog(graph="○ ", sha="def5678", author_initials="BO", subject="Add app"),
    ]
    git.stashes.return_value = [Stash(name="stash@{0}", branch="On main", message="wip")]
    git.diff.return_value = "diff --git a/src/app.py b/src/app.py\n+print('hi')\n"
    git.show_commit.return_value = "commit abc1234\n"
    git.branch_log.return_value = "* abc1234 Merge feature\n"
    git.stash_show.return_value = "diff --git a/x b/x\n-old\n+new\n"
    return git


@pytest.fixture
def dashboard(fake_git: Mock, mock_config: dict[str, Any]) -> Dashboard:
    """A dashboard sized 100x30 with every panel loaded through `SyncEngine`."""
    ui_queue: queue.Queue[Any] = queue.Queue()
    dash = Dashboard(fake_git, config=mock_config, engine=SyncEngine(ui_queue), to_ui_queue=ui_queue)
    dash.update(ResizeMsg(width=100, height=30))
    dash.refresh_all()
    dash.process_pending()
    return dash


# --- Filesystem fixtures ---
@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """A temporary work tree with a `.git` directory and a couple of files.

    The structure includes:
    - .git/HEAD, .git/index, .git/refs/heads/main
    - file1.txt
    - subdir/subfile.txt
    """
    with tempfile.TemporaryDirectory() as tmp_dir:
        tmp_path = Path(tmp_dir)

        git_dir = tmp_path / ".git"
        (git_dir / "refs" / "heads").mkdir(parents=True)
        (git_dir / "HEAD").write_text("ref: refs/heads/main\n")
        (git_dir / "index").write_bytes(b"DIRC")
        (git_dir / "refs" / "heads" / "main").write_text("abc1234\n")

        (tmp_path / "file1.txt").write_text("Content of file1")
        subdir = tmp_path / "subdir"
        subdir.mkdir()
        (subdir / "subfile.txt").write_text("Content of subfile")

        yield tmp_path
