# tests/integrations/test_gitbridge.py
"""Unit tests for the `GitBridge` integration.
=============================================

This module tests the ability of `GitBridge` to run git commands and parse
their output into the records the dashboard shows:

- Repository name, current branch and configured user name.
- Branch list, commit graph and stash list parsing.
- Argument lists of repository actions.
- `GitCommandError` raised on non-zero exits.

`safe_run` is replaced by a fake that answers from a lookup table of
pre-defined outputs, so no real repository is needed.

Tools & libraries:
- `pytest` (test framework).
- `unittest.mock` for patching `safe_run`.
- `subprocess.CompletedProcess` for mocking process execution results.
"""

import subprocess
from unittest import mock

import pytest

from gitdeck.integrations.GitBridge import (
    BRANCH_FORMAT,
    COMMIT_LOG_FORMAT,
    STASH_FORMAT,
    Branch,
    CommitLog,
    GitBridge,
    GitCommandError,
    NotARepositoryError,
    get_initials,
    parse_branches,
    parse_commit_logs,
    parse_stashes,
)


LOG_OUTPUT = (
    "*   <COMMIT>abc1234|Alice Liddell|Merge branch 'feature'\n"
    "|\\  \n"
    "| * <COMMIT>def5678|bob|Add parser\n"
    "|/  \n"
    "* <COMMIT>0123abc|Carol Ann Smith|Initial commit\n"
)

TABLE = {
    ("git", "rev-parse", "--is-inside-work-tree"): (0, "true\n", ""),
    ("git", "rev-parse", "--show-toplevel"): (0, "/home/alice/demo\n", ""),
    ("git", "rev-parse", "--abbrev-ref", "HEAD"): (0, "main\n", ""),
    ("git", "config", "user.name"): (0, "Alice\n", ""),
    ("git", "status", "--porcelain", "-uall"): (0, "M  src/app.py\n", ""),
    (
        "git", "for-each-ref", "--sort=-committerdate", f"--format={BRANCH_FORMAT}", "refs/heads/",
    ): (0, "*|main|2 hours ago\n |feature|3 days ago\n", ""),
    (
        "git", "log", f"--pretty=format:{COMMIT_LOG_FORMAT}", "--graph", "--all", "--color=never",
    ): (0, LOG_OUTPUT, ""),
    ("git", "stash", "list", f"--format={STASH_FORMAT}"): (
        0,
        "stash@{0}|On main: wip\nstash@{1}|WIP on feature: 0123abc Initial commit\n",
        "",
    ),
}


def fake_run(table):
    """Builds a fake `safe_run` answering from `table`; unknown commands succeed silently."""

    def fake(cmd, **_):
        returncode, stdout, stderr = table.get(tuple(cmd), (0, "", ""))
        return subprocess.CompletedProcess(cmd, returncode, stdout, stderr)

    return fake


@pytest.fixture
def bridge():
    with mock.patch("gitdeck.integrations.GitBridge.safe_run") as mock_run:
        mock_run.side_effect = fake_run(TABLE)
        yield GitBridge("/home/alice/demo", {"git": {"timeout": 5}}), mock_run


class TestQueries:
    """Read-only commands and their parsing."""

    def test_repo_info(self, bridge) -> None:
        git, _ = bridge
        assert git.repo_info() == ("demo", "main")

    def test_user_name(self, bridge) -> None:
        git, _ = bridge
        assert git.user_name() == "Alice"

    def test_unset_user_name_is_empty(self) -> None:
        table = dict(TABLE)
        table[("git", "config", "user.name")] = (1, "", "")
        with mock.patch("gitdeck.integrations.GitBridge.safe_run", side_effect=fake_run(table)):
            assert GitBridge("/repo").user_name() == ""

    def test_branches(self, bridge) -> None:
        git, _ = bridge
        assert git.branches() == [
            Branch("main", "2 hours ago", is_current=True),
            Branch("feature", "3 days ago", is_current=False),
        ]

    def test_commit_graph(self, bridge) -> None:
        git, _ = bridge
        logs = git.commit_graph()
        assert len(logs) == 5
        assert logs[0] == CommitLog("○   ", "abc1234", "AL", "Merge branch 'feature'")
        assert logs[1] == CommitLog("|\\  ")
        assert logs[2].author_initials == "BO"
        assert logs[4].author_initials == "CS"

    def test_commit_graph_of_empty_repository(self) -> None:
        table = dict(TABLE)
        key = ("git", "log", f"--pretty=format:{COMMIT_LOG_FORMAT}", "--graph", "--all", "--color=never")
        table[key] = (128, "", "fatal: your current branch 'main' does not have any commits yet")
        with mock.patch("gitdeck.integrations.GitBridge.safe_run", side_effect=fake_run(table)):
            assert GitBridge("/repo").commit_graph() == []

    def test_stashes(self, bridge) -> None:
        git, _ = bridge
        stashes = git.stashes()
        assert [s.name for s in stashes] == ["stash@{0}", "stash@{1}"]
        assert stashes[0].branch == "On main"
        assert stashes[0].message == "wip"

    def test_runs_in_repository_with_timeout(self, bridge) -> None:
        git, mock_run = bridge
        git.status()
        _, kwargs = mock_run.call_args
        assert kwargs == {"cwd": "/home/alice/demo", "timeout": 5.0}


class TestErrors:
    """Non-zero exits raise."""

    def test_command_error_carries_details(self) -> None:
        table = {("git", "checkout", "nope"): (1, "", "error: pathspec 'nope' did not match\nhint: x\n")}
        with mock.patch("gitdeck.integrations.GitBridge.safe_run", side_effect=fake_run(table)):
            with pytest.raises(GitCommandError) as info:
                GitBridge("/repo").checkout("nope")
        err = info.value
        assert err.returncode == 1
        assert err.args_list == ["checkout", "nope"]
        assert str(err) == "git checkout nope: error: pathspec 'nope' did not match"

    def test_not_a_repository(self) -> None:
        table = {("git", "rev-parse", "--is-inside-work-tree"): (128, "", "fatal: not a git repository")}
        with mock.patch("gitdeck.integrations.GitBridge.safe_run", side_effect=fake_run(table)):
            git = GitBridge("/tmp")
            assert not git.is_repository()
            with pytest.raises(NotARepositoryError):
                git.ensure_repository()


class TestActions:
    """Argument lists of the write commands."""

    @pytest.mark.parametrize(
        "call, expected",
        [
            (lambda g: g.add("a.txt"), ["add", "--", "a.txt"]),
            (lambda g: g.add_all(), ["add", "."]),
            (lambda g: g.reset_paths("a.txt"), ["reset", "-q", "HEAD", "--", "a.txt"]),
            (lambda g: g.restore("a.txt"), ["restore", "--worktree", "--", "a.txt"]),
            (lambda g: g.clean("n.txt"), ["clean", "-f", "--", "n.txt"]),
            (lambda g: g.commit("msg"), ["commit", "-m", "msg"]),
            (lambda g: g.amend(), ["commit", "--amend", "--no-edit"]),
            (lambda g: g.revert("abc1234"), ["revert", "--no-edit", "abc1234"]),
            (lambda g: g.reset_to("abc1234"), ["reset", "--mixed", "abc1234"]),
            (lambda g: g.switch("topic", create=True), ["switch", "-c", "topic"]),
            (lambda g: g.delete_branch("old"), ["branch", "-d", "old"]),
            (lambda g: g.rename_branch("a", "b"), ["branch", "-m", "a", "b"]),
            (lambda g: g.stash_push("wip", include_untracked=True),
             ["stash", "push", "--include-untracked", "-m", "wip"]),
            (lambda g: g.stash_drop("stash@{0}"), ["stash", "drop", "stash@{0}"]),
            (lambda g: g.stash_show("stash@{0}"), ["stash", "show", "-p", "--color=never", "stash@{0}"]),
        ],
    )
    def test_arguments(self, bridge, call, expected) -> None:
        git, mock_run = bridge
        call(git)
        cmd = mock_run.call_args[0][0]
        assert cmd == ["git", *expected]


class TestParsers:
    """Pure parsing helpers."""

    @pytest.mark.parametrize(
        "name, initials",
        [("John Doe", "JD"), ("john", "JO"), ("Mary Ann Lee", "ML"), ("x", "X"), ("", "")],
    )
    def test_get_initials(self, name: str, initials: str) -> None:
        assert get_initials(name) == initials

    def test_commit_log_with_missing_fields_is_skipped(self) -> None:
        assert parse_commit_logs("* <COMMIT>abc1234|only two") == []

    def test_empty_outputs(self) -> None:
        assert parse_commit_logs("") == []
        assert parse_branches("") == []
        assert parse_stashes("") == []
