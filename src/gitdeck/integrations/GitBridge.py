# gitdeck/integrations/GitBridge.py
"""GitBridge.py
========================
The repository command layer of gitdeck.

`GitBridge` runs git through `safe_run` and returns either text or small
structured records. It is strictly synchronous and holds no UI state; the
dashboard dispatches its calls onto the `AsyncEngine` so that nothing here
ever runs on the input-handling thread.

Every failing command raises `GitCommandError` carrying the argument list,
return code and the trimmed stderr of git.
"""

import functools
import logging
import os
from dataclasses import dataclass
from typing import Any, Optional

from gitdeck.utils.utils import safe_run


logger = logging.getLogger("gitdeck")

COMMIT_DELIMITER = "<COMMIT>"
COMMIT_LOG_FORMAT = f"{COMMIT_DELIMITER}%h|%an|%s"
GRAPH_NODE = "○"
BRANCH_FORMAT = "%(HEAD)|%(refname:short)|%(committerdate:relative)"
STASH_FORMAT = "%gd|%gs"


class GitError(Exception):
    """Base class for repository command failures."""


class NotARepositoryError(GitError):
    pass


class GitCommandError(GitError):
    def __init__(self, args: list[str], returncode: int, stderr: str) -> None:
        self.args_list = list(args)
        self.returncode = returncode
        self.stderr = stderr.strip()
        detail = self.stderr.splitlines()[0] if self.stderr else f"exit status {returncode}"
        super().__init__(f"git {' '.join(args)}: {detail}")


@dataclass(frozen=True)
class Branch:
    name: str
    last_commit: str
    is_current: bool = False


@dataclass(frozen=True)
class CommitLog:
    graph: str
    sha: str = ""
    author_initials: str = ""
    subject: str = ""


@dataclass(frozen=True)
class Stash:
    name: str
    branch: str
    message: str


def get_initials(name: str) -> str:
    """Up to two upper-case initials: "John Doe" -> "JD", "john" -> "JO"."""
    name = name.strip()
    if not name:
        return ""
    parts = name.split()
    if len(parts) > 1:
        return (parts[0][0] + parts[-1][0]).upper()
    letters = [ch.upper() for ch in name if ch.isalpha()]
    return "".join(letters[:2])


def parse_commit_logs(output: str) -> list[CommitLog]:
    logs: list[CommitLog] = []
    if not output.strip():
        return logs
    for line in output.strip().split("\n"):
        line = line.replace("*", GRAPH_NODE)
        if COMMIT_DELIMITER in line:
            graph, data = line.split(COMMIT_DELIMITER, 1)
            fields = data.split("|", 2)
            if len(fields) == 3:
                logs.append(CommitLog(graph, fields[0], get_initials(fields[1]), fields[2]))
        else:
            logs.append(CommitLog(graph=line))
    return logs


def parse_branches(output: str) -> list[Branch]:
    branches: list[Branch] = []
    for line in output.splitlines():
        fields = line.split("|", 2)
        if len(fields) != 3 or not fields[1]:
            continue
        head, name, date = fields
        branches.append(Branch(name=name, last_commit=date, is_current=head.strip() == "*"))
    return branches


def parse_stashes(output: str) -> list[Stash]:
    stashes: list[Stash] = []
    for line in output.splitlines():
        if "|" not in line:
            continue
        name, subject = line.split("|", 1)
        branch, _, message = subject.partition(": ")
        stashes.append(Stash(name=name, branch=branch, message=message))
    return stashes


# ================= GitBridge Class ==============================
class GitBridge:
    """Synchronous facade over the git executable for one repository.

    Attributes:
        repo_dir (str): Directory git runs in; any path inside the work tree.
        executable (str): Name or path of the git binary.
        timeout (float): Per-command timeout in seconds.
    """

    def __init__(self, repo_dir: Optional[str] = None, config: Optional[dict[str, Any]] = None) -> None:
        git_config = (config or {}).get("git", {})
        self.repo_dir: str = repo_dir or os.getcwd()
        self.executable: str = git_config.get("executable", "git")
        self.timeout: float = float(git_config.get("timeout", 10))
        self._run = functools.partial(safe_run, cwd=self.repo_dir, timeout=self.timeout)

    # ---------------------------------------------------------------- core

    def run(self, *args: str) -> str:
        """Runs ``git <args>`` and returns stdout, raising on a non-zero exit."""
        cmd = [self.executable, *args]
        logger.debug(f"GitBridge: running {' '.join(cmd)}")
        res = self._run(cmd)
        if res.returncode != 0:
            err = GitCommandError(list(args), res.returncode, res.stderr or res.stdout or "")
            logger.warning(f"GitBridge: {err}")
            raise err
        return res.stdout

    def is_repository(self) -> bool:
        res = self._run([self.executable, "rev-parse", "--is-inside-work-tree"])
        return res.returncode == 0 and res.stdout.strip() == "true"

    def ensure_repository(self) -> None:
        if not self.is_repository():
            raise NotARepositoryError(f"{self.repo_dir} is not inside a git work tree")

    def toplevel(self) -> str:
        return self.run("rev-parse", "--show-toplevel").strip()

    def git_dir(self) -> str:
        return self.run("rev-parse", "--absolute-git-dir").strip()

    # ---------------------------------------------------------------- queries

    def repo_info(self) -> tuple[str, str]:
        """Returns ``(repository name, current branch)``."""
        repo_name = os.path.basename(self.toplevel())
        branch = self.run("rev-parse", "--abbrev-ref", "HEAD").strip()
        return repo_name, branch

    def user_name(self) -> str:
        try:
            return self.run("config", "user.name").strip()
        except GitCommandError:
            # unset user.name exits with status 1
            return ""

    def status(self) -> str:
        return self.run("status", "--porcelain", "-uall")

    def branches(self) -> list[Branch]:
        out = self.run(
            "for-each-ref", "--sort=-committerdate", f"--format={BRANCH_FORMAT}", "refs/heads/"
        )
        return parse_branches(out)

    def commit_graph(self) -> list[CommitLog]:
        try:
            out = self.run(
                "log", f"--pretty=format:{COMMIT_LOG_FORMAT}", "--graph", "--all", "--color=never"
            )
        except GitCommandError as e:
            # a repository without commits has no log yet
            if "does not have any commits" in e.stderr:
                return []
            raise
        return parse_commit_logs(out)

    def stashes(self) -> list[Stash]:
        return parse_stashes(self.run("stash", "list", f"--format={STASH_FORMAT}"))

    def diff(self, path: str, *, cached: bool = False, against_head: bool = False) -> str:
        args = ["diff", "--color=never"]
        if cached:
            args.append("--cached")
        if against_head:
            args.append("HEAD")
        return self.run(*args, "--", path)

    def show_commit(self, sha: str) -> str:
        return self.run("show", "--color=never", sha)

    def branch_log(self, branch: str) -> str:
        return self.run("log", "--graph", "--color=never", branch)

    def stash_show(self, stash_id: str) -> str:
        return self.run("stash", "show", "-p", "--color=never", stash_id)

    # ---------------------------------------------------------------- staging

    def add(self, *paths: str) -> str:
        return self.run("add", "--", *paths)

    def add_all(self) -> str:
        return self.run("add", ".")

    def reset_paths(self, *paths: str) -> str:
        return self.run("reset", "-q", "HEAD", "--", *paths)

    def restore(self, *paths: str, staged: bool = False, worktree: bool = True) -> str:
        args = ["restore"]
        if staged:
            args.append("--staged")
        if worktree:
            args.append("--worktree")
        return self.run(*args, "--", *paths)

    def clean(self, *paths: str) -> str:
        return self.run("clean", "-f", "--", *paths)

    # ---------------------------------------------------------------- commits

    def commit(self, message: str) -> str:
        return self.run("commit", "-m", message)

    def amend(self, message: Optional[str] = None) -> str:
        if message:
            return self.run("commit", "--amend", "-m", message)
        return self.run("commit", "--amend", "--no-edit")

    def revert(self, sha: str) -> str:
        return self.run("revert", "--no-edit", sha)

    def reset_to(self, sha: str, mode: str = "mixed") -> str:
        return self.run("reset", f"--{mode}", sha)

    # ---------------------------------------------------------------- branches

    def checkout(self, branch: str) -> str:
        return self.run("checkout", branch)

    def switch(self, branch: str, create: bool = False) -> str:
        if create:
            return self.run("switch", "-c", branch)
        return self.run("switch", branch)

    def create_branch(self, name: str) -> str:
        return self.run("branch", name)

    def delete_branch(self, name: str, force: bool = False) -> str:
        return self.run("branch", "-D" if force else "-d", name)

    def rename_branch(self, old: str, new: str) -> str:
        return self.run("branch", "-m", old, new)

    # ---------------------------------------------------------------- stash

    def stash_push(self, message: str = "", include_untracked: bool = False) -> str:
        args = ["stash", "push"]
        if include_untracked:
            args.append("--include-untracked")
        if message:
            args.extend(["-m", message])
        return self.run(*args)

    def stash_apply(self, stash_id: str) -> str:
        return self.run("stash", "apply", stash_id)

    def stash_pop(self, stash_id: str) -> str:
        return self.run("stash", "pop", stash_id)

    def stash_drop(self, stash_id: str) -> str:
        return self.run("stash", "drop", stash_id)
