# gitdeck/integrations/FileWatcher.py
"""FileWatcher.py
========================
Background watcher that tells the dashboard when the repository changed.

The watcher polls. Every `interval_ms` it hashes stat metadata of the git
control files (HEAD, index, refs, stash, packed-refs, in-progress operation
markers) and of the working tree. When the digest differs from the previous
tick it posts one `FileChangedMsg`; however many files changed during the
interval, the dashboard sees a single refresh request.

Failures while scanning are logged and end the watcher thread. The dashboard
then simply receives no live updates.
"""

import hashlib
import logging
import os
import threading
from pathlib import Path
from typing import Any, Optional

from gitdeck.core.Messages import FileChangedMsg


logger = logging.getLogger("gitdeck")

GIT_CONTROL_FILES = (
    "HEAD",
    "index",
    "packed-refs",
    "FETCH_HEAD",
    "ORIG_HEAD",
    "MERGE_HEAD",
    "CHERRY_PICK_HEAD",
    "REBASE_HEAD",
    "logs/HEAD",
    "refs/stash",
)
GIT_REF_DIRS = ("refs/heads", "refs/tags", "refs/remotes")


def _update_digest(digest: "hashlib._Hash", token: str) -> None:
    digest.update(token.encode("utf-8", errors="surrogateescape"))
    digest.update(b"\0")


def _stat_token(path: Path) -> str:
    try:
        st = path.stat()
    except FileNotFoundError:
        return "missing"
    return f"{st.st_mtime_ns}:{st.st_size}"


def git_signature(git_dir: Path) -> str:
    """Digest over the git control files that change on status-relevant events."""
    digest = hashlib.blake2b(digest_size=20)
    for name in GIT_CONTROL_FILES:
        _update_digest(digest, f"{name}:{_stat_token(git_dir / name)}")

    for ref_dir in GIT_REF_DIRS:
        root = git_dir / ref_dir
        if not root.is_dir():
            continue
        for dirpath, _dirnames, filenames in os.walk(root):
            for filename in sorted(filenames):
                path = Path(dirpath) / filename
                _update_digest(digest, f"ref:{path}:{_stat_token(path)}")
    return digest.hexdigest()


def worktree_signature(root: Path, max_entries: int) -> str:
    """Digest over file metadata in the working tree, `.git` excluded.

    At most `max_entries` paths are hashed so huge trees stay cheap to poll.
    """
    digest = hashlib.blake2b(digest_size=20)
    seen = 0
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d != ".git")
        for filename in sorted(filenames):
            if seen >= max_entries:
                return digest.hexdigest()
            path = Path(dirpath) / filename
            try:
                st = path.lstat()
            except FileNotFoundError:
                continue
            _update_digest(digest, f"{path}:{st.st_mtime_ns}:{st.st_size}")
            seen += 1
        _update_digest(digest, f"dir:{dirpath}")
    return digest.hexdigest()


class FileWatcher:
    """Polls the repository and posts `FileChangedMsg` to the UI queue.

    Attributes:
        repo_root (Path): Top level of the work tree.
        git_dir (Path): The repository control directory.
        interval (float): Seconds between two polls.
        max_entries (int): Upper bound of work tree files hashed per poll.
    """

    def __init__(
        self,
        repo_root: str,
        git_dir: str,
        to_ui_queue: Any,
        config: Optional[dict[str, Any]] = None,
    ) -> None:
        watcher_config = (config or {}).get("watcher", {})
        self.repo_root = Path(repo_root)
        self.git_dir = Path(git_dir)
        self.to_ui_queue = to_ui_queue
        self.enabled: bool = bool(watcher_config.get("enabled", True))
        self.interval: float = max(0.05, int(watcher_config.get("interval_ms", 500)) / 1000.0)
        self.max_entries: int = int(watcher_config.get("max_entries", 20000))
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._last_signature: Optional[str] = None

    def signature(self) -> str:
        return git_signature(self.git_dir) + worktree_signature(self.repo_root, self.max_entries)

    def poll(self) -> bool:
        """Takes one snapshot. Returns True and posts a message when it changed."""
        current = self.signature()
        if self._last_signature is None:
            self._last_signature = current
            return False
        if current == self._last_signature:
            return False
        self._last_signature = current
        self.to_ui_queue.put(FileChangedMsg())
        return True

    def start(self) -> None:
        if not self.enabled:
            logger.info("FileWatcher disabled by configuration.")
            return
        if self._thread is not None:
            logger.warning("FileWatcher already started.")
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, daemon=True, name="FileWatcherThread")
        self._thread.start()
        logger.info(f"FileWatcher polling {self.repo_root} every {self.interval:.2f}s")

    def _run(self) -> None:
        try:
            self.poll()
            while not self._stop_event.wait(self.interval):
                self.poll()
        except OSError as e:
            logger.error(f"FileWatcher stopped, live updates disabled: {e}", exc_info=True)

    def stop(self) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=2.0)
            self._thread = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()
