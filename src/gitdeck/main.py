#!/usr/bin/env python3
# gitdeck/main.py
"""
gitdeck Main Entry Point
========================

This module launches the gitdeck dashboard. It performs:
1) Environment Loading: reads ~/.config/gitdeck/.env early.
2) Configuration & Logging: loads config and initializes logging ASAP.
3) Repository Check: refuses to start outside a git work tree.
4) Curses Wrapper: safely initializes/tears down curses to avoid terminal corruption.
5) Application Run: wires the Dashboard, AsyncEngine and FileWatcher and starts the main loop.
"""

from __future__ import annotations

import curses
import locale
import logging
import os
import queue
import signal
import sys
from typing import Any, Optional

from dotenv import load_dotenv

from gitdeck.core.AsyncEngine import AsyncEngine
from gitdeck.core.Dashboard import Dashboard
from gitdeck.integrations.FileWatcher import FileWatcher
from gitdeck.integrations.GitBridge import GitBridge, GitError, NotARepositoryError
from gitdeck.ui.KeyBinder import KeyMap
from gitdeck.utils.logging_config import setup_logging
from gitdeck.utils.utils import get_config_dir, load_config


logger = logging.getLogger("gitdeck")


def main_app_runner(stdscr: curses.window, config: dict[str, Any], git: GitBridge) -> None:
    """
    Target for `curses.wrapper`. Builds the dashboard and runs its main loop.

    Args:
        stdscr: Curses standard screen window provided by wrapper.
        config: Application configuration dict.
        git: Bridge bound to the repository being shown.
    """
    try:
        curses.set_escdelay(25)
    except curses.error:
        os.environ.setdefault("ESCDELAY", "25")

    # Ctrl+Z would leave the terminal in raw mode behind a stopped process.
    if hasattr(signal, "SIGTSTP"):
        signal.signal(signal.SIGTSTP, signal.SIG_IGN)

    to_ui_queue: queue.Queue[Any] = queue.Queue()
    engine = AsyncEngine(to_ui_queue, config)
    watcher = FileWatcher(git.toplevel(), git.git_dir(), to_ui_queue, config)
    dashboard = Dashboard(
        git,
        config=config,
        keymap=KeyMap.from_config(config),
        engine=engine,
        to_ui_queue=to_ui_queue,
    )
    dashboard.run(stdscr, watcher=watcher)


def start(argv: Optional[list[str]] = None) -> None:
    """
    Console entry point: `gitdeck [REPO_DIR]`.
    """
    argv = sys.argv if argv is None else argv
    load_dotenv(dotenv_path=get_config_dir() / ".env")

    try:
        config: dict[str, Any] = load_config()
        setup_logging(config)
    except Exception as e:
        print(f"FATAL: Could not initialize configuration or logging system: {e}", file=sys.stderr)
        sys.exit(1)

    logger.info("gitdeck starting up...")
    try:
        locale.setlocale(locale.LC_ALL, "")
    except locale.Error:
        logger.warning("Could not set system locale. Character rendering may be affected.")

    repo_dir = argv[1] if len(argv) > 1 else os.getcwd()
    git = GitBridge(repo_dir, config)
    try:
        git.ensure_repository()
    except NotARepositoryError as e:
        logger.error(f"Refusing to start: {e}")
        print(f"gitdeck: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        curses.wrapper(main_app_runner, config, git)
        logger.info("gitdeck shut down gracefully.")
    except GitError as e:
        logger.critical(f"Repository error at startup: {e}", exc_info=True)
        print(f"gitdeck: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception:
        logger.critical("Unhandled exception at the top level.", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    start()
