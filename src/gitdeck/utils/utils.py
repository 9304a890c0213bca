# gitdeck/utils/utils.py
"""
gitdeck.utils.utils.py
======================

Shared helpers for the gitdeck dashboard.

- Configuration: the embedded `DEFAULT_CONFIG`, the user directory
  `~/.config/gitdeck` (created on first run together with a `.env`
  template) and `load_config()`, which overlays `config.toml` on the
  defaults. A missing or broken user file never prevents startup.
- Subprocesses: `safe_run()` never raises; launch failures and timeouts come
  back as a `CompletedProcess` with a distinctive return code.
- Small helpers: `deep_merge()` and `hex_to_xterm()`.
"""

import logging
import subprocess
from pathlib import Path
from typing import Any, Dict, List

import toml

logger = logging.getLogger("gitdeck")

# --- Constants ---
WHITE_FG_IDX = 255

CONFIG_DIR_NAME = "gitdeck"

ENV_TEMPLATE = """# Environment overrides for gitdeck.
# GITDECK_KEYTRACE=1 writes every decoded key press to keytrace.log.
GITDECK_KEYTRACE=
"""

# Hardcoded defaults. They are the ultimate fallback, so the dashboard can ALWAYS start.
DEFAULT_CONFIG: Dict[str, Any] = {
    "logging": {
        "file_level": "DEBUG",
        "console_level": "WARNING",
        "log_to_console": False,
        "separate_error_log": False,
    },
    "git": {"executable": "git", "timeout": 10},
    "watcher": {"enabled": True, "interval_ms": 500, "max_entries": 20000},
    "layout": {
        "left_ratio": 0.35,
        "expanded_ratio": 0.4,
        "collapsed_height": 3,
        "status_height": 3,
        "files_ratio": 0.4,
        "branches_ratio": 0.3,
    },
    "theme": {"name": "GitHub Dark"},
    "keybindings": {
        "quit": ["q", "ctrl+c"],
        "toggle_help": "?",
        "cancel": "esc",
        "switch_theme": "ctrl+t",
        "focus_next": "tab",
        "focus_prev": "shift+tab",
        "focus_main": "0",
        "focus_status": "1",
        "focus_files": "2",
        "focus_branches": "3",
        "focus_commits": "4",
        "focus_stash": "5",
        "focus_secondary": "6",
        "up": ["k", "up"],
        "down": ["j", "down"],
        "page_up": "pageup",
        "page_down": "pagedown",
        "copy_selection": "y",
        "stage_item": "a",
        "stage_all": "space",
        "discard": "d",
        "stash": "s",
        "stash_all": "S",
        "commit": "c",
        "checkout": "enter",
        "new_branch": "n",
        "delete_branch": "d",
        "rename_branch": "r",
        "amend_commit": "A",
        "revert": "v",
        "reset_to_commit": "R",
        "stash_apply": "a",
        "stash_pop": "p",
        "stash_drop": "d",
    },
}



def get_config_dir() -> Path:
    return Path.home() / ".config" / CONFIG_DIR_NAME


def ensure_user_config_exists() -> None:
    """Creates `~/.config/gitdeck` and its `.env` template when they are missing."""
    config_dir = get_config_dir()
    env_path = config_dir / ".env"
    try:
        config_dir.mkdir(parents=True, exist_ok=True)
        if not env_path.exists():
            env_path.write_text(ENV_TEMPLATE, encoding="utf-8")
            logger.info(f"Wrote .env template to {env_path}")
    except OSError as e:
        logger.error(f"Cannot prepare user config directory {config_dir}: {e}", exc_info=True)


def load_config() -> Dict[str, Any]:
    """
    Returns the embedded defaults with `~/.config/gitdeck/config.toml` merged on top.
    """
    config = deep_merge({}, DEFAULT_CONFIG)
    ensure_user_config_exists()

    path = get_config_dir() / "config.toml"
    if not path.is_file():
        logger.debug("No user config.toml; running on embedded defaults.")
        return config
    try:
        config = deep_merge(config, toml.load(path))
        logger.info(f"Merged user configuration from {path}")
    except (toml.TomlDecodeError, OSError) as e:
        logger.error(f"Ignoring unreadable config {path}: {e}")
    return config


def safe_run(cmd: List[str], **kwargs: Any) -> subprocess.CompletedProcess:
    """
    `subprocess.run` with captured UTF-8 output that reports failures as return codes.

    Returns:
        The finished process, or a synthetic one with return code 127 when the
        executable is missing, -9 on timeout and -1 on any other launch error.
    """
    try:
        return subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
            **kwargs,
        )
    except FileNotFoundError as e:
        logger.error(f"Executable not found: {cmd[0]!r}")
        return subprocess.CompletedProcess(cmd, 127, stdout="", stderr=str(e))
    except subprocess.TimeoutExpired as e:
        logger.warning(f"Timed out after {e.timeout}s: {' '.join(cmd)}")
        partial = e.stdout if isinstance(e.stdout, str) else ""
        return subprocess.CompletedProcess(cmd, -9, stdout=partial, stderr="command timed out")
    except (OSError, ValueError) as e:
        logger.exception(f"Could not launch {' '.join(cmd)}")
        return subprocess.CompletedProcess(cmd, -1, stdout="", stderr=str(e))


def deep_merge(base: Dict, override: Dict) -> Dict:
    """Merges `override` into a copy of `base`, descending into nested dicts."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        merged[key] = deep_merge(current, value) if isinstance(current, dict) and isinstance(value, dict) else value
    return merged


def hex_to_xterm(hex_color: str) -> int:
    """Nearest xterm-256 palette index for ``#rrggbb``; 255 for malformed input."""
    digits = hex_color.lstrip("#")
    if len(digits) != 6:
        return WHITE_FG_IDX
    try:
        r, g, b = int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)
    except ValueError:
        return WHITE_FG_IDX

    if r == g == b:
        # grey ramp 232..255 plus the cube's black and white corners
        if r < 8:
            return 16
        if r > 248:
            return 231
        return 232 + round((r - 8) / 247 * 24)

    def level(component: int) -> int:
        return round(component / 255 * 5)

    return 16 + 36 * level(r) + 6 * level(g) + level(b)
