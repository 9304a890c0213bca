# tests/test_utils.py
"""Unit tests for utility functions in the `gitdeck.utils` module."""

from pathlib import Path
from unittest.mock import patch

from gitdeck.utils import utils


def test_deep_merge() -> None:
    """Verify that `deep_merge` correctly merges nested dictionaries.

    This test ensures:
    - Existing values are preserved if not overridden.
    - Nested dictionaries are merged recursively.
    - Conflicting keys are overridden by values from the second dictionary.
    """
    base = {"a": 1, "b": {"x": 10, "y": 20}}
    override = {"b": {"y": 99, "z": 100}, "c": 3}
    result = utils.deep_merge(base, override)
    expected = {"a": 1, "b": {"x": 10, "y": 99, "z": 100}, "c": 3}
    assert result == expected
    assert base == {"a": 1, "b": {"x": 10, "y": 20}}


def test_hex_to_xterm_valid_color() -> None:
    """Ensure `hex_to_xterm` returns the correct xterm color code for valid hex values."""
    assert utils.hex_to_xterm("#ffffff") == 231
    assert utils.hex_to_xterm("000000") == 16
    assert utils.hex_to_xterm("#ff0000") == 196


def test_hex_to_xterm_invalid_color() -> None:
    """Verify that `hex_to_xterm` falls back to 255 for invalid hex strings."""
    assert utils.hex_to_xterm("#zzzzzz") == 255
    assert utils.hex_to_xterm("12") == 255


def test_safe_run_success() -> None:
    """Check that `safe_run` executes a valid command and captures stdout."""
    result = utils.safe_run(["echo", "hello"])
    assert result.returncode == 0
    assert "hello" in result.stdout


def test_safe_run_command_not_found() -> None:
    """A missing executable becomes exit status 127 instead of an exception."""
    result = utils.safe_run(["non_existing_command_for_gitdeck"])
    assert result.returncode == 127
    assert result.stdout == ""
    assert result.stderr


def test_safe_run_timeout() -> None:
    """A command exceeding its timeout is reported with status -9."""
    result = utils.safe_run(["sleep", "5"], timeout=0.2)
    assert result.returncode == -9
    assert "timed out" in result.stderr


def test_load_config_defaults_without_user_file(tmp_path: Path) -> None:
    """Without a user `config.toml` the embedded defaults are returned and `.env` is created."""
    with patch.object(utils, "get_config_dir", return_value=tmp_path / "gitdeck"):
        config = utils.load_config()
    assert config == utils.DEFAULT_CONFIG
    assert (tmp_path / "gitdeck" / ".env").is_file()


def test_load_config_merges_user_file(tmp_path: Path) -> None:
    """User settings override defaults; untouched sections stay intact."""
    config_dir = tmp_path / "gitdeck"
    config_dir.mkdir()
    (config_dir / "config.toml").write_text(
        '[theme]\nname = "Gruvbox"\n\n[keybindings]\nquit = "x"\n', encoding="utf-8"
    )
    with patch.object(utils, "get_config_dir", return_value=config_dir):
        config = utils.load_config()
    assert config["theme"]["name"] == "Gruvbox"
    assert config["keybindings"]["quit"] == "x"
    assert config["keybindings"]["commit"] == "c"
    assert config["git"] == utils.DEFAULT_CONFIG["git"]


def test_load_config_survives_broken_file(tmp_path: Path) -> None:
    """A corrupted `config.toml` falls back to the defaults."""
    config_dir = tmp_path / "gitdeck"
    config_dir.mkdir()
    (config_dir / "config.toml").write_text("[theme\nname = ", encoding="utf-8")
    with patch.object(utils, "get_config_dir", return_value=config_dir):
        assert utils.load_config() == utils.DEFAULT_CONFIG
