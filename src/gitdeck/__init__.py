# src/gitdeck/__init__.py
"""gitdeck: a terminal dashboard for git repositories."""

__version__ = "0.1.0"
