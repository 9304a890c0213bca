#!/usr/bin/env python3
# /gitdeck/main.py
"""
gitdeck source launcher
=======================

Runs the dashboard straight from a source checkout, without installing the
package: puts `src/` on the import path and hands over to `gitdeck.main.start`.
"""

import os
import sys


project_root = os.path.join(os.path.dirname(os.path.abspath(__file__)), "src")
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from gitdeck.main import start  # noqa: E402


if __name__ == "__main__":
    start()
