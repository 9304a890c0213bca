# src/gitdeck/ui/__init__.py
