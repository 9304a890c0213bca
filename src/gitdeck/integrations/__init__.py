# src/gitdeck/integrations/__init__.py
