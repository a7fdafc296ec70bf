"""Module execution entry point for ``python -m assocsim``."""

from __future__ import annotations

from .api.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
