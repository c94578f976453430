"""crabshell CLI bootstrap."""

from __future__ import annotations

from crabshell.cli import app

if __name__ == "__main__":
    app()
