"""
Taskboard Sync CLI entry point.

Usage:
    python -m taskboard_sync [COMMAND] [OPTIONS]
"""

from .cli import app

if __name__ == "__main__":
    app()
