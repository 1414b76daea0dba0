"""Realtime push for campus notifications, direct messages and live class sessions."""

from pathlib import Path

__version__ = (Path(__file__).resolve().parent.parent / "VERSION.txt").read_text(encoding="utf8").strip()
