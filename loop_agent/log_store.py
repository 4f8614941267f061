"""Persistence for the ``logs.json`` iteration log.

The log is a JSON array rewritten in full on every append.  Readers never
fail on it: a missing file, a half-written file or a non-array document
all read back as an empty log.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from loop_agent.models import IterationRecord
from loop_agent.utils import load_json_list, save_json


def read_log(path: str | Path) -> list[Any]:
    """Return the raw log entries, or ``[]`` if the log is absent or unreadable."""
    try:
        return load_json_list(path)
    except (OSError, ValueError, RecursionError):
        return []


def entry_succeeded(entry: Any) -> bool:
    """True if a raw log entry records a successful iteration."""
    if not isinstance(entry, dict):
        return False
    result = entry.get("result")
    return isinstance(result, dict) and result.get("success") is True


class IterationLog:
    """Append-only view over a ``logs.json`` file."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def entries(self) -> list[Any]:
        return read_log(self.path)

    def __len__(self) -> int:
        return len(self.entries())

    async def append(self, record: IterationRecord) -> list[Any]:
        """Read the current log, append *record*, and rewrite the file.

        Returns the full list that was written.
        """
        entries = self.entries()
        entries.append(record.to_json_dict())
        await save_json(entries, self.path)
        return entries
