"""Verdict ledger: one JSON line per hook run in ``.toolhooks/audit.jsonl``.

Concurrent hooks append to the same file, so writes take an exclusive
OS lock. Reading back tolerates damaged lines (a crash mid-write leaves a
truncated tail) by skipping them.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

AUDIT_FILE = Path(".toolhooks") / "audit.jsonl"


class AuditEntry(BaseModel):
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    hook: str
    status: str
    event: str = ""
    tool_name: str = ""
    file_path: str = ""
    message: str = ""
    duration_ms: int | None = None
    details: dict[str, Any] = Field(default_factory=dict)

    def to_line(self) -> str:
        return self.model_dump_json() + "\n"

    def matches(self, since: datetime | None, hook: str | None, status: str | None) -> bool:
        if hook and self.hook != hook:
            return False
        if status and self.status != status:
            return False
        stamp = self.timestamp if self.timestamp.tzinfo else self.timestamp.replace(tzinfo=timezone.utc)
        return since is None or stamp >= since


@contextmanager
def _exclusive_lock(fd: int) -> Iterator[None]:
    if sys.platform == "win32":
        import msvcrt

        msvcrt.locking(fd, msvcrt.LK_LOCK, 1)
        try:
            yield
        finally:
            os.lseek(fd, 0, os.SEEK_SET)
            msvcrt.locking(fd, msvcrt.LK_UNLCK, 1)
    else:
        import fcntl

        fcntl.flock(fd, fcntl.LOCK_EX)
        try:
            yield
        finally:
            fcntl.flock(fd, fcntl.LOCK_UN)


class AuditLogger:
    def __init__(self, audit_path: Path) -> None:
        self._path = audit_path

    @classmethod
    def for_project(cls, project_root: Path) -> AuditLogger:
        return cls(project_root / AUDIT_FILE)

    @property
    def path(self) -> Path:
        return self._path

    def log(self, hook: str, status: str, **fields: Any) -> None:
        """Append one verdict. ``fields`` are the optional AuditEntry attributes."""
        entry = AuditEntry(hook=hook, status=status, **{k: v for k, v in fields.items() if v is not None})
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(str(self._path), os.O_WRONLY | os.O_CREAT | os.O_APPEND)
        try:
            with _exclusive_lock(fd):
                os.write(fd, entry.to_line().encode("utf-8"))
        finally:
            os.close(fd)

    def iter_entries(self) -> Iterator[AuditEntry]:
        if not self._path.exists():
            return
        with self._path.open(encoding="utf-8", errors="replace") as fh:
            for lineno, raw in enumerate(fh, start=1):
                if not raw.strip():
                    continue
                try:
                    yield AuditEntry.model_validate(json.loads(raw))
                except (json.JSONDecodeError, ValidationError):
                    logger.warning("Skipping malformed audit line %d in %s", lineno, self._path)

    def query(
        self,
        *,
        since: datetime | None = None,
        hook: str | None = None,
        status: str | None = None,
    ) -> list[dict[str, Any]]:
        """Entries matching every given filter, oldest first, as JSON-ready dicts.

        A naive ``since`` is taken as UTC.
        """
        if since is not None and since.tzinfo is None:
            since = since.replace(tzinfo=timezone.utc)
        return [
            entry.model_dump(mode="json")
            for entry in self.iter_entries()
            if entry.matches(since, hook, status)
        ]
