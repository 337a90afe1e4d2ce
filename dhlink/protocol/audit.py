# MIT License © 2025 Motohiro Suzuki
"""
protocol/audit.py

JSON-lines audit trail.

- One JSON object per line, appended.
- NO secret logging: records carry states, kinds and failure codes only,
  never private scalars, shared secrets or cipher keys.
- emit() is best-effort: a broken sink must not stall the link.
"""

from __future__ import annotations

import json
import time
from pathlib import Path
from typing import Any, Optional


class AuditLog:
    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def write(self, record: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as f:
            json.dump(record, f, ensure_ascii=False)
            f.write("\n")


class MemoryAudit:
    def __init__(self) -> None:
        self.records: list[dict] = []

    def write(self, record: dict) -> None:
        self.records.append(record)


def emit(audit: Optional[Any], record: dict) -> None:
    if audit is None:
        return
    rec = {"ts": time.time(), **record}
    try:
        audit.write(rec)
    except (OSError, TypeError, ValueError):
        # Must NOT break the tick loop due to audit output
        pass


def make_audit(path: str | None) -> Optional[AuditLog]:
    if isinstance(path, str) and path.strip():
        return AuditLog(path.strip())
    return None
