"""Headless run records on disk, one JSON document per run.

Run ids start with a UTC timestamp so a directory listing is already in run
order. Writes go through a temporary file in the same directory and are
renamed into place, so a reader never sees a half-written record.
"""

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
import time
import uuid
from collections.abc import Iterator
from pathlib import Path

from ..config import Regime
from .stats import RunRecord

logger = logging.getLogger(__name__)

_RUN_ID = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]{0,63}$")


def new_run_id(timestamp: float | None = None) -> str:
    """`YYYYmmdd-HHMMSS-xxxxxx` in UTC; sorts chronologically."""
    stamp = time.strftime("%Y%m%d-%H%M%S", time.gmtime(time.time() if timestamp is None else timestamp))
    return f"{stamp}-{uuid.uuid4().hex[:6]}"


class RunHistory:
    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def path_for(self, run_id: str) -> Path | None:
        """File for a run id, or None when the id is not a plain file stem."""
        if not _RUN_ID.match(run_id) or ".." in run_id:
            return None
        return self.directory / f"{run_id}.json"

    def save(self, record: RunRecord) -> Path:
        path = self.path_for(record.run_id)
        if path is None:
            raise ValueError(f"Invalid run id: {record.run_id!r}")
        with tempfile.NamedTemporaryFile("w", dir=self.directory, prefix=".run-", suffix=".tmp", delete=False) as f:
            tmp = Path(f.name)
            json.dump(record.to_dict(), f, indent=2)
        try:
            os.replace(tmp, path)
        except OSError:
            tmp.unlink(missing_ok=True)
            raise
        logger.debug(f"Saved run {record.run_id} ({record.frames} frames)")
        return path

    def load(self, run_id: str) -> RunRecord | None:
        path = self.path_for(run_id)
        if path is None or not path.exists():
            return None
        return RunRecord.from_dict(json.loads(path.read_text()))

    def _records(self) -> Iterator[RunRecord]:
        for path in self.directory.glob("*.json"):
            try:
                yield RunRecord.from_dict(json.loads(path.read_text()))
            except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping unreadable run record {path.name}: {e}")

    def query(
        self,
        limit: int = 50,
        *,
        regime: Regime | None = None,
        seed: int | None = None,
    ) -> list[RunRecord]:
        """Newest runs first, optionally only those that ran `regime` or used `seed`."""
        records = [
            r
            for r in self._records()
            if (regime is None or regime.value in r.regimes) and (seed is None or r.seed == seed)
        ]
        records.sort(key=lambda r: (r.timestamp, r.run_id), reverse=True)
        return records[:limit]
