# rewardarena/server/routes/runs.py
"""Stored headless runs."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, HTTPException, Query

from rewardarena.config import Regime
from rewardarena.errors import UnknownRegimeError

if TYPE_CHECKING:
    from rewardarena.arena.history import RunHistory

router = APIRouter(prefix="/api", tags=["runs"])

# Module-level state set by init_run_routes
_history: RunHistory | None = None


def init_run_routes(history: RunHistory) -> None:
    global _history
    _history = history


def _require_history() -> RunHistory:
    if _history is None:
        raise HTTPException(503, "Run history not initialized")
    return _history


@router.get("/runs")
def get_runs(
    limit: int = Query(50, ge=1, le=200),
    regime: str | None = Query(None, description="Only runs that included this regime"),
    seed: int | None = Query(None),
) -> list[dict[str, Any]]:
    """Recent runs, newest first."""
    history = _require_history()
    try:
        resolved = Regime.parse(regime, strict=True) if regime is not None else None
    except UnknownRegimeError as e:
        raise HTTPException(400, str(e)) from e
    return [r.to_dict() for r in history.query(limit, regime=resolved, seed=seed)]


@router.get("/runs/{run_id}")
def get_run(run_id: str) -> dict[str, Any]:
    record = _require_history().load(run_id)
    if record is None:
        raise HTTPException(404, f"Run {run_id} not found")
    return record.to_dict()
