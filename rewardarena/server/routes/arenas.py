# rewardarena/server/routes/arenas.py
"""Per-regime arena endpoints: state, single ticks, success counters."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, HTTPException

from rewardarena.config import Regime
from rewardarena.errors import UnknownRegimeError

from ..models import ArenaState, Position, StepRequest, StepResponse
from ..sse import event_hub

if TYPE_CHECKING:
    from rewardarena.arena.driver import RegimeSuite

router = APIRouter(prefix="/api/arenas", tags=["arenas"])

# Module-level state set by init_arena_routes
_suite: RegimeSuite | None = None


def init_arena_routes(suite: RegimeSuite) -> None:
    """Initialize routes with the shared regime suite."""
    global _suite
    _suite = suite


def _require_suite() -> RegimeSuite:
    if _suite is None:
        raise HTTPException(503, "Arenas not initialized")
    return _suite


def _resolve(regime: str) -> Regime:
    try:
        resolved = Regime.parse(regime, strict=True)
    except UnknownRegimeError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    assert resolved is not None
    return resolved


def _state(suite: RegimeSuite, regime: Regime) -> ArenaState:
    snap: dict[str, Any] = suite.arenas[regime].snapshot()
    return ArenaState(
        regime=regime.value,
        agent=Position(**snap["agent"]),
        goal=Position(**snap["goal"]),
        distance=snap["distance"],
        success_count=snap["success_count"],
        success_threshold=snap["success_threshold"],
        initial_distance=snap["initial_distance"],
        previous_distance=snap["previous_distance"],
        episode_ticks=snap["episode_ticks"],
        total_ticks=snap["total_ticks"],
        reward=suite.latest_rewards[regime],
    )


@router.get("")
def list_arenas() -> list[ArenaState]:
    """State of every regime panel."""
    suite = _require_suite()
    return [_state(suite, regime) for regime in Regime]


@router.get("/{regime}")
def get_arena(regime: str) -> ArenaState:
    """State of one regime panel."""
    suite = _require_suite()
    return _state(suite, _resolve(regime))


@router.post("/{regime}/step", response_model=StepResponse)
async def step_arena(regime: str, req: StepRequest) -> StepResponse:
    """Advance one regime by a single tick with explicit parameters."""
    suite = _require_suite()
    resolved = _resolve(regime)
    arena = suite.arenas[resolved]
    result = arena.step(resolved, req.gamma, req.learning_rate, req.width, req.height)
    suite.latest_rewards[resolved] = result.reward
    count = result.success_count
    if result.done:
        suite.chart.record(resolved, count)
    await event_hub.publish_step(resolved.value, result.reward, result.done, count)

    ax, ay = arena.get_agent_position()
    return StepResponse(
        regime=resolved.value,
        reward=result.reward,
        done=result.done,
        success_count=count,
        agent=Position(x=ax, y=ay),
    )


@router.post("/{regime}/success-count/reset")
def reset_success_count(regime: str) -> dict[str, Any]:
    """Zero one regime's success counter (episodes keep running)."""
    suite = _require_suite()
    resolved = _resolve(regime)
    suite.arenas[resolved].reset_success_count()
    return {"status": "ok", "regime": resolved.value, "success_count": 0}
