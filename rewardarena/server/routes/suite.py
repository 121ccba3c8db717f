# rewardarena/server/routes/suite.py
"""Shared settings panel, frame batches, background driver and chart."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, HTTPException

from rewardarena.arena.driver import FrameDriver, interval_ticks

from ..config import settings
from ..models import DriverStatus, FrameResponse, SettingsResponse, SettingsUpdate
from ..sse import EventHub, event_hub

if TYPE_CHECKING:
    from rewardarena.arena.driver import RegimeSuite
    from rewardarena.config import Regime
    from rewardarena.env.arena import StepResult

logger = logging.getLogger("rewardarena.server")

router = APIRouter(prefix="/api/suite", tags=["suite"])

# Module-level state set by init_suite_routes
_suite: RegimeSuite | None = None
_driver: FrameDriver | None = None
_task: asyncio.Task[int] | None = None


def init_suite_routes(suite: RegimeSuite) -> None:
    """Initialize routes with the shared regime suite."""
    global _suite, _driver, _task
    _suite = suite
    _driver = FrameDriver(suite)
    _task = None


def _require_suite() -> RegimeSuite:
    if _suite is None:
        raise HTTPException(503, "Suite not initialized")
    return _suite


def _settings_response(suite: RegimeSuite) -> SettingsResponse:
    s = suite.settings
    return SettingsResponse(
        gamma=s.gamma,
        learning_rate=s.learning_rate,
        speed_multiplier=s.speed_multiplier,
        width=s.width,
        height=s.height,
    )


async def publish_frame(results: dict[Regime, list[StepResult]], hub: EventHub = event_hub) -> None:
    """Publish every tick of a frame with the success count that tick produced."""
    for regime, steps in results.items():
        for result in steps:
            await hub.publish_step(regime.value, result.reward, result.done, result.success_count)


@router.get("/settings")
def get_settings() -> SettingsResponse:
    return _settings_response(_require_suite())


@router.put("/settings")
def put_settings(update: SettingsUpdate) -> SettingsResponse:
    """Change knobs; applied from the next tick on."""
    suite = _require_suite()
    changes = update.model_dump(exclude_none=True)
    suite.update_settings(**changes)
    logger.info(f"Settings updated: {changes}")
    return _settings_response(suite)


@router.post("/frame", response_model=FrameResponse)
async def run_frame() -> FrameResponse:
    """Run one frame: speed_multiplier ticks for every regime."""
    suite = _require_suite()
    results = suite.run_frame()
    await publish_frame(results)
    return FrameResponse(
        frames=1,
        results={regime.value: [r.to_dict() for r in steps] for regime, steps in results.items()},
    )


@router.get("/chart")
def get_chart() -> list[dict[str, int]]:
    """Cumulative success counts, one row per success event."""
    return _require_suite().chart.to_list()


@router.post("/success-counts/reset")
def reset_success_counts() -> dict[str, Any]:
    _require_suite().reset_success_counts()
    return {"status": "ok"}


@router.get("/driver")
def driver_status() -> DriverStatus:
    running = _task is not None and not _task.done()
    return DriverStatus(running=running, frames=_driver.frames if _driver else 0)


@router.post("/driver/start")
async def start_driver() -> DriverStatus:
    """Start the background frame loop at the configured frame interval."""
    global _task
    _require_suite()
    assert _driver is not None
    if _task is None or _task.done():
        _driver.resume()
        _task = asyncio.create_task(
            _driver.arun(interval_ticks(settings.FRAME_INTERVAL_S), on_frame=publish_frame)
        )
    return DriverStatus(running=True, frames=_driver.frames)


@router.post("/driver/stop")
async def stop_driver() -> DriverStatus:
    """Request a stop; the loop exits after its current frame."""
    _require_suite()
    await shutdown_driver()
    return DriverStatus(running=False, frames=_driver.frames if _driver else 0)


async def shutdown_driver() -> None:
    global _task
    if _driver is not None:
        _driver.stop()
    if _task is not None:
        await _task
        _task = None
