# rewardarena/server/__init__.py
"""RewardArena server - step the regime panels over HTTP and stream events."""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI

from .config import settings

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("rewardarena.server")

_server_start_time: float = 0.0


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    global _server_start_time
    _server_start_time = time.time()
    from .sse import event_hub

    event_hub.start()
    logger.info(f"RewardArena server starting on {settings.HOST}:{settings.PORT}")
    yield
    logger.info("RewardArena server shutting down...")
    from .routes.suite import shutdown_driver

    await shutdown_driver()
    await event_hub.shutdown()


def create_app(*, runs_path: Path | None = None, seed: int | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        runs_path: Optional directory of run records for the runs API.
        seed: Seed for the per-regime policy RNGs (defaults to settings.SEED).
    """
    from rewardarena.arena.driver import RegimeSuite
    from rewardarena.config import ArenaConfig, SimulationSettings

    from .models import HealthResponse
    from .routes import arenas, gradient, stream
    from .routes import runs as run_routes
    from .routes import suite as suite_routes
    from .sse import event_hub

    app = FastAPI(lifespan=lifespan, title="RewardArena")

    suite = RegimeSuite(
        SimulationSettings(width=settings.CANVAS_WIDTH, height=settings.CANVAS_HEIGHT),
        ArenaConfig(strict_regimes=settings.STRICT_REGIMES),
        seed=settings.SEED if seed is None else seed,
    )
    app.state.suite = suite
    arenas.init_arena_routes(suite)
    suite_routes.init_suite_routes(suite)

    app.include_router(arenas.router)
    app.include_router(suite_routes.router)
    app.include_router(gradient.router)
    app.include_router(stream.router)

    # Include run routes if runs_path provided
    if runs_path is not None:
        from rewardarena.arena.history import RunHistory

        run_routes.init_run_routes(RunHistory(runs_path))
        app.include_router(run_routes.router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return HealthResponse(
            status="ok",
            clients=event_hub.subscriber_count,
            uptime_s=time.time() - _server_start_time,
        )

    return app
