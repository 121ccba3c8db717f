# rewardarena/server/models.py
"""Pydantic models for API requests/responses."""

from typing import Any

from pydantic import BaseModel, Field


class Position(BaseModel):
    x: float
    y: float


class StepRequest(BaseModel):
    """Parameters for a single externally driven tick."""

    gamma: float = Field(0.9, ge=0.0, le=1.0)
    learning_rate: float = Field(0.1, ge=0.0, le=1.0)
    width: int | None = Field(None, gt=0)
    height: int | None = Field(None, gt=0)


class StepResponse(BaseModel):
    regime: str
    reward: float
    done: bool
    success_count: int
    agent: Position


class ArenaState(BaseModel):
    regime: str
    agent: Position
    goal: Position
    distance: float
    success_count: int
    success_threshold: float
    initial_distance: float | None
    previous_distance: float | None
    episode_ticks: int
    total_ticks: int
    reward: float


class SettingsUpdate(BaseModel):
    """Partial update of the shared slider panel."""

    gamma: float | None = Field(None, ge=0.0, le=1.0)
    learning_rate: float | None = Field(None, ge=0.0, le=1.0)
    speed_multiplier: int | None = Field(None, ge=1)


class SettingsResponse(BaseModel):
    gamma: float
    learning_rate: float
    speed_multiplier: int
    width: int
    height: int


class FrameResponse(BaseModel):
    frames: int
    results: dict[str, list[dict[str, Any]]]


class DriverStatus(BaseModel):
    running: bool
    frames: int


class GradientRequest(BaseModel):
    """Overlay request; goal defaults to the arena goal."""

    regime: str
    width: int = Field(400, gt=0, le=4096)
    height: int = Field(300, gt=0, le=4096)
    goal: Position | None = None
    threshold: float = Field(30.0, gt=0.0)
    gamma: float = Field(0.9, ge=0.0, le=1.0)
    learning_rate: float = Field(0.1, ge=0.0, le=1.0)


class GradientResponse(BaseModel):
    width: int
    height: int
    encoding: str  # "rgba8" row-major, base64
    data: str


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    clients: int
    uptime_s: float
