# rewardarena/server/routes/gradient.py
"""Reward overlay endpoint."""

from __future__ import annotations

import base64
import logging

from fastapi import APIRouter, HTTPException

from rewardarena.config import Regime, RegimeParams
from rewardarena.errors import UnknownRegimeError

from ..config import settings
from ..gradient_cache import gradient_cache
from ..models import GradientRequest, GradientResponse

logger = logging.getLogger("rewardarena.server")

router = APIRouter(prefix="/api", tags=["gradient"])


@router.post("/gradient", response_model=GradientResponse)
def get_gradient(req: GradientRequest) -> GradientResponse:
    """Render (or fetch from cache) the RGBA overlay for a regime."""
    try:
        regime = Regime.parse(req.regime, strict=settings.STRICT_REGIMES)
    except UnknownRegimeError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    goal = (req.goal.x, req.goal.y) if req.goal is not None else (req.width * 0.75, req.height / 2.0)
    params = RegimeParams(threshold=req.threshold, gamma=req.gamma, learning_rate=req.learning_rate)
    buffer = gradient_cache.get_or_build(req.width, req.height, goal, regime, params)

    return GradientResponse(
        width=req.width,
        height=req.height,
        encoding="rgba8",
        data=base64.b64encode(buffer.tobytes()).decode("ascii"),
    )
