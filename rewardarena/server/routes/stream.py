"""SSE streaming endpoint."""

import contextlib

from fastapi import APIRouter, Query, Request
from fastapi.responses import StreamingResponse

from rewardarena.config import Regime
from rewardarena.errors import UnknownRegimeError

from ..sse import event_hub, sse_event_generator

router = APIRouter()


@router.get("/events")
async def sse_endpoint(
    request: Request,
    regimes: str | None = Query(None, description="Comma-separated regimes to follow (default: all)"),
):
    """
    Server-Sent Events endpoint for live dashboards.

    Events:
    - reward: {regime, reward} after every tick
    - success: {regime, count} on the tick that reaches the goal

    A Last-Event-ID header replays buffered events newer than that id.
    """
    follow = None
    if regimes:
        follow = set()
        for name in regimes.split(","):
            # Unknown ids in a filter simply match nothing
            with contextlib.suppress(UnknownRegimeError):
                follow.add(Regime.parse(name, strict=True).value)

    last_event_id = 0
    header = request.headers.get("Last-Event-ID", "")
    if header:
        with contextlib.suppress(ValueError):
            last_event_id = int(header)

    sub = await event_hub.subscribe(regimes=follow, last_event_id=last_event_id)

    return StreamingResponse(
        sse_event_generator(sub, event_hub),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )
