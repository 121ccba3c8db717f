# tests/unit/server/test_event_hub.py
"""Tests for SSE event fan-out."""

import asyncio
import json

from rewardarena.server.sse import EventHub, sse_event_generator


def drain(sub):
    frames = []
    while not sub.queue.empty():
        frames.append(sub.queue.get_nowait())
    return frames


def test_publish_without_subscribers_is_buffered():
    async def scenario():
        hub = EventHub(queue_size=8, replay_size=8)
        assert await hub.publish("reward", {"regime": "sparse", "reward": 0.0}, regime="sparse") == 0
        sub = await hub.subscribe(last_event_id=0)
        # No Last-Event-ID: nothing replayed
        assert drain(sub) == []

    asyncio.run(scenario())


def test_step_emits_reward_then_success():
    async def scenario():
        hub = EventHub(queue_size=8, replay_size=8)
        sub = await hub.subscribe()
        await hub.publish_step("semantic", 1.0, True, 3)
        return drain(sub)

    frames = asyncio.run(scenario())
    assert [f[1] for f in frames] == ["reward", "success"]
    assert json.loads(frames[1][2]) == {"regime": "semantic", "count": 3}
    assert frames[0][0] < frames[1][0]


def test_regime_filter():
    async def scenario():
        hub = EventHub(queue_size=8, replay_size=8)
        sub = await hub.subscribe(regimes=["shaping"])
        await hub.publish_step("sparse", 0.0, False, 0)
        await hub.publish_step("shaping", 0.5, False, 0)
        return drain(sub)

    frames = asyncio.run(scenario())
    assert len(frames) == 1
    assert json.loads(frames[0][2])["regime"] == "shaping"


def test_full_queue_drops_oldest():
    async def scenario():
        hub = EventHub(queue_size=2, replay_size=8)
        sub = await hub.subscribe()
        for i in range(5):
            await hub.publish("reward", {"i": i}, regime="progress")
        return sub, drain(sub)

    sub, frames = asyncio.run(scenario())
    assert [json.loads(f[2])["i"] for f in frames] == [3, 4]
    assert sub.dropped == 3


def test_reconnect_replays_missed_events():
    async def scenario():
        hub = EventHub(queue_size=8, replay_size=8)
        for i in range(4):
            await hub.publish("reward", {"i": i}, regime="sparse")
        sub = await hub.subscribe(last_event_id=2)
        return drain(sub)

    frames = asyncio.run(scenario())
    assert [f[0] for f in frames] == [3, 4]


def test_generator_renders_frames_and_stops_on_shutdown():
    async def scenario():
        hub = EventHub(queue_size=8, replay_size=8)
        sub = await hub.subscribe()
        await hub.publish("success", {"regime": "sparse", "count": 1}, regime="sparse")
        gen = sse_event_generator(sub, hub)
        first = await gen.__anext__()
        await hub.shutdown()
        rest = [chunk async for chunk in gen]
        return first, rest, hub.subscriber_count

    first, rest, remaining = asyncio.run(scenario())
    assert first.startswith("id: 1\nevent: success\n")
    assert rest == []
    assert remaining == 0
