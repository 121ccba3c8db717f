"""Side-by-side regime panels and the frame loop that drives them.

The driver never binds to a platform frame callback. Frames come from an
injected tick source: any iterable (tests pass `range(n)`) or, for the server,
an async iterator such as `interval_ticks()`. Each frame runs
`speed_multiplier` sequential ticks per regime. A stop request is only
checked between frames.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from collections.abc import AsyncIterator, Awaitable, Callable, Iterable
from typing import Any

import numpy as np

from ..config import ArenaConfig, PolicyConfig, Regime, SimulationSettings
from ..env.arena import RewardArena, StepResult
from .stats import RegimeStats, SuccessChart

logger = logging.getLogger(__name__)

RewardCallback = Callable[[Regime, float], None]
SuccessCallback = Callable[[Regime, int], None]
FrameCallback = Callable[[dict[Regime, list[StepResult]]], Awaitable[None]]


class RegimeSuite:
    """One independent arena per regime sharing a settings panel."""

    def __init__(
        self,
        settings: SimulationSettings | None = None,
        arena_config: ArenaConfig | None = None,
        policy_config: PolicyConfig | None = None,
        *,
        seed: int | None = None,
        on_reward: RewardCallback | None = None,
        on_success: SuccessCallback | None = None,
    ) -> None:
        self.settings = settings or SimulationSettings()
        base = arena_config or ArenaConfig()
        self.arena_config = ArenaConfig(
            width=self.settings.width,
            height=self.settings.height,
            agent_radius=base.agent_radius,
            goal_radius=base.goal_radius,
            air_friction=base.air_friction,
            dt_s=base.dt_s,
            history_capacity=base.history_capacity,
            success_threshold=base.success_threshold,
            strict_regimes=base.strict_regimes,
        )
        self.seed = seed
        # Independent streams per regime so panels never share RNG state
        children = np.random.SeedSequence(seed).spawn(len(Regime))
        self.arenas: dict[Regime, RewardArena] = {
            regime: RewardArena(self.arena_config, policy_config=policy_config, rng=np.random.default_rng(child))
            for regime, child in zip(Regime, children)
        }
        self.stats: dict[Regime, RegimeStats] = {regime: RegimeStats() for regime in Regime}
        self.latest_rewards: dict[Regime, float] = {regime: 0.0 for regime in Regime}
        self.chart = SuccessChart(tuple(Regime))
        self.on_reward = on_reward
        self.on_success = on_success

    def update_settings(self, **changes: Any) -> SimulationSettings:
        """Apply new knob values, clamped to their slider ranges; they take effect on the next tick."""
        for key, value in changes.items():
            if not hasattr(self.settings, key):
                raise AttributeError(f"Unknown setting: {key}")
            setattr(self.settings, key, value)
        self.settings = self.settings.clamped()
        return self.settings

    def tick(self, regime: Regime) -> StepResult:
        s = self.settings
        arena = self.arenas[regime]
        episode_ticks = arena.episode.ticks
        result = arena.step(regime, width=s.width, height=s.height, params=s.regime_params())

        stats = self.stats[regime]
        stats.ticks += 1
        stats.total_reward += result.reward
        self.latest_rewards[regime] = result.reward
        if self.on_reward is not None:
            self.on_reward(regime, result.reward)

        if result.done:
            count = result.success_count
            stats.successes += 1
            stats.episode_lengths.append(episode_ticks)
            self.chart.record(regime, count)
            if self.on_success is not None:
                self.on_success(regime, count)
        return result

    def run_frame(self) -> dict[Regime, list[StepResult]]:
        """One external frame: `speed_multiplier` ticks for every active regime."""
        n = max(1, int(self.settings.speed_multiplier))
        results: dict[Regime, list[StepResult]] = {}
        for regime in self.settings.regimes:
            results[regime] = [self.tick(regime) for _ in range(n)]
        return results

    def reset_success_counts(self) -> None:
        for arena in self.arenas.values():
            arena.reset_success_count()
        self.chart.clear()

    def snapshot(self) -> dict[str, Any]:
        return {
            regime.value: {
                **arena.snapshot(),
                "reward": self.latest_rewards[regime],
            }
            for regime, arena in self.arenas.items()
        }


class FrameDriver:
    """Cooperative frame loop with an injectable tick source."""

    def __init__(self, suite: RegimeSuite, ticks: Iterable[Any] | None = None) -> None:
        self.suite = suite
        self.ticks = ticks
        self.frames = 0
        self._stop_requested = False
        self.running = False

    def stop(self) -> None:
        """Request a stop; honoured once the current frame's batch completes."""
        self._stop_requested = True

    def resume(self) -> None:
        """Clear a pending stop request."""
        self._stop_requested = False

    @property
    def stop_requested(self) -> bool:
        return self._stop_requested

    def run(self, max_frames: int | None = None) -> int:
        """Run frames until the tick source ends, max_frames, or stop(). Returns frames run."""
        source = self.ticks if self.ticks is not None else itertools.count()
        self.resume()
        self.running = True
        ran = 0
        logger.info(f"Frame driver started (speed={self.suite.settings.speed_multiplier}x)")
        try:
            for _ in source:
                if self._stop_requested or (max_frames is not None and ran >= max_frames):
                    break
                self.suite.run_frame()
                ran += 1
                self.frames += 1
        finally:
            self.running = False
            logger.info(f"Frame driver stopped after {ran} frames")
        return ran

    async def arun(
        self,
        ticks: AsyncIterator[Any],
        max_frames: int | None = None,
        on_frame: FrameCallback | None = None,
    ) -> int:
        """Async twin of run(); a frame's ticks never straddle an await.

        A stop requested before the coroutine first runs is honoured, so callers
        scheduling this as a task call resume() beforehand.
        """
        self.running = True
        ran = 0
        logger.info(f"Frame driver started (speed={self.suite.settings.speed_multiplier}x)")
        try:
            async for _ in ticks:
                if self._stop_requested or (max_frames is not None and ran >= max_frames):
                    break
                results = self.suite.run_frame()
                ran += 1
                self.frames += 1
                if on_frame is not None:
                    await on_frame(results)
        finally:
            self.running = False
            logger.info(f"Frame driver stopped after {ran} frames")
        return ran


async def interval_ticks(interval_s: float) -> AsyncIterator[int]:
    """Yield frame numbers at a fixed wall-clock interval."""
    for frame in itertools.count():
        yield frame
        await asyncio.sleep(interval_s)
