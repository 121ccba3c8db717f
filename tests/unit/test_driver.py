"""Regime suite and frame driver."""

import asyncio

import pytest

from rewardarena.arena.driver import FrameDriver, RegimeSuite
from rewardarena.config import PolicyConfig, Regime, SimulationSettings


def make_suite(**settings_kwargs) -> RegimeSuite:
    return RegimeSuite(SimulationSettings(**settings_kwargs), seed=0)


class TestRegimeSuite:
    def test_one_arena_per_regime(self):
        suite = make_suite()
        assert set(suite.arenas) == set(Regime)
        arenas = list(suite.arenas.values())
        assert len({id(a) for a in arenas}) == 4
        assert len({id(a.policy.rng) for a in arenas}) == 4

    def test_frame_runs_speed_multiplier_ticks(self):
        suite = make_suite(speed_multiplier=3)
        results = suite.run_frame()
        assert set(results) == set(Regime)
        assert all(len(steps) == 3 for steps in results.values())
        assert all(suite.stats[r].ticks == 3 for r in Regime)

    def test_regime_subset(self):
        suite = make_suite(regimes=(Regime.SEMANTIC,))
        results = suite.run_frame()
        assert list(results) == [Regime.SEMANTIC]
        assert suite.stats[Regime.SPARSE].ticks == 0

    def test_update_settings_applies_next_tick(self):
        suite = make_suite()
        suite.update_settings(gamma=0.5, speed_multiplier=2)
        assert suite.settings.gamma == 0.5
        results = suite.run_frame()
        assert len(results[Regime.SHAPING]) == 2

    def test_update_settings_clamps(self):
        suite = make_suite()
        suite.update_settings(gamma=3.0, speed_multiplier=0)
        assert suite.settings.gamma == 1.0
        assert suite.settings.speed_multiplier == 1

    def test_update_settings_rejects_unknown_knob(self):
        suite = make_suite()
        with pytest.raises(AttributeError):
            suite.update_settings(temperature=2.0)

    def test_success_updates_stats_and_chart(self):
        seen = []
        suite = RegimeSuite(
            SimulationSettings(regimes=(Regime.SEMANTIC,)),
            seed=0,
            on_success=lambda regime, count: seen.append((regime, count)),
        )
        for _ in range(300):
            suite.run_frame()
            if seen:
                break

        assert seen == [(Regime.SEMANTIC, 1)]
        stats = suite.stats[Regime.SEMANTIC]
        assert stats.successes == 1
        assert stats.episode_lengths[0] > 0
        assert suite.chart.to_list()[-1]["semantic"] == 1

    def test_reward_callback_sees_every_tick(self):
        rewards = []
        suite = RegimeSuite(seed=0, on_reward=lambda regime, reward: rewards.append(regime))
        suite.run_frame()
        assert sorted(r.value for r in rewards) == sorted(r.value for r in Regime)

    def test_reset_success_counts(self):
        suite = make_suite(regimes=(Regime.SPARSE,))
        for _ in range(300):
            suite.run_frame()
        assert suite.arenas[Regime.SPARSE].get_success_count() > 0

        suite.reset_success_counts()
        assert all(a.get_success_count() == 0 for a in suite.arenas.values())
        assert len(suite.chart) == 0

    def test_seeded_suites_match(self):
        noisy = PolicyConfig(exploration_noise=0.3)
        a = RegimeSuite(policy_config=noisy, seed=11)
        b = RegimeSuite(policy_config=noisy, seed=11)
        for _ in range(40):
            a.run_frame()
            b.run_frame()
        assert a.snapshot() == b.snapshot()


class TestFrameDriver:
    def test_run_consumes_tick_source(self):
        suite = make_suite(speed_multiplier=2)
        driver = FrameDriver(suite, ticks=range(5))
        assert driver.run() == 5
        assert driver.frames == 5
        assert suite.stats[Regime.PROGRESS].ticks == 10
        assert not driver.running

    def test_max_frames(self):
        driver = FrameDriver(make_suite())
        assert driver.run(max_frames=7) == 7

    def test_stop_is_honoured_between_frames(self):
        driver = None

        def on_success(regime, count):
            driver.stop()

        suite = RegimeSuite(SimulationSettings(speed_multiplier=4), seed=0, on_success=on_success)
        driver = FrameDriver(suite, ticks=range(1000))
        ran = driver.run()

        assert driver.stop_requested
        assert ran < 1000
        # The frame that scored still finished every regime's batch
        for regime in Regime:
            assert suite.stats[regime].ticks == ran * 4

    def test_arun_with_async_ticks(self):
        frames = []

        async def ticks():
            n = 0
            while True:
                yield n
                n += 1

        async def on_frame(results):
            frames.append(results)

        suite = make_suite()
        driver = FrameDriver(suite)
        ran = asyncio.run(driver.arun(ticks(), max_frames=3, on_frame=on_frame))

        assert ran == 3
        assert len(frames) == 3
        assert suite.stats[Regime.SEMANTIC].ticks == 3


def test_each_result_carries_its_own_success_count():
    seen = []
    suite = RegimeSuite(
        SimulationSettings(speed_multiplier=400, regimes=(Regime.SEMANTIC,)),
        seed=0,
        on_success=lambda regime, count: seen.append(count),
    )
    steps = suite.run_frame()[Regime.SEMANTIC]

    counts = [r.success_count for r in steps if r.done]
    assert len(counts) >= 2
    assert counts == list(range(1, len(counts) + 1))
    assert counts == seen
    assert [row["semantic"] for row in suite.chart.to_list()] == counts
