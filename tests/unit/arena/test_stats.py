"""Tests for run statistics and the success chart."""

from rewardarena.arena.stats import RegimeStats, RunRecord, SuccessChart
from rewardarena.config import Regime


def test_regime_stats_mean_episode_length():
    stats = RegimeStats()
    assert stats.mean_episode_length is None
    stats.episode_lengths.extend([80, 100])
    assert stats.mean_episode_length == 90.0


def test_run_record_serialization():
    """RunRecord survives a dict round trip."""
    record = RunRecord(
        run_id="abc123",
        timestamp=1700000000.0,
        frames=600,
        speed_multiplier=2,
        gamma=0.9,
        learning_rate=0.1,
        seed=7,
        regimes={"sparse": RegimeStats(successes=3, ticks=1200, total_reward=3.0, episode_lengths=[90, 95, 92])},
    )
    restored = RunRecord.from_dict(record.to_dict())
    assert restored == record


def test_chart_carries_counts_forward():
    chart = SuccessChart()
    chart.record(Regime.SPARSE, 1)
    row = chart.record(Regime.SEMANTIC, 1)
    assert row == {"sparse": 1, "shaping": 0, "progress": 0, "semantic": 1}
    assert chart.to_list()[0] == {"sparse": 1, "shaping": 0, "progress": 0, "semantic": 0}


def test_chart_keeps_last_hundred_rows():
    chart = SuccessChart()
    for n in range(1, 151):
        chart.record(Regime.SHAPING, n)
    rows = chart.to_list()
    assert len(chart) == 100
    assert rows[0]["shaping"] == 51
    assert rows[-1]["shaping"] == 150


def test_chart_clear():
    chart = SuccessChart(capacity=5)
    chart.record(Regime.PROGRESS, 1)
    chart.clear()
    assert chart.to_list() == []
