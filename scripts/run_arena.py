# ruff: noqa: E402
from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from rewardarena.arena.driver import FrameDriver, RegimeSuite
from rewardarena.arena.history import RunHistory, new_run_id
from rewardarena.arena.stats import RunRecord
from rewardarena.config import ArenaConfig, PolicyConfig, Regime, SimulationSettings
from rewardarena.errors import SettingsError


def build_suite(args: argparse.Namespace) -> RegimeSuite:
    regimes = tuple(Regime.parse(r, strict=True) for r in args.regimes) if args.regimes else tuple(Regime)
    settings = SimulationSettings(
        gamma=args.gamma,
        learning_rate=args.learning_rate,
        speed_multiplier=args.speed,
        width=args.width,
        height=args.height,
        regimes=regimes,
    )
    settings.validate()
    return RegimeSuite(
        settings,
        ArenaConfig(success_threshold=args.threshold),
        PolicyConfig(exploration_noise=args.noise),
        seed=args.seed,
    )


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the regime panels headless and report successes")
    parser.add_argument("--frames", type=int, default=600, help="External frames to run")
    parser.add_argument("--speed", type=int, default=1, help="Ticks per frame (speed multiplier)")
    parser.add_argument("--gamma", type=float, default=0.9)
    parser.add_argument("--learning-rate", type=float, default=0.1)
    parser.add_argument("--width", type=int, default=400)
    parser.add_argument("--height", type=int, default=300)
    parser.add_argument("--threshold", type=float, default=None, help="Success threshold (px)")
    parser.add_argument("--noise", type=float, default=0.0, help="Exploration noise (0 disables)")
    parser.add_argument("--seed", type=int, default=0)
    parser.add_argument("--regimes", nargs="*", default=None, help="Subset of regimes to run")
    parser.add_argument("--out", type=str, default=None, help="Directory for JSON run records")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        suite = build_suite(args)
    except SettingsError as e:
        parser.error(str(e))

    driver = FrameDriver(suite, ticks=range(args.frames))
    frames = driver.run()

    for regime in suite.settings.regimes:
        stats = suite.stats[regime]
        mean_len = stats.mean_episode_length
        mean_txt = f"{mean_len:.1f}" if mean_len is not None else "-"
        print(
            f"{regime.value:>9}: successes={stats.successes:4d} "
            f"ticks={stats.ticks:6d} mean_episode={mean_txt:>6} total_reward={stats.total_reward:10.3f}"
        )

    if args.out:
        finished = time.time()
        record = RunRecord(
            run_id=new_run_id(finished),
            timestamp=finished,
            frames=frames,
            speed_multiplier=suite.settings.speed_multiplier,
            gamma=suite.settings.gamma,
            learning_rate=suite.settings.learning_rate,
            seed=args.seed,
            regimes={regime.value: suite.stats[regime] for regime in suite.settings.regimes},
        )
        history = RunHistory(Path(args.out))
        path = history.save(record)
        print(f"run record: {path}")

        earlier = [r for r in history.query(6, seed=args.seed) if r.run_id != record.run_id][:5]
        for prev in earlier:
            totals = " ".join(f"{name}={stats.successes}" for name, stats in prev.regimes.items())
            print(f"  earlier {prev.run_id}: frames={prev.frames} speed={prev.speed_multiplier}x {totals}")


if __name__ == "__main__":
    main()
