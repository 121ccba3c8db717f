# rewardarena/server/__main__.py
"""Entry point: python -m rewardarena.server"""

from __future__ import annotations

import argparse
from pathlib import Path

import uvicorn

from .config import settings


def main() -> None:
    parser = argparse.ArgumentParser(description="RewardArena server")
    parser.add_argument("--host", type=str, default=settings.HOST)
    parser.add_argument("--port", type=int, default=settings.PORT)
    parser.add_argument("--seed", type=int, default=settings.SEED)
    parser.add_argument(
        "--runs",
        type=Path,
        default=None,
        help="Directory of run records for the runs API",
    )
    args = parser.parse_args()

    from . import create_app

    app = create_app(runs_path=args.runs, seed=args.seed)
    uvicorn.run(app, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
