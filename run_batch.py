"""
Headless batch runs of the grid engine.

    python run_batch.py --seeds 1 2 3 --ticks 2000 --out data/batch.csv

Each seed runs with no player input (all tools neutral) until game over or the tick
budget is spent. Per-tick history for every run is written to one CSV; a summary
line per seed is printed. Every admitted event, with how long it stayed active,
goes to a second CSV beside the history.
"""
import argparse
import logging
from pathlib import Path

import pandas as pd

from gridsim.config import EngineConfig
from gridsim.engine import GameEngine
from gridsim.growth import GrowthModel

logger = logging.getLogger("run_batch")


def run_one(cfg: EngineConfig, seed: int, ticks: int) -> tuple[dict, pd.DataFrame, pd.DataFrame]:
    engine = GameEngine(cfg=cfg, seed=seed)
    engine.step(ticks)
    final = engine.get_state()
    df = engine.history_df()
    df.insert(0, "seed", seed)
    events = engine.events_df()
    events.insert(0, "seed", seed)
    counts = engine.log.counts()
    summary = {
        "seed": seed,
        "ticks": final.tick_count,
        "years": round(final.current_time, 2),
        "population": round(final.current_population),
        "tier": final.infrastructure_tier,
        "warnings": final.warning_count,
        "game_over": final.is_game_over,
        "events_started": counts["EVENT_STARTED"],
        "warnings_logged": counts["WARNING_ISSUED"],
    }
    return summary, df, events


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the grid engine headlessly for several seeds.")
    parser.add_argument("--seeds", type=int, nargs="+", default=[1])
    parser.add_argument("--ticks", type=int, default=1000)
    parser.add_argument("--initial-population", type=float, default=2000.0)
    parser.add_argument("--years", type=float, default=100.0, help="target game years")
    parser.add_argument("--minutes", type=float, default=120.0, help="target real-time minutes")
    parser.add_argument("--volatility", type=float, default=0.01)
    parser.add_argument("--out", type=Path, default=Path("data/batch_history.csv"))
    parser.add_argument("--events-out", type=Path, default=None,
                        help="event lifetimes CSV (default: <out>_events.csv)")
    parser.add_argument("--projection", type=Path, default=None,
                        help="also write the volatility-free growth projection to this CSV")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    cfg = EngineConfig(
        initial_population=args.initial_population,
        target_game_years=args.years,
        target_real_minutes=args.minutes,
        population_volatility=args.volatility,
    )

    summaries = []
    frames = []
    event_frames = []
    for seed in args.seeds:
        summary, df, events = run_one(cfg, seed, args.ticks)
        summaries.append(summary)
        frames.append(df)
        event_frames.append(events)
        logger.info("seed=%d finished: %s", seed, summary)

    args.out.parent.mkdir(parents=True, exist_ok=True)
    history = pd.concat(frames, ignore_index=True) if frames else pd.DataFrame()
    history.round(4).to_csv(args.out, index=False)
    print(pd.DataFrame(summaries).to_string(index=False))
    print(f"Wrote {args.out}")

    events_out = args.events_out or args.out.with_name(f"{args.out.stem}_events.csv")
    events_out.parent.mkdir(parents=True, exist_ok=True)
    pd.concat(event_frames, ignore_index=True).to_csv(events_out, index=False)
    print(f"Wrote {events_out}")

    if args.projection is not None:
        proj = pd.DataFrame(GrowthModel(cfg).projection(args.ticks))
        args.projection.parent.mkdir(parents=True, exist_ok=True)
        proj.round(4).to_csv(args.projection, index=False)
        print(f"Wrote {args.projection}")


if __name__ == "__main__":
    main()
