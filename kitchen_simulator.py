from __future__ import annotations

import argparse
import csv
import os
import random
from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from cooking_session import COMPLETE, CookingSession, resolve_seed
from kitchen_api import CATALOG_VERSION, KitchenData, Recipe
from kitchen_timers import ManualScheduler
from player_progress import PlayerProgress

PRIMARY_SUMMARY_KEYS: Tuple[str, ...] = (
    "recipes",
    "runs_per_recipe",
    "runs",
    "seed",
    "skill",
    "spread",
)


@dataclass
class SimulationConfig:
    runs: int = 200
    skill: float = 75.0
    spread: float = 20.0
    dwell_seconds: float = 0.8

    def validate(self) -> None:
        if self.runs <= 0:
            raise ValueError("SimulationConfig.runs must be a positive integer")
        if self.spread < 0:
            raise ValueError("SimulationConfig.spread cannot be negative")
        if self.dwell_seconds < 0:
            raise ValueError("SimulationConfig.dwell_seconds cannot be negative")


def draw_step_score(rng: random.Random, skill: float, spread: float) -> int:
    # Left unclamped on purpose; the session clamps what mini-games report.
    return int(round(rng.gauss(skill, spread)))


def simulate_session(
    recipe: Recipe,
    rng: random.Random,
    config: Optional[SimulationConfig] = None,
) -> Dict[str, object]:
    """Play one full session of ``recipe`` with randomly drawn step scores."""

    cfg = config or SimulationConfig()
    progress = PlayerProgress()
    scheduler = ManualScheduler()
    session = CookingSession(
        recipe,
        progress,
        scheduler,
        dwell_seconds=cfg.dwell_seconds,
        rng=rng,
    )
    session.start()
    while session.phase != COMPLETE:
        session.report_score(draw_step_score(rng, cfg.skill, cfg.spread))
        scheduler.advance(cfg.dwell_seconds)

    reward = session.reward
    if reward is None:
        raise RuntimeError("Completed session has no reward; session state is inconsistent.")
    return {
        "steps": len(session.steps),
        "scores": list(session.scores),
        "average": session.average,
        "stars": reward.stars,
        "coins": reward.coins,
        "xp": reward.xp,
    }


def summarize_scores(values: Sequence[float]) -> Tuple[float, float, float, float]:
    if not values:
        return 0.0, 0.0, 0.0, 0.0
    arr = np.asarray(values, dtype=float)
    return (
        float(np.mean(arr)),
        float(np.std(arr)),
        float(np.percentile(arr, 50)),
        float(np.percentile(arr, 90)),
    )


def simulate_many(
    data: KitchenData,
    recipe_ids: Optional[Sequence[str]] = None,
    seed: Optional[int] = None,
    config: Optional[SimulationConfig] = None,
) -> Tuple[Dict[str, object], List[Dict[str, object]], Counter[int], List[float]]:
    cfg = config or SimulationConfig()
    cfg.validate()
    rng = random.Random(seed) if seed is not None else random.Random()

    if recipe_ids is None:
        recipes = list(data.recipes)
    else:
        recipes = []
        for recipe_id in recipe_ids:
            recipe = data.recipe(recipe_id)
            if recipe is None:
                raise ValueError(f"Unknown recipe id: {recipe_id}")
            recipes.append(recipe)

    rows: List[Dict[str, object]] = []
    star_totals: Counter[int] = Counter()
    averages: List[float] = []
    for recipe in recipes:
        recipe_stars: Counter[int] = Counter()
        recipe_averages: List[float] = []
        steps = 0
        coins_total = 0
        for _ in range(cfg.runs):
            result = simulate_session(recipe, rng, cfg)
            steps = int(result["steps"])  # type: ignore[arg-type]
            recipe_stars[int(result["stars"])] += 1  # type: ignore[arg-type]
            recipe_averages.append(float(result["average"]))  # type: ignore[arg-type]
            coins_total += int(result["coins"])  # type: ignore[arg-type]
        mean_val, std_val, p50, p90 = summarize_scores(recipe_averages)
        rows.append(
            {
                "recipe_id": recipe.recipe_id,
                "difficulty": recipe.difficulty,
                "steps": steps,
                "average_score": round(mean_val, 2),
                "std_score": round(std_val, 2),
                "p50": round(p50, 2),
                "p90": round(p90, 2),
                "three_star_pct": round(100.0 * recipe_stars[3] / cfg.runs, 1),
                "avg_coins": round(coins_total / cfg.runs, 2),
            }
        )
        star_totals.update(recipe_stars)
        averages.extend(recipe_averages)

    mean_val, std_val, p50, p90 = summarize_scores(averages)
    total_runs = cfg.runs * len(recipes)
    summary: Dict[str, object] = {
        "recipes": len(recipes),
        "runs_per_recipe": cfg.runs,
        "runs": total_runs,
        "seed": seed,
        "skill": cfg.skill,
        "spread": cfg.spread,
        "average_score": round(mean_val, 2),
        "std_score": round(std_val, 2),
        "p50": round(p50, 2),
        "p90": round(p90, 2),
        "star_distribution": [star_totals.get(stars, 0) for stars in (1, 2, 3)],
    }
    return summary, rows, star_totals, averages


def iter_summary_items(summary: Dict[str, object]) -> Iterator[Tuple[str, object]]:
    """Yield summary entries in a stable order for console and reports."""

    seen: set[str] = set()
    for key in PRIMARY_SUMMARY_KEYS:
        if key in summary:
            seen.add(key)
            yield key, summary[key]
    for key, value in summary.items():
        if key not in seen:
            yield key, value


def format_summary_value(value: object) -> str:
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value)
    return str(value)


def format_report_header() -> str:
    timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    return f"=== Kitchen Session Report (Catalog v{CATALOG_VERSION}) ===\nGenerated: {timestamp}\n"


def write_report_files(
    out_dir: str,
    summary: Dict[str, object],
    rows: Sequence[Dict[str, object]],
    averages: Sequence[float],
) -> Dict[str, str]:
    os.makedirs(out_dir, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    base_name = f"kitchen_report_runs{summary.get('runs')}_seed{summary.get('seed')}_{timestamp}"

    txt_path = os.path.join(out_dir, base_name + ".txt")
    with open(txt_path, "w", encoding="utf-8") as handle:
        handle.write(format_report_header())
        handle.write("\n")
        for key, value in iter_summary_items(summary):
            handle.write(f"{key}: {format_summary_value(value)}\n")
        handle.write("\nPer Recipe:\n")
        for row in rows:
            handle.write(
                f"{row['recipe_id']} ({row['difficulty']}, {row['steps']} steps): "
                f"avg {row['average_score']}, 3-star {row['three_star_pct']}%\n"
            )

    csv_recipes = os.path.join(out_dir, base_name + "_recipes.csv")
    with open(csv_recipes, "w", newline="", encoding="utf-8") as handle:
        fieldnames = list(rows[0].keys()) if rows else ["recipe_id"]
        writer = csv.DictWriter(handle, fieldnames=fieldnames)
        writer.writeheader()
        for row in rows:
            writer.writerow(row)

    csv_scores = os.path.join(out_dir, base_name + "_scores.csv")
    with open(csv_scores, "w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle)
        writer.writerow(["RunIndex", "AverageScore"])
        for index, score in enumerate(averages):
            writer.writerow([index, score])

    return {"summary_txt": txt_path, "recipes_csv": csv_recipes, "scores_csv": csv_scores}


def build_parser() -> argparse.ArgumentParser:
    default_config = SimulationConfig()
    parser = argparse.ArgumentParser(description="Kitchen session balancing simulator")
    parser.add_argument(
        "--runs",
        type=int,
        default=default_config.runs,
        help=f"Sessions simulated per recipe (default={default_config.runs})",
    )
    parser.add_argument(
        "--recipe",
        action="append",
        default=None,
        help="Recipe id to simulate; repeat for several (default=all recipes)",
    )
    parser.add_argument(
        "--skill",
        type=float,
        default=default_config.skill,
        help=f"Mean mini-game score (default={default_config.skill})",
    )
    parser.add_argument(
        "--spread",
        type=float,
        default=default_config.spread,
        help=f"Standard deviation of mini-game scores (default={default_config.spread})",
    )
    parser.add_argument(
        "--out",
        type=str,
        default="reports",
        help="Output folder for report files (default=reports)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="RNG seed for reproducibility (default=None=randomized)",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    data = KitchenData.from_json()

    if args.runs <= 0:
        raise SystemExit("--runs must be a positive integer")
    if args.spread < 0:
        raise SystemExit("--spread cannot be negative")
    if args.recipe:
        unknown = [recipe_id for recipe_id in args.recipe if data.recipe(recipe_id) is None]
        if unknown:
            available = ", ".join(sorted(data.recipe_by_id))
            print(f"Unknown recipe(s): {', '.join(unknown)}. Available: {available}")
            raise SystemExit(1)

    seed_used, _ = resolve_seed(args.seed)
    print(f"Using RNG seed: {seed_used}")

    config = SimulationConfig(runs=args.runs, skill=args.skill, spread=args.spread)
    summary, rows, _, averages = simulate_many(
        data, recipe_ids=args.recipe, seed=seed_used, config=config
    )

    print(f"=== SUMMARY (Catalog v{CATALOG_VERSION}) ===")
    for key, value in iter_summary_items(summary):
        print(f"{key}: {format_summary_value(value)}")

    paths = write_report_files(args.out, summary, rows, averages)
    print("\nFiles written:")
    for label, path in paths.items():
        print(f" - {label}: {path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
