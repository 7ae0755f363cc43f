from __future__ import annotations

import argparse
import sys

import matplotlib.pyplot as plt
import numpy as np

from alchemy.config import GameConfig
from alchemy.game import GameState
from alchemy.items import FLAME_LEVELS, FlameLevel

_FLAME_COLORS = {"low": "tab:blue", "mid": "tab:orange", "high": "tab:red"}
_MAX_SUCCESSES = 10_000


def success_rate_at(cfg: GameConfig, proficiency: int, flame: FlameLevel) -> float:
    """Return the unclamped refining success rate for a proficiency and flame."""
    return GameState(config=cfg, proficiency=proficiency, flame_level=flame).success_rate()


def success_table(cfg: GameConfig, max_proficiency: int = 50, step: int = 5) -> tuple[np.ndarray, dict[str, np.ndarray]]:
    """Return (proficiency values, per-flame success chance) with chances capped at 1."""
    if step <= 0:
        raise ValueError("step must be > 0")
    proficiency = np.arange(0, max_proficiency + 1, step)
    table: dict[str, np.ndarray] = {}
    for flame in FLAME_LEVELS:
        rates = np.array([success_rate_at(cfg, int(p), flame) for p in proficiency], dtype=float)
        table[flame] = np.minimum(rates, 1.0)
    return proficiency, table


def refines_until_certain(cfg: GameConfig, flame: FlameLevel) -> int | None:
    """Return how many successful refines make every later refine succeed.

    None when proficiency gains can never lift the rate to 1.0.
    """
    for successes in range(_MAX_SUCCESSES + 1):
        if success_rate_at(cfg, successes * cfg.proficiency_gain, flame) >= 1.0:
            return successes
        if cfg.proficiency_gain == 0 or cfg.proficiency_bonus == 0:
            return None
    return None


def simulate_refines(
    cfg: GameConfig,
    flame: FlameLevel,
    attempts: int,
    trials: int = 1000,
    seed: int | None = None,
) -> np.ndarray:
    """Monte Carlo mean cumulative pills after each of `attempts` refines from proficiency 0."""
    if attempts < 0 or trials <= 0:
        raise ValueError("attempts must be >= 0 and trials > 0")
    rng = np.random.default_rng(seed)
    proficiency = np.zeros(trials, dtype=float)
    pills = np.zeros(trials, dtype=float)
    means = np.zeros(attempts, dtype=float)
    flame_bonus = cfg.flame_bonus.get(flame, 0.0)
    for attempt in range(attempts):
        rate = cfg.base_success_rate + proficiency * cfg.proficiency_bonus + flame_bonus
        success = rng.random(trials) < rate
        pills += success
        proficiency += success * cfg.proficiency_gain
        means[attempt] = pills.mean()
    return means


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Chart refining odds for each flame level.")
    parser.add_argument("output", nargs="?", default="", help="PNG output path (shows a window if omitted)")
    parser.add_argument("--config", help="Optional JSON config with tuning overrides")
    parser.add_argument("--attempts", type=int, default=30, help="Refines per simulated run")
    parser.add_argument("--trials", type=int, default=2000, help="Simulated runs per flame level")
    parser.add_argument("--seed", type=int, help="Seed for the Monte Carlo runs")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    try:
        cfg = GameConfig.from_json_file(args.config) if args.config else GameConfig()
    except (OSError, ValueError) as exc:
        print(f"error: invalid config: {exc}", file=sys.stderr)
        return 2

    proficiency, table = success_table(cfg)
    fig, (rate_ax, pill_ax) = plt.subplots(1, 2, figsize=(12, 5))
    attempts_axis = np.arange(1, args.attempts + 1)
    for flame in FLAME_LEVELS:
        color = _FLAME_COLORS[flame]
        rate_ax.plot(proficiency, table[flame], marker="o", color=color, label=f"{flame} flame")
        means = simulate_refines(cfg, flame, args.attempts, args.trials, args.seed)
        pill_ax.plot(attempts_axis, means, color=color, label=f"{flame} flame")
        certain = refines_until_certain(cfg, flame)
        certain_text = "never" if certain is None else f"after {certain} successes"
        print(f"{flame}: start {table[flame][0]:.2f}, certain {certain_text}, "
              f"mean pills after {args.attempts} refines {means[-1] if len(means) else 0.0:.2f}")

    rate_ax.set_title("Success chance by proficiency")
    rate_ax.set_xlabel("proficiency")
    rate_ax.set_ylabel("success chance")
    rate_ax.set_ylim(0, 1.05)
    rate_ax.legend()
    pill_ax.set_title(f"Mean pills over {args.trials} runs")
    pill_ax.set_xlabel("refines attempted")
    pill_ax.set_ylabel("pills")
    pill_ax.legend()
    fig.tight_layout()

    if args.output:
        fig.savefig(args.output, dpi=120)
        print(f"saved chart to {args.output}")
    else:
        plt.show()
    plt.close(fig)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
