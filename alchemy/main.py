from __future__ import annotations

import argparse
import logging
import math
import random
import sys
from typing import Iterable

from alchemy.config import GameConfig
from alchemy.game import GameState
from alchemy.items import CROP_KINDS, FIRE_GRASS, GRID_SIZE, ITEM_KINDS
from alchemy.save_manager import load_game, save_game

USAGE = (
    "commands: plant I [CROP] | harvest I | click I | refine | flame [LEVEL] | "
    "wait SECONDS | status | quit"
)

# Commands that can change the persisted state.
_MUTATING = {"plant", "harvest", "click", "refine", "flame", "wait"}

# Longest single wait; longer idles are split into several commands.
MAX_WAIT_SECONDS = 3600.0


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="alchemy",
        description="Tend the 4x4 garden and refine fire grass into pills.",
        epilog=USAGE,
    )
    parser.add_argument("commands", nargs="*", help='Commands to run, one per argument (e.g. "plant 0"); reads stdin if none')
    parser.add_argument("--save", help="Save file path (default: config save_path)")
    parser.add_argument("--config", help="Optional JSON config with tuning overrides")
    parser.add_argument("--seed", type=int, help="Seed for pest and refining rolls")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log rejected actions too")
    return parser.parse_args(argv)


def advance(state: GameState, seconds: float, tick: float) -> int:
    """Run `update` in tick-sized steps covering `seconds`; return the tick count."""
    ticks = 0
    remaining = seconds
    while remaining > 0:
        dt = min(tick, remaining)
        state.update(dt)
        remaining -= dt
        ticks += 1
    return ticks


def _field_glyph(state: GameState, index: int) -> str:
    field = state.fields[index]
    if field.is_empty():
        return "."
    initial = field.crop_type[0]
    return initial.upper() if field.is_ready() else initial.lower()


def render_status(state: GameState) -> str:
    """Return a text summary of the garden, inventory and furnace."""
    lines = []
    for row in range(GRID_SIZE):
        cells = [_field_glyph(state, row * GRID_SIZE + col) for col in range(GRID_SIZE)]
        lines.append(" ".join(cells))
    growing = [
        f"{index}:{field.progress:.0%}"
        for index, field in enumerate(state.fields)
        if not field.is_empty() and not field.is_ready()
    ]
    if growing:
        lines.append(f"growing: {' '.join(growing)}")
    inventory = ", ".join(f"{kind}={state.inventory.get(kind, 0)}" for kind in ITEM_KINDS)
    lines.append(f"inventory: {inventory}")
    lines.append(
        f"proficiency: {state.proficiency}  flame: {state.flame_level}  "
        f"success rate: {state.success_rate():.2f}"
    )
    if state.refining:
        lines.append(f"refining: {state.refine_time_remaining:.1f}s left")
    elif state.last_refine_success is not None:
        lines.append(f"last refine: {'success' if state.last_refine_success else 'failure'}")
    return "\n".join(lines)


def _parse_index(args: list[str]) -> int:
    if not args:
        raise ValueError("missing field index")
    return int(args[0])


def run_command(state: GameState, line: str) -> str:
    """Apply one text command to the game and return the message to show."""
    parts = line.split()
    if not parts:
        return ""
    name, args = parts[0].lower(), parts[1:]
    if name == "plant":
        crop = args[1] if len(args) > 1 else FIRE_GRASS
        if crop not in CROP_KINDS:
            return f"unknown crop: {crop} (choose from {', '.join(CROP_KINDS)})"
        index = _parse_index(args)
        return f"planted {crop} in field {index}" if state.plant(index, crop) else f"cannot plant in field {index}"
    if name == "harvest":
        index = _parse_index(args)
        crop = state.harvest(index)
        return f"harvested {crop} from field {index}" if crop else f"field {index} is not ready"
    if name == "click":
        index = _parse_index(args)
        return f"field {index}: {state.click(index)}"
    if name == "refine":
        if state.start_refining():
            return f"refining started ({state.config.refine_time:.1f}s, {state.flame_level} flame)"
        return "cannot refine: already refining or not enough fire_grass"
    if name == "flame":
        if args:
            state.set_flame_level(args[0])
        else:
            state.cycle_flame()
        return f"flame: {state.flame_level}"
    if name == "wait":
        if not args:
            raise ValueError("missing seconds")
        seconds = float(args[0])
        if not math.isfinite(seconds) or not 0 <= seconds <= MAX_WAIT_SECONDS:
            raise ValueError(f"seconds must be between 0 and {MAX_WAIT_SECONDS:g}")
        advance(state, seconds, state.config.tick_seconds)
        return f"waited {seconds:g}s"
    if name == "status":
        return render_status(state)
    raise ValueError(f"unknown command: {name}")


def _command_lines(commands: list[str]) -> Iterable[str]:
    if commands:
        return commands
    return (line.strip() for line in sys.stdin)


def main(argv: list[str] | None = None) -> int:
    """Run the headless garden driver."""
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        cfg = GameConfig.from_json_file(args.config) if args.config else GameConfig()
    except (OSError, ValueError) as exc:
        print(f"error: invalid config: {exc}", file=sys.stderr)
        return 2

    save_path = args.save or cfg.save_path
    state = load_game(save_path, config=cfg, rng=random.Random(args.seed))

    for line in _command_lines(args.commands):
        if not line.strip():
            continue
        if line.split()[0].lower() == "quit":
            break
        try:
            message = run_command(state, line)
        except ValueError as exc:
            print(f"{exc}\n{USAGE}")
            continue
        print(message)
        if line.split()[0].lower() in _MUTATING:
            save_game(state, save_path)

    save_game(state, save_path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
