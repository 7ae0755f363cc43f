import random

import pytest

from alchemy.config import GameConfig
from alchemy.field import Field
from alchemy.game import GameState
from alchemy.items import FLAME_LEVELS, next_flame_level, normalize_flame_level


class FixedRandom(random.Random):
    """Random source that replays a fixed list of draws."""

    def __init__(self, values):
        super().__init__(0)
        self._values = list(values)

    def random(self):
        return self._values.pop(0)


NO_PESTS = GameConfig(pest_attack_probability=0.0)
QUIET = GameConfig(pest_check_interval=1000.0)


def _grow_all(state: GameState, seconds: float = 10.0) -> None:
    for _ in range(int(seconds)):
        state.update(1.0)


def test_new_game_defaults():
    """A new game has 16 empty fields, a zeroed inventory, and a low flame."""
    state = GameState()
    assert len(state.fields) == 16
    assert all(field.is_empty() for field in state.fields)
    assert dict(state.inventory) == {"fire_grass": 0, "wood_grass": 0, "pill": 0}
    assert state.proficiency == 0
    assert state.flame_level == "low"
    assert not state.refining
    assert state.pest_timer == 0.0


def test_rejects_wrong_field_count():
    """The garden is always exactly 16 fields."""
    with pytest.raises(ValueError):
        GameState(fields=[Field() for _ in range(15)])


def test_plant_grow_harvest_scenario():
    """Plant, fail to replant, grow for ten seconds, then harvest."""
    state = GameState(config=NO_PESTS)
    assert state.plant(0, "fire_grass") is True
    assert state.plant(0, "fire_grass") is False
    _grow_all(state, 10.0)
    assert state.harvest(0) == "fire_grass"
    assert state.inventory["fire_grass"] == 1
    assert state.fields[0].is_empty()


@pytest.mark.parametrize("index", [-1, 16, 100])
def test_out_of_range_index_is_rejected(index):
    """Indices outside 0..15 are reported as failures, not errors."""
    state = GameState(config=NO_PESTS)
    assert state.plant(index, "fire_grass") is False
    assert state.harvest(index) is None


def test_plant_rejects_unknown_crop():
    """Only known crop kinds can be planted."""
    state = GameState(config=NO_PESTS)
    assert state.plant(3, "pill") is False
    assert state.plant(3, "empty") is False
    assert state.plant(3, "moon_flower") is False
    assert state.fields[3].is_empty()


def test_harvest_not_ready_leaves_state_unchanged():
    """Harvesting a growing field fails without touching inventory."""
    state = GameState(config=NO_PESTS)
    state.plant(5, "wood_grass")
    state.update(3.0)
    assert state.harvest(5) is None
    assert state.fields[5].crop_type == "wood_grass"
    assert state.inventory["wood_grass"] == 0


def test_click_plants_then_harvests():
    """Clicking plants an empty field and harvests a ready one."""
    state = GameState(config=NO_PESTS)
    assert state.click(2) == "planted"
    assert state.click(2) == "busy"
    _grow_all(state, 10.0)
    assert state.click(2) == "harvested"
    assert state.inventory["fire_grass"] == 1


def test_update_rejects_negative_dt():
    """Time cannot run backwards."""
    with pytest.raises(ValueError):
        GameState().update(-0.1)


def test_pest_attack_spares_ready_fields():
    """A pest attack clears growing crops but never ripe ones."""
    state = GameState(rng=FixedRandom([0.5, 0.0]))
    state.plant(0, "fire_grass")
    state.update(10.0)  # field 0 ready; pest roll 0.5 misses
    assert state.fields[0].is_ready()

    state.plant(1, "wood_grass")
    state.update(5.0)  # pest roll 0.0 hits
    assert state.fields[0].is_ready()
    assert state.fields[1].is_empty()
    assert state.pest_timer == 0.0


def test_pest_timer_resets_when_attack_misses():
    """The pest timer restarts after every check."""
    state = GameState(rng=FixedRandom([0.9]))
    state.plant(0, "fire_grass")
    state.update(2.0)
    assert state.pest_timer == 2.0
    state.update(3.0)
    assert state.pest_timer == 0.0
    assert state.fields[0].crop_type == "fire_grass"


def test_start_refining_requires_two_fire_grass():
    """Refining needs two fire grass and nothing is consumed up front."""
    state = GameState(config=QUIET, inventory={"fire_grass": 1})
    assert state.start_refining() is False
    assert not state.refining

    state = GameState(config=QUIET, inventory={"fire_grass": 2})
    assert state.start_refining() is True
    assert state.refining
    assert state.refine_time_remaining == 5.0
    assert state.inventory["fire_grass"] == 2
    assert state.start_refining() is False


def test_refine_success_adds_pill_and_proficiency():
    """A winning roll turns two fire grass into a pill and five proficiency."""
    state = GameState(
        config=QUIET,
        rng=FixedRandom([0.55]),
        inventory={"fire_grass": 3},
        flame_level="mid",
    )
    state.start_refining()
    state.update(2.0)
    state.update(2.0)
    assert state.refining
    assert state.refine_time_remaining == pytest.approx(1.0)
    state.update(1.0)
    assert not state.refining
    assert state.last_refine_success is True
    assert dict(state.inventory) == {"fire_grass": 1, "wood_grass": 0, "pill": 1}
    assert state.proficiency == 5


def test_refine_failure_still_consumes_fire_grass():
    """A losing roll burns the fire grass and changes nothing else."""
    state = GameState(config=QUIET, rng=FixedRandom([0.6]), inventory={"fire_grass": 2})
    state.start_refining()
    state.update(5.0)
    assert not state.refining
    assert state.last_refine_success is False
    assert state.inventory["fire_grass"] == 0
    assert state.inventory["pill"] == 0
    assert state.proficiency == 0


def test_refine_aborts_if_material_disappears():
    """Resolution does nothing when fire grass fell below the cost meanwhile."""
    state = GameState(config=QUIET, rng=FixedRandom([0.0]), inventory={"fire_grass": 2})
    state.start_refining()
    state._inventory["fire_grass"] = 1
    state.update(5.0)
    assert not state.refining
    assert state.inventory["fire_grass"] == 1
    assert state.inventory["pill"] == 0


@pytest.mark.parametrize(
    "proficiency, flame, expected",
    [
        (0, "low", 0.5),
        (0, "mid", 0.6),
        (0, "high", 0.7),
        (10, "low", 0.6),
        (40, "high", 1.1),
    ],
)
def test_success_rate_formula(proficiency, flame, expected):
    """Success rate is base + proficiency bonus + flame bonus, unclamped."""
    state = GameState(proficiency=proficiency, flame_level=flame)
    assert state.success_rate() == pytest.approx(expected)


def test_unclamped_rate_always_succeeds():
    """Once the rate passes 1.0 even the highest roll succeeds."""
    state = GameState(
        config=QUIET,
        rng=FixedRandom([0.999]),
        inventory={"fire_grass": 2},
        proficiency=40,
        flame_level="high",
    )
    state.start_refining()
    state.update(5.0)
    assert state.inventory["pill"] == 1
    assert state.proficiency == 45


def test_seeded_games_are_reproducible():
    """Two games with the same seed roll the same outcomes."""
    outcomes = []
    for _ in range(2):
        state = GameState(config=QUIET, rng=random.Random(42), inventory={"fire_grass": 20})
        results = []
        for _ in range(10):
            state.start_refining()
            state.update(5.0)
            results.append(state.last_refine_success)
        outcomes.append(results)
    assert outcomes[0] == outcomes[1]


def test_flame_cycles_back_to_low():
    """Three toggles walk low -> mid -> high -> low."""
    state = GameState()
    assert state.flame_level == "low"
    assert state.cycle_flame() == "mid"
    assert state.cycle_flame() == "high"
    assert state.cycle_flame() == "low"


def test_set_flame_level_normalizes_and_validates():
    """Flame levels are case-insensitive and restricted to the three values."""
    state = GameState()
    state.set_flame_level("HIGH")
    assert state.flame_level == "high"
    with pytest.raises(ValueError):
        state.set_flame_level("inferno")
    assert state.flame_level == "high"


def test_flame_helpers():
    """Flame helpers cover every level."""
    assert [next_flame_level(level) for level in FLAME_LEVELS] == ["mid", "high", "low"]
    assert normalize_flame_level(" Mid ") == "mid"


def test_inventory_view_is_read_only():
    """Callers cannot edit item counts directly."""
    state = GameState()
    with pytest.raises(TypeError):
        state.inventory["pill"] = 5  # type: ignore[index]
