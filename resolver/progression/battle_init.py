"""
Battle initialization.

Scales the roster with the progression levels, then sets up the first
round: every unit Idle, a shuffled turn order and the first unit active.
"""

import random

from battle.battle_state import BattleState
from battle.progression_data import ProgressionData
from battle.unit import Unit
from combat.combat_math import round_half_up
from combat.turn_order import activate_unit, build_shuffled_order
from core.config import ResolverConfig, StatGrowth
from core.constants import BattleStateTag, UnitStatus
from core.logging import ExecutionLog

EXERCISE_STAT_ATK = "ATK"
EXERCISE_STAT_HP = "HP"


def _tidy(value: float) -> int | float:
    # Whole numbers go back to the document as integers.
    return int(value) if float(value).is_integer() else value


def is_exercise_hero(unit: Unit, config: ResolverConfig) -> bool:
    """True for the hero whose stats grow with exercise progression."""
    return unit.is_ally and config.exercise_hero_marker in unit.id


def stat_growth_for(unit: Unit, config: ResolverConfig) -> StatGrowth:
    """
    Returns the per-level growth of a unit.

    Args:
        unit (Unit): The unit.
        config (ResolverConfig): The growth tables.

    Returns:
        StatGrowth: The growth; no growth for enemies of an unknown tier.

    """
    if unit.is_ally:
        return config.exercise_hero_growth if is_exercise_hero(unit, config) else config.hero_growth
    return config.enemy_growth.get(unit.tier or "", StatGrowth())


def apply_level_growth(unit: Unit, level: int, config: ResolverConfig) -> None:
    """
    Adds the stats gained above level 1 and fully heals the unit.

    Args:
        unit (Unit): The unit, updated in place.
        level (int): The level it fights at.
        config (ResolverConfig): The growth tables.

    """
    if level <= 1:
        return
    bonus = level - 1
    growth = stat_growth_for(unit, config)
    unit.stats.max_hp += round_half_up(bonus * growth.hp)
    unit.stats.hp = unit.stats.max_hp
    unit.stats.atk = _tidy(unit.stats.atk + bonus * growth.atk)


def apply_exercise_growth(unit: Unit, progression: ProgressionData, log: ExecutionLog) -> None:
    """
    Adds the exercise levels to the exercise hero's ATK or HP.

    Args:
        unit (Unit): The exercise hero, updated in place.
        progression (ProgressionData): The progression with the exercise records.
        log (ExecutionLog): The execution log.

    """
    for exercise in progression.exercise_stats_progression:
        bonus = exercise.level - 1
        if bonus <= 0:
            continue
        if exercise.stats == EXERCISE_STAT_ATK:
            unit.stats.atk += bonus
        elif exercise.stats == EXERCISE_STAT_HP:
            unit.stats.max_hp += bonus
            unit.stats.hp = unit.stats.max_hp
        else:
            continue
        log.debug(f"{unit.display_name} gains +{bonus} {exercise.stats} from {exercise.id}.")


def prepare_battle(
    state: BattleState,
    progression: ProgressionData,
    rng: random.Random,
    config: ResolverConfig,
    log: ExecutionLog,
) -> None:
    """
    Prepares a battle document for its first turn.

    Args:
        state (BattleState): The roster document, updated in place.
        progression (ProgressionData): The progression snapshot.
        rng (random.Random): The random source for the turn order shuffle.
        config (ResolverConfig): The rule constants.
        log (ExecutionLog): The execution log.

    """
    state.round = 1
    state.turn_in_round = 1
    state.state = BattleStateTag.ONGOING
    state.progression_snapshot = progression.model_copy(deep=True)

    enemy_level = progression.enemy_progression.global_level
    log.info(f"Enemy global level: {enemy_level}")
    for unit in state.units:
        if unit.is_ally:
            hero = progression.get_hero(unit.id)
            level = hero.level if hero is not None else 1
            apply_level_growth(unit, level, config)
            if is_exercise_hero(unit, config):
                apply_exercise_growth(unit, progression, log)
        else:
            level = enemy_level
            apply_level_growth(unit, level, config)
            unit.exp_value = (unit.exp_value or 1) * level
        unit.level = level
        log.debug(f"{unit} level {level}: HP {unit.stats.hp}/{unit.stats.max_hp}, ATK {unit.stats.atk}")

    for unit in state.units:
        if unit.is_alive:
            unit.status = UnitStatus.IDLE
    order = build_shuffled_order(state, rng)
    if not order:
        log.error("No units available to start the battle.")
        state.state = BattleStateTag.ERROR
        state.battle_message = "Error: No units available to start the battle."
        state.turn_order = []
        state.active_unit_id = None
        return

    state.turn_order = order
    activate_unit(state, order[0])
    first = state.active_unit
    name = first.display_name if first is not None else order[0]
    state.battle_message = f"Battle Start! {name}'s turn."
    log.info(f"Initial turn order: [{', '.join(state.turn_order)}]")
