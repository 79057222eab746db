"""
Turn order primitives.

The turn order is the only source of truth for positions: every function
here that changes it resyncs the units' ``pseudoPos`` before returning.
"""

import random

from battle.battle_state import BattleState
from core.constants import BattleStateTag, UnitStatus, UnitType
from core.logging import ExecutionLog

VICTORY_MESSAGE = "Victory!"
DEFEAT_MESSAGE = "Defeat..."


def sync_pseudo_positions(state: BattleState) -> None:
    """
    Sets every unit's ``pseudoPos`` to its index in the turn order.

    Ids that do not resolve to a unit are ignored.

    Args:
        state (BattleState): The battle document.

    """
    for index, unit_id in enumerate(state.turn_order):
        unit = state.get_unit(unit_id)
        if unit is not None:
            unit.pseudo_pos = index


def shuffle_in_place(items: list[str], rng: random.Random) -> None:
    """
    Shuffles a list uniformly (Fisher-Yates).

    Args:
        items (list[str]): The list to shuffle.
        rng (random.Random): The random source.

    """
    for i in range(len(items) - 1, 0, -1):
        j = rng.randint(0, i)
        items[i], items[j] = items[j], items[i]


def insert_unit(state: BattleState, unit_id: str, index: int) -> int:
    """
    Moves a unit to a given index of the turn order.

    The id is removed first if already present, the index is clamped to the
    valid range, and the turn order is flagged as modified mid-skill.

    Args:
        state (BattleState): The battle document.
        unit_id (str): The unit to insert.
        index (int): The requested index.

    Returns:
        int: The index the unit ended up at.

    """
    order = [uid for uid in state.turn_order if uid != unit_id]
    index = max(0, min(index, len(order)))
    order.insert(index, unit_id)
    state.turn_order = order
    state.turn_order_modified_by_skill = True
    sync_pseudo_positions(state)
    return index


def remove_defeated(state: BattleState) -> list[str]:
    """
    Drops defeated and unknown ids from the turn order.

    Args:
        state (BattleState): The battle document.

    Returns:
        list[str]: The ids that were removed.

    """
    kept: list[str] = []
    removed: list[str] = []
    for unit_id in state.turn_order:
        unit = state.get_unit(unit_id)
        if unit is not None and unit.is_alive:
            kept.append(unit_id)
        else:
            removed.append(unit_id)
    state.turn_order = kept
    return removed


def rotate_to_front(state: BattleState, unit_id: str) -> None:
    """
    Rotates the turn order so that a unit comes first.

    The ids before it move to the back, keeping their relative order.

    Args:
        state (BattleState): The battle document.
        unit_id (str): The unit to bring to the front.

    """
    if unit_id not in state.turn_order:
        return
    index = state.turn_order.index(unit_id)
    state.turn_order = state.turn_order[index:] + state.turn_order[:index]
    sync_pseudo_positions(state)


def build_shuffled_order(state: BattleState, rng: random.Random) -> list[str]:
    """
    Builds a fresh turn order of every living unit, shuffled.

    Args:
        state (BattleState): The battle document.
        rng (random.Random): The random source.

    Returns:
        list[str]: The new turn order.

    """
    order = [unit.id for unit in state.units if unit.is_alive]
    shuffle_in_place(order, rng)
    return order


def activate_unit(state: BattleState, unit_id: str) -> None:
    """
    Makes a unit the active one and brings it to the front of the turn order.

    Args:
        state (BattleState): The battle document.
        unit_id (str): The unit whose turn starts.

    """
    rotate_to_front(state, unit_id)
    state.active_unit_id = unit_id
    unit = state.get_unit(unit_id)
    if unit is not None:
        unit.status = UnitStatus.ACTIVE
        state.active_unit_type = unit.type
    sync_pseudo_positions(state)


def check_battle_end(state: BattleState, log: ExecutionLog | None = None) -> bool:
    """
    Checks whether one side has been wiped out.

    Sets the state tag to Win when no enemy is alive and at least one ally
    is, to Lose when no ally is alive, and leaves it Ongoing otherwise. A
    battle that already ended, or was tagged Error, is never reopened.

    Args:
        state (BattleState): The battle document.
        log (ExecutionLog | None): Where to record the outcome.

    Returns:
        bool: True if the battle is over.

    """
    if state.state.is_terminal():
        return True
    allies = len(state.living_units(UnitType.ALLY))
    enemies = len(state.living_units(UnitType.ENEMY))
    if enemies == 0 and allies > 0:
        state.state = BattleStateTag.WIN
        state.battle_message = VICTORY_MESSAGE
    elif allies == 0:
        state.state = BattleStateTag.LOSE
        state.battle_message = DEFEAT_MESSAGE
    else:
        state.state = BattleStateTag.ONGOING
        return False
    if log is not None:
        log.info(f"Battle ended: {state.state.value}.")
    return True
