"""
Turn manager for the resolver.

Runs between two actions: upkeep for the unit that just acted, pruning of
defeated units, the battle-end check and the choice of the next active
unit, starting a new shuffled round when everybody has acted.
"""

import random

from battle.battle_state import BattleState
from combat.turn_order import (
    activate_unit,
    build_shuffled_order,
    check_battle_end,
    remove_defeated,
    sync_pseudo_positions,
)
from core.constants import UnitStatus
from core.logging import ExecutionLog
from effects.effect_scheduler import run_end_of_turn_upkeep


def _next_idle_unit_id(state: BattleState) -> str | None:
    for unit_id in state.turn_order:
        unit = state.get_unit(unit_id)
        if unit is not None and unit.status == UnitStatus.IDLE:
            return unit_id
    return None


def start_new_round(state: BattleState, rng: random.Random, log: ExecutionLog) -> str | None:
    """
    Starts a new round.

    Every living unit becomes Idle, the turn order is rebuilt from the
    living units and shuffled, the round counter moves on and the turn
    counter restarts.

    Args:
        state (BattleState): The battle document.
        rng (random.Random): The random source for the shuffle.
        log (ExecutionLog): The execution log.

    Returns:
        str | None: The id of the first unit of the new round.

    """
    state.round += 1
    state.turn_in_round = 0
    for unit in state.units:
        if unit.is_alive:
            unit.status = UnitStatus.IDLE
    state.turn_order = build_shuffled_order(state, rng)
    log.info(f"Round {state.round} begins. Order: [{', '.join(state.turn_order)}]")
    return state.turn_order[0] if state.turn_order else None


def advance_turn(state: BattleState, rng: random.Random, log: ExecutionLog) -> None:
    """
    Hands the turn to the next unit.

    The unit that just acted goes through end-of-turn upkeep, defeated ids
    leave the turn order and the battle-end check runs. If the last skill
    granted the actor another action it stays active and no turn slot is
    consumed; otherwise it ends its turn and the next Idle unit in order
    becomes active, or a new round starts.

    Args:
        state (BattleState): The battle document.
        rng (random.Random): The random source for new round shuffles.
        log (ExecutionLog): The execution log.

    """
    state.clear_last_action()
    previous_id = state.active_unit_id
    previous = state.get_unit(previous_id)

    if previous is not None:
        run_end_of_turn_upkeep(state, previous, log)

    removed = remove_defeated(state)
    if removed:
        log.debug(f"Removed from the turn order: {removed}")

    if state.turn_order_modified_by_skill:
        log.info("The turn order was modified by a skill during the last action.")
        state.turn_order_modified_by_skill = None

    act_again_id = state.actor_should_act_again
    state.actor_should_act_again = None

    if check_battle_end(state, log) or not state.turn_order:
        log.info("The battle has ended.")
        state.active_unit_id = None
        sync_pseudo_positions(state)
        return

    acts_again = (
        previous is not None and previous.is_alive and act_again_id == previous.id
    )
    if acts_again:
        log.info(f"{previous.display_name} acts again.")
        activate_unit(state, previous.id)
        state.battle_message = f"Turn of {previous.display_name}."
        return

    if previous is not None and previous.is_alive:
        previous.status = UnitStatus.END_TURN

    next_id = _next_idle_unit_id(state)
    if next_id is None:
        log.info("All units have acted.")
        next_id = start_new_round(state, rng, log)
    if next_id is None:
        state.active_unit_id = None
        return

    activate_unit(state, next_id)
    state.turn_in_round += 1
    unit = state.get_unit(next_id)
    name = unit.display_name if unit is not None else next_id
    state.battle_message = f"Turn of {name}."
    log.info(f"Turn {state.turn_in_round} of round {state.round}: {name}.")
