"""
Tests for the turn order primitives and the turn manager.
"""

import random

import pytest
from battle.battle_state import BattleState, LastActionDetails
from battle.unit import StatusRecord, Unit, UnitStats
from combat.turn_manager import advance_turn
from combat.turn_order import (
    DEFEAT_MESSAGE,
    VICTORY_MESSAGE,
    activate_unit,
    check_battle_end,
    insert_unit,
    remove_defeated,
    shuffle_in_place,
)
from core.constants import BattleStateTag, UnitStatus, UnitType
from core.logging import ExecutionLog
from effects.status_effect import StatusEffectInstance


def make_unit(unit_id: str, unit_type: UnitType) -> Unit:
    return Unit(
        id=unit_id,
        name=unit_id.title(),
        type=unit_type,
        stats=UnitStats(hp=20, max_hp=20, atk=5),
    )


def assert_positions_synced(state: BattleState) -> None:
    for index, unit_id in enumerate(state.turn_order):
        assert state.get_unit(unit_id).pseudo_pos == index


@pytest.fixture
def log():
    return ExecutionLog("TEST")


@pytest.fixture
def state():
    """Two allies and two enemies, a1 active at the front of the order."""
    units = [
        make_unit("a1", UnitType.ALLY),
        make_unit("e1", UnitType.ENEMY),
        make_unit("a2", UnitType.ALLY),
        make_unit("e2", UnitType.ENEMY),
    ]
    battle = BattleState(units=units, turn_order=[unit.id for unit in units])
    activate_unit(battle, "a1")
    battle.turn_in_round = 1
    return battle


def test_shuffle_keeps_every_id():
    """
    Test that the shuffle is a permutation of its input.
    """
    items = [f"u{i}" for i in range(10)]
    shuffled = list(items)
    shuffle_in_place(shuffled, random.Random(7))

    assert sorted(shuffled) == sorted(items)


def test_insert_unit_clamps_and_flags(state):
    """
    Test that an insertion past the end is clamped and flags the order as modified.
    """
    index = insert_unit(state, "e1", 99)

    assert index == 3
    assert state.turn_order == ["a1", "a2", "e2", "e1"]
    assert state.turn_order_modified_by_skill is True
    assert_positions_synced(state)


def test_remove_defeated_drops_dead_and_unknown(state):
    """
    Test that defeated units and dangling ids leave the turn order.
    """
    state.get_unit("e2").status = UnitStatus.DEFEATED
    state.turn_order.append("ghost")

    removed = remove_defeated(state)

    assert removed == ["e2", "ghost"]
    assert state.turn_order == ["a1", "e1", "a2"]


def test_activate_rotates_to_front(state):
    """
    Test that the active unit is brought to index 0 and positions follow.
    """
    activate_unit(state, "a2")

    assert state.turn_order == ["a2", "e2", "a1", "e1"]
    assert state.active_unit_id == "a2"
    assert state.active_unit_type == UnitType.ALLY
    assert state.get_unit("a2").status == UnitStatus.ACTIVE
    assert_positions_synced(state)


def test_battle_end_win(state):
    """
    Test that a battle with no living enemy and a living ally is won.
    """
    for unit_id in ("e1", "e2"):
        state.get_unit(unit_id).status = UnitStatus.DEFEATED

    assert check_battle_end(state)
    assert state.state == BattleStateTag.WIN
    assert state.battle_message == VICTORY_MESSAGE


def test_error_tag_is_never_reset(state):
    """
    Test that a document tagged Error is not turned back into an Ongoing battle.
    """
    state.state = BattleStateTag.ERROR
    state.battle_message = "Skill Error: Not enough SP."

    assert check_battle_end(state)
    assert state.state == BattleStateTag.ERROR
    assert state.battle_message == "Skill Error: Not enough SP."


def test_battle_end_lose(state):
    """
    Test that a battle with no living ally is lost.
    """
    for unit_id in ("a1", "a2"):
        state.get_unit(unit_id).status = UnitStatus.DEFEATED

    assert check_battle_end(state)
    assert state.state == BattleStateTag.LOSE
    assert state.battle_message == DEFEAT_MESSAGE


def test_finished_battle_is_never_reopened(state):
    """
    Test that a Win stays a Win even if both sides have living units again.
    """
    state.state = BattleStateTag.WIN

    assert check_battle_end(state)
    assert state.state == BattleStateTag.WIN


def test_advance_hands_turn_to_next_idle_unit(state, log):
    """
    Test that the actor ends its turn and the next Idle unit becomes active.
    """
    advance_turn(state, random.Random(1), log)

    assert state.get_unit("a1").status == UnitStatus.END_TURN
    assert state.active_unit_id == "e1"
    assert state.turn_order[0] == "e1"
    assert state.turn_in_round == 2
    assert state.round == 1
    assert state.battle_message == "Turn of E1."
    assert_positions_synced(state)


def test_round_increments_once_per_full_pass(state, log):
    """
    Test that the round counter moves exactly once after every living unit acted.
    """
    rng = random.Random(3)
    for _ in range(3):
        advance_turn(state, rng, log)
    assert state.round == 1
    assert state.turn_in_round == 4

    advance_turn(state, rng, log)

    assert state.round == 2
    assert state.turn_in_round == 1
    assert sorted(state.turn_order) == ["a1", "a2", "e1", "e2"]
    active = [unit.id for unit in state.units if unit.status == UnitStatus.ACTIVE]
    assert active == [state.active_unit_id]
    idle = [unit.id for unit in state.units if unit.status == UnitStatus.IDLE]
    assert len(idle) == 3

    for _ in range(4):
        advance_turn(state, rng, log)
    assert state.round == 3


def test_act_again_keeps_actor_without_consuming_a_turn(state, log):
    """
    Test that an actor granted another action stays active and the turn count holds.
    """
    state.actor_should_act_again = "a1"

    advance_turn(state, random.Random(1), log)

    assert state.active_unit_id == "a1"
    assert state.get_unit("a1").status == UnitStatus.ACTIVE
    assert state.turn_in_round == 1
    assert state.actor_should_act_again is None


def test_advance_prunes_defeated_and_ends_battle(state, log):
    """
    Test that the battle ends with no active unit once the last enemy falls.
    """
    for unit_id in ("e1", "e2"):
        state.get_unit(unit_id).status = UnitStatus.DEFEATED

    advance_turn(state, random.Random(1), log)

    assert state.state == BattleStateTag.WIN
    assert state.active_unit_id is None
    assert state.turn_order == ["a1", "a2"]


def test_advance_keeps_defeated_actor_defeated(state, log):
    """
    Test that an actor killed during its own turn is not overwritten to EndTurn.
    """
    state.get_unit("a1").status = UnitStatus.DEFEATED

    advance_turn(state, random.Random(1), log)

    assert state.get_unit("a1").status == UnitStatus.DEFEATED
    assert "a1" not in state.turn_order
    assert state.active_unit_id == "e1"


def test_advance_runs_upkeep_on_previous_actor(state, log):
    """
    Test that the actor's debuffs tick down and expired ones take their queued effects along.
    """
    actor = state.get_unit("a1")
    actor.status_effects.debuffs.append(StatusRecord(name="Poison", duration=1))
    actor.status_effects.debuffs.append(StatusRecord(name="Stun", duration=2))
    state.active_effects = [
        StatusEffectInstance(type="poison", name="Poison", target_id="a1", trigger_phase="end_of_turn"),
        StatusEffectInstance(type="poison", name="Poison", target_id="e1", trigger_phase="end_of_turn"),
    ]

    advance_turn(state, random.Random(1), log)

    assert [record.name for record in actor.status_effects.debuffs] == ["Stun"]
    assert actor.status_effects.debuffs[0].duration == 1
    assert [effect.target_id for effect in state.active_effects] == ["e1"]


def test_advance_clears_modified_flag_and_last_action(state, log):
    """
    Test that the turn manager consumes the reorder flag and clears the last action.
    """
    state.turn_order_modified_by_skill = True
    state.last_action_details = LastActionDetails(actor_id="a1")

    advance_turn(state, random.Random(1), log)

    assert state.turn_order_modified_by_skill is None
    assert state.last_action_details is None
