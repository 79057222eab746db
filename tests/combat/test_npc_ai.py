"""
Tests for the enemy AI.
"""

import random

import pytest
from battle.battle_state import BattleState
from battle.unit import StatusRecord, Unit, UnitStats
from combat.npc_ai import (
    NO_TARGET_OUTCOME,
    STUNNED_OUTCOME,
    resolve_enemy_turn,
    select_attack_target,
)
from combat.turn_order import activate_unit
from core.config import DEFAULT_CONFIG
from core.constants import BASIC_ATTACK_COMMAND_ID, BattleStateTag, UnitStatus, UnitType
from core.error_handling import InputError
from core.logging import ExecutionLog


def make_unit(unit_id: str, unit_type: UnitType, role: str | None = None, hp: int = 30, atk: int = 8) -> Unit:
    return Unit(
        id=unit_id,
        name=unit_id.title(),
        type=unit_type,
        role=role,
        stats=UnitStats(hp=hp, max_hp=hp, atk=atk),
    )


@pytest.fixture
def log():
    return ExecutionLog("ENEMY_ACTION")


@pytest.fixture
def ranged_state():
    """A ranged enemy at position 0 of a five unit ring: e1 a1 a2 a3 a4."""
    units = [
        make_unit("e1", UnitType.ENEMY, role="Ranged"),
        make_unit("a1", UnitType.ALLY),
        make_unit("a2", UnitType.ALLY),
        make_unit("a3", UnitType.ALLY),
        make_unit("a4", UnitType.ALLY),
    ]
    battle = BattleState(units=units, turn_order=[unit.id for unit in units])
    activate_unit(battle, "e1")
    return battle


def test_ranged_enemy_only_considers_distance_two(ranged_state):
    """
    Test that a ranged enemy in a five unit ring only reaches the allies at distance exactly 2.
    """
    attacker = ranged_state.get_unit("e1")

    selection = select_attack_target(ranged_state, attacker, random.Random(0), DEFAULT_CONFIG)

    assert selection.attack_range == 2
    assert selection.candidates == ["a2", "a3"]
    assert selection.target_id in ("a2", "a3")


def test_lower_case_role_is_accepted(ranged_state):
    """
    Test that a hand-written lower case role still selects the ranged distance.
    """
    attacker = ranged_state.get_unit("e1")
    attacker.role = "ranged"

    selection = select_attack_target(ranged_state, attacker, random.Random(0), DEFAULT_CONFIG)

    assert selection.attack_range == 2


def test_melee_enemy_without_role(ranged_state):
    """
    Test that an enemy without a role fights at melee distance.
    """
    attacker = ranged_state.get_unit("e1")
    attacker.role = None

    selection = select_attack_target(ranged_state, attacker, random.Random(0), DEFAULT_CONFIG)

    assert selection.candidates == ["a1", "a4"]


def test_enemy_attack_hits_chosen_ally(ranged_state, log, mocker):
    """
    Test that the enemy hits the randomly chosen ally with its plain ATK.
    """
    rng = random.Random(0)
    mocker.patch.object(rng, "choice", side_effect=lambda units: units[-1])

    outcome = resolve_enemy_turn(ranged_state, rng, DEFAULT_CONFIG, log)

    target = ranged_state.get_unit("a3")
    assert target.stats.hp == 22
    assert not outcome.was_target_eliminated
    assert ranged_state.battle_message == "E1 attacked A3 for 8 damage!"
    details = ranged_state.last_action_details
    assert details.command_id == BASIC_ATTACK_COMMAND_ID
    assert details.targets == ["a3"]
    assert details.effects_summary == ["A3 (-8 HP)"]


def test_enemy_attack_can_end_the_battle(log):
    """
    Test that killing the last ally loses the battle.
    """
    units = [
        make_unit("e1", UnitType.ENEMY, role="Melee", atk=50),
        make_unit("a1", UnitType.ALLY, hp=10),
    ]
    state = BattleState(units=units, turn_order=["e1", "a1"])
    activate_unit(state, "e1")

    outcome = resolve_enemy_turn(state, random.Random(0), DEFAULT_CONFIG, log)

    assert outcome.was_target_eliminated
    assert state.get_unit("a1").status == UnitStatus.DEFEATED
    assert state.state == BattleStateTag.LOSE


def test_stunned_enemy_skips_turn(ranged_state, log):
    """
    Test that an enemy carrying a Stun debuff does nothing.
    """
    attacker = ranged_state.get_unit("e1")
    attacker.status_effects.debuffs.append(StatusRecord(name="Stun", duration=1))

    outcome = resolve_enemy_turn(ranged_state, random.Random(0), DEFAULT_CONFIG, log)

    assert not outcome.was_target_eliminated
    assert ranged_state.last_action_details.action_outcome == STUNNED_OUTCOME
    assert ranged_state.battle_message == "E1 is stunned!"
    assert all(unit.stats.hp == 30 for unit in ranged_state.units)


def test_no_target_in_range_is_a_no_op(log):
    """
    Test that an enemy with nobody at its distance leaves the battle untouched.
    """
    units = [
        make_unit("e1", UnitType.ENEMY, role="Ranged"),
        make_unit("a1", UnitType.ALLY),
    ]
    state = BattleState(units=units, turn_order=["e1", "a1"])
    activate_unit(state, "e1")

    outcome = resolve_enemy_turn(state, random.Random(0), DEFAULT_CONFIG, log)

    assert not outcome.was_target_eliminated
    assert state.last_action_details.action_outcome == NO_TARGET_OUTCOME
    assert state.get_unit("a1").stats.hp == 30


def test_missing_active_unit_is_an_input_error(ranged_state, log):
    """
    Test that a document without an active unit is rejected.
    """
    ranged_state.active_unit_id = None

    with pytest.raises(InputError):
        resolve_enemy_turn(ranged_state, random.Random(0), DEFAULT_CONFIG, log)
