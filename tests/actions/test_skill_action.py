"""
Tests for the skill pipeline.
"""

import random

import pytest
from actions.skill_action import resolve_skill
from battle.battle_state import BattleState
from battle.command import Command
from battle.unit import StatusRecord, Unit, UnitStats
from combat.turn_order import activate_unit
from core.config import DEFAULT_CONFIG
from core.constants import UnitStatus, UnitType
from core.error_handling import InputError, InsufficientResourceError
from core.logging import ExecutionLog


def make_command(command_id: str, effects: list[dict], **fields) -> dict:
    return {"commandId": command_id, "name": command_id.replace("_", " ").title(), "effects": effects, **fields}


COMMANDS = [
    make_command("slash", [{"type": "damage", "target": "selected", "multiplier": 1.5}], spCost=2, sfxFilename="slash.ogg"),
    make_command("cleave", [{"type": "damage_aoe_adjacent", "target": "caster_adjacent_enemies"}]),
    make_command(
        "final_blow",
        [{"type": "damage", "target": "selected", "multiplier": 3}],
        isUltimate=True,
    ),
    make_command(
        "mend",
        [{"type": "heal", "target": "selected", "multiplier": 0.5, "basedOn": "caster_atk"}],
    ),
    make_command("barrier", [{"type": "shield", "target": "area", "multiplier": 0.1}]),
    make_command("raise", [{"type": "revive", "target": "selected", "hpPercentage": 0.5}]),
    make_command(
        "venom",
        [
            {
                "type": "status",
                "target": "selected",
                "statusName": "Poison",
                "duration": 2,
                "effectDetails": {"trigger_phase": "end_of_turn", "damage": 3},
            }
        ],
    ),
    make_command("haste", [{"type": "act_again", "target": "caster"}]),
    make_command("triage", [{"type": "heal_lowest_hp_ally", "multiplier": 0.2}]),
    make_command(
        "hex",
        [{"type": "damage", "target": "selected", "multiplier": 0.5}],
        applied_effects=[
            {"effect_id": "curse", "type": "damage_over_time", "trigger_phase": "end_of_turn", "damage": 2, "chance": 0.5}
        ],
    ),
    make_command("mystery", [{"type": "damage", "target": "somewhere"}]),
]


def make_unit(unit_id: str, unit_type: UnitType, hp: int = 100, atk: int = 20) -> Unit:
    return Unit(
        id=unit_id,
        name=unit_id.title(),
        type=unit_type,
        stats=UnitStats(hp=hp, max_hp=100, atk=atk),
    )


@pytest.fixture
def log():
    return ExecutionLog("SKILL_PROC")


@pytest.fixture
def state():
    """Ring: hero orc cleric wolf fallen(defeated) imp, hero active with 5 team SP."""
    hero = make_unit("hero", UnitType.ALLY)
    hero.commands = [Command.model_validate(command) for command in COMMANDS]
    units = [
        hero,
        make_unit("orc", UnitType.ENEMY),
        make_unit("cleric", UnitType.ALLY, hp=40),
        make_unit("wolf", UnitType.ENEMY, hp=10),
        make_unit("fallen", UnitType.ALLY, hp=0),
        make_unit("imp", UnitType.ENEMY),
    ]
    units[4].status = UnitStatus.DEFEATED
    battle = BattleState(
        units=units,
        turn_order=["hero", "orc", "cleric", "wolf", "imp"],
        team_sp=5,
        max_team_sp=10,
    )
    activate_unit(battle, "hero")
    return battle


def test_damage_skill_scales_with_atk(state, log):
    """
    Test that a damage effect deals round(ATK x multiplier) and the skill pays its SP.
    """
    outcome = resolve_skill(state, "hero", "slash", ["orc"], random.Random(0), DEFAULT_CONFIG, log)

    assert state.get_unit("orc").stats.hp == 70
    assert state.team_sp == 3
    assert outcome.sfx_id == "slash.ogg"
    assert not outcome.actor_acts_again
    assert state.get_unit("hero").status == UnitStatus.END_TURN
    assert state.battle_message == "Hero used Slash! Orc (-30 HP)."
    assert state.last_action_details.effects_summary == ["Orc (-30 HP)"]


def test_not_enough_sp(state, log):
    """
    Test that a skill the team cannot pay for is rejected and nothing changes.
    """
    state.team_sp = 1

    with pytest.raises(InsufficientResourceError):
        resolve_skill(state, "hero", "slash", ["orc"], random.Random(0), DEFAULT_CONFIG, log)
    assert state.get_unit("orc").stats.hp == 100
    assert state.team_sp == 1


def test_ultimate_needs_full_gauge(state, log):
    """
    Test that an ultimate without gaugeCost needs the full gauge and empties it.
    """
    hero = state.get_unit("hero")
    hero.stats.gauge = 99
    with pytest.raises(InsufficientResourceError):
        resolve_skill(state, "hero", "final_blow", ["orc"], random.Random(0), DEFAULT_CONFIG, log)

    hero.stats.gauge = 100
    resolve_skill(state, "hero", "final_blow", ["orc"], random.Random(0), DEFAULT_CONFIG, log)

    assert hero.stats.gauge == 0
    assert state.get_unit("orc").stats.hp == 40


def test_unknown_command(state, log):
    """
    Test that a command the actor does not have is an input error.
    """
    with pytest.raises(InputError):
        resolve_skill(state, "hero", "meteor", ["orc"], random.Random(0), DEFAULT_CONFIG, log)


def test_caster_adjacent_enemies(state, log):
    """
    Test that an adjacent area hits the living enemies next to the caster on the ring.
    """
    outcome = resolve_skill(state, "hero", "cleave", [], random.Random(0), DEFAULT_CONFIG, log)

    assert state.get_unit("orc").stats.hp == 80
    assert state.get_unit("imp").stats.hp == 80
    assert state.get_unit("wolf").stats.hp == 10
    assert not outcome.was_target_eliminated


def test_killing_blow_is_reported(state, log):
    """
    Test that a skill defeating a unit sets the elimination flag.
    """
    outcome = resolve_skill(state, "hero", "slash", ["wolf"], random.Random(0), DEFAULT_CONFIG, log)

    assert outcome.was_target_eliminated
    assert state.get_unit("wolf").status == UnitStatus.DEFEATED
    assert [record.id for record in state.defeated_enemies] == ["wolf"]


def test_heal_based_on_caster_atk(state, log):
    """
    Test that a heal scaled on the caster's ATK restores half of it.
    """
    resolve_skill(state, "hero", "mend", ["cleric"], random.Random(0), DEFAULT_CONFIG, log)

    assert state.get_unit("cleric").stats.hp == 50


def test_shield_based_on_target_max_hp(state, log):
    """
    Test that a shield without basedOn scales on the target's max HP.
    """
    resolve_skill(state, "hero", "barrier", ["hero", "cleric"], random.Random(0), DEFAULT_CONFIG, log)

    assert state.get_unit("hero").stats.shield_hp == 10
    assert state.get_unit("cleric").stats.shield_hp == 10


def test_revive_reinserts_at_index_one(state, log):
    """
    Test that a revived ally comes back Idle with half its HP at turn order index 1.
    """
    resolve_skill(state, "hero", "raise", ["fallen"], random.Random(0), DEFAULT_CONFIG, log)

    fallen = state.get_unit("fallen")
    assert fallen.status == UnitStatus.IDLE
    assert fallen.stats.hp == 50
    assert fallen.stats.shield_hp == 0
    assert state.turn_order.index("fallen") == 1
    assert fallen.pseudo_pos == 1
    assert state.turn_order_modified_by_skill is True
    for index, unit_id in enumerate(state.turn_order):
        assert state.get_unit(unit_id).pseudo_pos == index


def test_status_applies_debuff_and_queues_effect(state, log):
    """
    Test that a status effect attaches a debuff and queues its ticking record.
    """
    resolve_skill(state, "hero", "venom", ["orc"], random.Random(0), DEFAULT_CONFIG, log)

    orc = state.get_unit("orc")
    assert [(r.name, r.duration, r.source_unit_id) for r in orc.status_effects.debuffs] == [("Poison", 2, "hero")]
    assert len(state.active_effects) == 1
    queued = state.active_effects[0]
    assert queued.type == "poison"
    assert queued.name == "Poison"
    assert queued.target_id == "orc"
    assert queued.damage == 3
    assert queued.trigger_phase == "end_of_turn"
    assert queued.source_unit_id == "hero"


def test_status_refresh_does_not_stack(state, log):
    """
    Test that re-applying a status keeps one debuff and one queued record, with the longer duration.
    """
    state.get_unit("orc").status_effects.debuffs.append(StatusRecord(name="Poison", duration=5))

    resolve_skill(state, "hero", "venom", ["orc"], random.Random(0), DEFAULT_CONFIG, log)
    resolve_skill(state, "hero", "venom", ["orc"], random.Random(0), DEFAULT_CONFIG, log)

    debuffs = state.get_unit("orc").status_effects.debuffs
    assert len(debuffs) == 1
    assert debuffs[0].duration == 5
    assert len(state.active_effects) == 1


def test_status_refresh_queues_longer_duration(state, log):
    """
    Test that the queued record of a refreshed status carries the duration kept on the unit.
    """
    state.get_unit("orc").status_effects.debuffs.append(StatusRecord(name="Poison", duration=5))

    resolve_skill(state, "hero", "venom", ["orc"], random.Random(0), DEFAULT_CONFIG, log)

    assert state.get_unit("orc").status_effects.debuffs[0].duration == 5
    assert [(queued.name, queued.duration) for queued in state.active_effects] == [("Poison", 5)]


def test_act_again_keeps_the_turn(state, log):
    """
    Test that an act-again skill flags the actor instead of ending its turn.
    """
    outcome = resolve_skill(state, "hero", "haste", [], random.Random(0), DEFAULT_CONFIG, log)

    assert outcome.actor_acts_again
    assert state.actor_should_act_again == "hero"
    assert state.get_unit("hero").status == UnitStatus.ACTIVE
    assert state.battle_message == "Hero used Haste!"


def test_heal_lowest_picks_lowest_fraction(state, log):
    """
    Test that the living ally with the lowest HP fraction is healed, never a defeated one.
    """
    resolve_skill(state, "hero", "triage", [], random.Random(0), DEFAULT_CONFIG, log)

    assert state.get_unit("cleric").stats.hp == 60
    assert state.get_unit("fallen").stats.hp == 0


def test_applied_effects_roll_per_target(state, log, mocker):
    """
    Test that each target rolls separately against the template chance.
    """
    rng = random.Random(0)
    mocker.patch.object(rng, "random", side_effect=[0.1, 0.9])

    resolve_skill(state, "hero", "hex", ["orc", "imp"], rng, DEFAULT_CONFIG, log)

    assert [effect.target_id for effect in state.active_effects] == ["orc"]
    assert state.active_effects[0].source_skill_name == "Hex"
    assert state.active_effects[0].source_actor_id == "hero"


def test_no_target_found(state, log):
    """
    Test that a skill whose targets are all gone still resolves with a neutral message.
    """
    state.get_unit("orc").status = UnitStatus.DEFEATED

    outcome = resolve_skill(state, "hero", "slash", ["orc"], random.Random(0), DEFAULT_CONFIG, log)

    assert not outcome.was_target_eliminated
    assert state.battle_message == "Hero used Slash! ...but no valid targets were found."
    assert state.get_unit("hero").status == UnitStatus.END_TURN


def test_unknown_effect_target_is_skipped(state, log, mocker):
    """
    Test that an effect with an unknown target value is reported and skipped.
    """
    warn = mocker.patch("core.logging.log_warning")

    resolve_skill(state, "hero", "mystery", ["orc"], random.Random(0), DEFAULT_CONFIG, log)

    assert state.get_unit("orc").stats.hp == 100
    warn.assert_called_once()
