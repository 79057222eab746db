"""
Enemy AI for the resolver.

An enemy attacks one living ally standing at exactly its role's attack
range from it on the turn order ring, chosen uniformly at random. A stunned
enemy skips its turn.
"""

import random

from pydantic import BaseModel, Field

from actions.base_action import ActionOutcome, register_hit
from battle.battle_state import BattleState, LastActionDetails
from battle.unit import Unit
from combat.combat_math import apply_damage
from combat.targeting import units_within_distance
from core.config import ResolverConfig
from core.constants import (
    BASIC_ATTACK_COMMAND_ID,
    BASIC_ATTACK_COMMAND_NAME,
    STUN_STATUS_NAME,
    STUNNED_COMMAND_ID,
    UnitType,
)
from core.error_handling import InputError
from core.logging import ExecutionLog

STUNNED_OUTCOME = "STUNNED"
NO_TARGET_OUTCOME = "NO_TARGET_IN_RANGE"


class AttackSelection(BaseModel):
    """The allies an enemy can reach and the one it picked."""

    attack_range: int = Field(
        description="Exact circular distance the enemy attacks at.",
    )
    candidates: list[str] = Field(
        default_factory=list,
        description="Ids of the allies at that distance.",
    )
    target_id: str | None = Field(
        default=None,
        description="The chosen ally, None when nobody is in range.",
    )


def select_attack_target(
    state: BattleState,
    attacker: Unit,
    rng: random.Random,
    config: ResolverConfig,
) -> AttackSelection:
    """
    Picks the ally an enemy attacks.

    Args:
        state (BattleState): The battle document.
        attacker (Unit): The acting enemy.
        rng (random.Random): The random source for the choice.
        config (ResolverConfig): The rule constants (attack ranges).

    Returns:
        AttackSelection: The candidates and the chosen target.

    """
    attack_range = config.attack_range.get(attacker.combat_role, 1)
    candidates = units_within_distance(
        state, attacker, attack_range, unit_type=UnitType.ALLY, exact=True
    )
    selection = AttackSelection(
        attack_range=attack_range,
        candidates=[unit.id for unit in candidates],
    )
    if candidates:
        selection.target_id = rng.choice(candidates).id
    return selection


def resolve_enemy_turn(
    state: BattleState,
    rng: random.Random,
    config: ResolverConfig,
    log: ExecutionLog,
) -> ActionOutcome:
    """
    Plays the turn of the active enemy.

    Args:
        state (BattleState): The battle document.
        rng (random.Random): The random source for the target choice.
        config (ResolverConfig): The rule constants.
        log (ExecutionLog): The execution log.

    Returns:
        ActionOutcome: Whether the attacked ally was eliminated.

    Raises:
        InputError: If there is no active unit.

    """
    if not state.active_unit_id:
        raise InputError("The battle has no active unit.")
    attacker = state.require_living_unit(state.active_unit_id, "enemy")

    if attacker.status_effects.has_debuff(STUN_STATUS_NAME):
        log.info(f"{attacker.display_name} is stunned and skips the turn.")
        state.battle_message = f"{attacker.display_name} is stunned!"
        state.last_action_details = LastActionDetails(
            actor_id=attacker.id,
            command_id=STUNNED_COMMAND_ID,
            command_name="Stunned",
            action_outcome=STUNNED_OUTCOME,
        )
        return ActionOutcome()

    selection = select_attack_target(state, attacker, rng, config)
    log.info(
        f"{attacker.display_name} ({attacker.combat_role.value}) looks for allies "
        f"at distance {selection.attack_range}: {selection.candidates}"
    )
    target = state.get_unit(selection.target_id)
    if target is None:
        state.battle_message = f"{attacker.display_name} has no target in range."
        state.last_action_details = LastActionDetails(
            actor_id=attacker.id,
            action_outcome=NO_TARGET_OUTCOME,
        )
        return ActionOutcome()

    result = apply_damage(target, attacker.stats.atk)
    state.battle_message = (
        f"{attacker.display_name} attacked {target.display_name} for {result.dealt} damage!"
    )
    state.last_action_details = LastActionDetails(
        actor_id=attacker.id,
        command_id=BASIC_ATTACK_COMMAND_ID,
        command_name=BASIC_ATTACK_COMMAND_NAME,
        targets=[target.id],
        effects_summary=[f"{target.display_name} (-{result.dealt} HP)"],
    )
    eliminated = register_hit(state, target, result, log)
    return ActionOutcome(was_target_eliminated=eliminated)
