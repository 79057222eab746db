"""
Basic attack pipeline.
"""

import random

from actions.base_action import ActionOutcome, register_hit
from battle.battle_state import BattleState, LastActionDetails
from combat.combat_math import apply_damage
from core.config import ResolverConfig
from core.constants import BASIC_ATTACK_COMMAND_ID, BASIC_ATTACK_COMMAND_NAME, UnitStatus
from core.logging import ExecutionLog


def resolve_basic_attack(
    state: BattleState,
    actor_id: str,
    target_id: str,
    rng: random.Random,
    config: ResolverConfig,
    log: ExecutionLog,
) -> ActionOutcome:
    """
    Resolves a basic attack.

    The target takes the actor's ATK as damage, shield first. The attacker
    charges its ultimate gauge, the team gains SP rolled from the basic
    attack table, and the attacker ends its turn.

    Args:
        state (BattleState): The battle document.
        actor_id (str): The attacking unit.
        target_id (str): The attacked unit.
        rng (random.Random): The random source for the SP roll.
        config (ResolverConfig): The rule constants.
        log (ExecutionLog): The execution log.

    Returns:
        ActionOutcome: Whether the target was eliminated.

    Raises:
        InputError: If either unit does not exist.
        InvalidActionError: If either unit is already defeated.

    """
    actor = state.require_living_unit(actor_id, "actor")
    target = state.require_living_unit(target_id, "target")
    log.info(f"{actor.display_name} attacks {target.display_name}.")

    result = apply_damage(target, actor.stats.atk)
    eliminated = register_hit(state, target, result, log)

    stats = actor.stats
    stats.gauge = min(stats.gauge + config.basic_attack_gauge_gain, stats.max_gauge)
    log.debug(f"{actor.display_name} gauge: {stats.gauge}/{stats.max_gauge}")

    sp_gained = config.basic_attack_sp_table.roll_int(rng)
    state.gain_team_sp(sp_gained, log)
    if state.max_team_sp is None:
        sp_gained = 0
    log.debug(f"Rolled {sp_gained} SP. Team SP: {state.team_sp}/{state.max_team_sp}")

    if not state.state.is_terminal():
        state.battle_message = (
            f"{actor.display_name} attacked {target.display_name}, "
            f"dealing {result.dealt} damage. (+{sp_gained} SP)"
        )
    state.last_action_details = LastActionDetails(
        actor_id=actor.id,
        command_id=BASIC_ATTACK_COMMAND_ID,
        command_name=BASIC_ATTACK_COMMAND_NAME,
        targets=[target.id],
        effects_summary=[f"{target.display_name} (-{result.dealt} HP)"],
    )
    actor.status = UnitStatus.END_TURN
    return ActionOutcome(was_target_eliminated=eliminated)
