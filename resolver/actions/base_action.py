"""
Shared pieces of the action pipelines.

Every pipeline mutates the battle document it is given and reports the side
outputs the host needs through an ActionOutcome.
"""

from pydantic import BaseModel, Field

from battle.battle_state import BattleState
from battle.unit import Unit
from combat.combat_math import DamageResult
from combat.turn_order import check_battle_end
from core.logging import ExecutionLog


class ActionOutcome(BaseModel):
    """Side outputs of a resolved action."""

    was_target_eliminated: bool = Field(
        default=False,
        description="True if the action defeated at least one unit.",
    )
    actor_acts_again: bool = Field(
        default=False,
        description="True if the actor keeps the turn.",
    )
    sfx_id: str | None = Field(
        default=None,
        description="Sound effect the host should play.",
    )


def register_hit(
    state: BattleState,
    target: Unit,
    result: DamageResult,
    log: ExecutionLog,
) -> bool:
    """
    Books the consequences of a damage application.

    A defeated enemy is tracked for experience scoring and the battle-end
    check runs.

    Args:
        state (BattleState): The battle document.
        target (Unit): The unit that took the damage.
        result (DamageResult): The outcome of the damage application.
        log (ExecutionLog): The execution log.

    Returns:
        bool: True if the damage defeated the target.

    """
    log.debug(
        f"{target.display_name} takes {result.dealt} damage "
        f"(shield: {result.shield_damage}, hp: {result.hp_damage}, "
        f"remaining HP: {target.stats.hp})"
    )
    if not result.eliminated:
        return False
    log.info(f"{target.display_name} was defeated.")
    if state.record_defeat(target):
        log.info(f"Tracking {target.display_name} (tier: {target.tier}) for progression.")
    check_battle_end(state, log)
    return True
