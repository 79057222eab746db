"""
Item pipeline.

Items are used by the active unit without ending its turn. Their magnitude
is rolled from the small discrete set of their definition.
"""

import random

from actions.base_action import ActionOutcome
from battle.battle_state import BattleState, EffectLogEntry, LastActionDetails
from battle.unit import Unit
from combat.combat_math import apply_heal, apply_shield, round_half_up
from combat.targeting import units_within_distance
from core.config import ItemDefinition, ResolverConfig
from core.constants import (
    ITEM_HEAL_SHIELD_ACTOR_ID,
    ITEM_SP_GAIN_ACTOR_ID,
    ItemKind,
    UnitType,
)
from core.error_handling import InvalidActionError
from core.logging import ExecutionLog


def _heal_and_shield(unit: Unit, fraction: float, entries: list[EffectLogEntry]) -> None:
    amount = round_half_up(unit.stats.max_hp * fraction)
    healed = apply_heal(unit, amount)
    if healed > 0:
        entries.append(EffectLogEntry(type="heal", unit_id=unit.id, amount=healed))
    shielded = apply_shield(unit, amount)
    entries.append(EffectLogEntry(type="shield", unit_id=unit.id, amount=shielded))


def _item_targets(state: BattleState, item: ItemDefinition, user: Unit | None) -> list[Unit]:
    if item.kind == ItemKind.HEAL_SHIELD_PARTY:
        return state.living_units(UnitType.ALLY)
    if user is None or user.is_defeated:
        return []
    if item.kind == ItemKind.HEAL_SHIELD_SELF:
        return [user]
    return units_within_distance(
        state, user, item.radius, unit_type=UnitType.ALLY, include_origin=True
    )


def use_item(
    state: BattleState,
    item_id: str,
    rng: random.Random,
    config: ResolverConfig,
    log: ExecutionLog,
) -> ActionOutcome:
    """
    Uses a consumable item on behalf of the active unit.

    Args:
        state (BattleState): The battle document.
        item_id (str): Id of the item definition.
        rng (random.Random): The random source for the magnitude roll.
        config (ResolverConfig): The rule constants and item definitions.
        log (ExecutionLog): The execution log.

    Returns:
        ActionOutcome: Items never eliminate anybody.

    Raises:
        InvalidActionError: If the item is unknown.

    """
    item = config.get_item(item_id)
    if item is None:
        raise InvalidActionError(f"Unknown item '{item_id}'.", {"item_id": item_id})
    user = state.active_unit
    user_name = user.display_name if user is not None else "The team"
    entries: list[EffectLogEntry] = []
    log.info(f"{user_name} uses {item.name}.")

    if item.kind == ItemKind.SP_GAIN:
        rolled = item.magnitude.roll_int(rng)
        gained = state.gain_team_sp(rolled, log)
        if gained > 0:
            entries.append(EffectLogEntry(type="sp_gain", amount=gained))
        log.info(f"Rolled {rolled} SP, team gained {gained}. Team SP: {state.team_sp}/{state.max_team_sp}")
        state.battle_message = item.message.format(actor=user_name, amount=gained)
        state.last_action_details = LastActionDetails(
            actor_id=ITEM_SP_GAIN_ACTOR_ID,
            command_name=item.command_name or item.name,
            effects=entries,
        )
        return ActionOutcome()

    targets = _item_targets(state, item, user)
    if not targets:
        log.info(f"{item.name} found nobody to affect.")
        state.battle_message = item.empty_message
        return ActionOutcome()

    shared_fraction = None if item.roll_per_target else item.magnitude.roll(rng)
    for target in targets:
        fraction = shared_fraction if shared_fraction is not None else item.magnitude.roll(rng)
        _heal_and_shield(target, fraction, entries)
        log.debug(f"{target.display_name}: +{fraction:.0%} of max HP as heal and shield.")

    state.battle_message = item.message.format(actor=user_name, amount=0)
    state.last_action_details = LastActionDetails(
        actor_id=ITEM_HEAL_SHIELD_ACTOR_ID,
        command_name=item.command_name or item.name,
        effects=entries,
    )
    return ActionOutcome()
