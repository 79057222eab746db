"""
Status effect scheduler.

Queued effects in the battle's ``active_effects`` tick on the unit they
target at their trigger phase: end-of-turn effects on the unit that just
acted, start-of-turn effects on the unit whose turn just began. Upkeep at
the end of a unit's turn counts down its buffs and debuffs.
"""

from battle.battle_state import BattleState, EffectLogEntry, LastActionDetails
from battle.unit import Unit
from combat.combat_math import apply_direct_damage, apply_heal
from combat.turn_order import check_battle_end
from core.config import ResolverConfig
from core.constants import TriggerPhase
from core.logging import ExecutionLog
from effects.status_effect import StatusEffectInstance

DAMAGE_TICK_TYPES = ("poison", "damage_over_time")
HEAL_TICK_TYPES = ("regeneration",)


def _effect_label(effect: StatusEffectInstance) -> str:
    return effect.name or effect.source_skill_name or effect.type.replace("_", " ").title()


def _tick_effect(
    state: BattleState,
    unit: Unit,
    effect: StatusEffectInstance,
    config: ResolverConfig,
    log: ExecutionLog,
) -> EffectLogEntry | None:
    """
    Applies one queued effect to its target.

    Args:
        state (BattleState): The battle document.
        unit (Unit): The unit the effect ticks on.
        effect (StatusEffectInstance): The effect.
        config (ResolverConfig): The rule constants.
        log (ExecutionLog): The execution log.

    Returns:
        EffectLogEntry | None: The pop-up to show, or None if the effect did nothing.

    """
    effect_type = effect.type.lower()
    label = _effect_label(effect)

    if effect_type in DAMAGE_TICK_TYPES:
        damage = effect.damage
        if damage is None:
            damage = config.default_tick_damage.get(effect_type, 0)
        hp_before = unit.stats.hp
        result = apply_direct_damage(unit, damage)
        state.battle_message = f"{unit.display_name} took {result.total_damage} damage from {label}!"
        log.info(f"{unit.display_name} takes {result.total_damage} damage from {label}. HP: {hp_before} -> {unit.stats.hp}")
        if result.eliminated:
            log.info(f"{unit.display_name} was defeated by {label}!")
            state.record_defeat(unit)
        return EffectLogEntry(type="damage", unit_id=unit.id, amount=result.total_damage)

    if effect_type in HEAL_TICK_TYPES:
        healed = apply_heal(unit, effect.heal or 0)
        state.battle_message = f"{unit.display_name} recovered {healed} HP from {label}!"
        log.info(f"{unit.display_name} recovers {healed} HP from {label}.")
        return EffectLogEntry(type="heal", unit_id=unit.id, amount=healed)

    log.warning(
        f"Unknown effect type '{effect.type}', ignoring it.",
        {"effect_id": effect.effect_id, "target_id": unit.id},
    )
    return None


def process_phase_effects(
    state: BattleState,
    phase: TriggerPhase,
    config: ResolverConfig,
    log: ExecutionLog,
) -> bool:
    """
    Ticks every queued effect of a phase on the active unit.

    At the end of a turn the active unit is the one that just acted; at the
    start of a turn it is the one that was just given the turn. Effects
    marked ``one_shot`` leave the queue once they fire.

    Args:
        state (BattleState): The battle document.
        phase (TriggerPhase): The phase being processed.
        config (ResolverConfig): The rule constants.
        log (ExecutionLog): The execution log.

    Returns:
        bool: True if a tick defeated the unit.

    """
    unit = state.active_unit
    if unit is None or not state.active_effects:
        log.debug(f"No {phase.value} effects to process.")
        return False

    due = [
        effect
        for effect in state.active_effects
        if effect.phase == phase and effect.target_id == unit.id
    ]
    if not due:
        log.debug(f"No {phase.value} effects for {unit.display_name}.")
        return False

    log.info(f"Processing {len(due)} {phase.value} effect(s) for {unit.display_name}.")
    entries: list[EffectLogEntry] = []
    fired: list[StatusEffectInstance] = []
    was_alive = unit.is_alive
    for effect in due:
        if unit.is_defeated:
            log.debug(f"{unit.display_name} is defeated, skipping '{effect.type}'.")
            continue
        entry = _tick_effect(state, unit, effect, config, log)
        if entry is not None:
            entries.append(entry)
            fired.append(effect)

    spent = [effect for effect in fired if effect.one_shot]
    if spent:
        state.active_effects = [e for e in state.active_effects if not any(e is s for s in spent)]

    if entries:
        state.last_action_details = LastActionDetails(actor_id=unit.id, effects=entries)

    eliminated = was_alive and unit.is_defeated
    if eliminated:
        check_battle_end(state, log)
    return eliminated


def run_end_of_turn_upkeep(state: BattleState, unit: Unit, log: ExecutionLog) -> None:
    """
    Counts down the buffs and debuffs of the unit that just acted.

    Expired records are dropped, and so are the queued effects of the same
    name targeting the unit.

    Args:
        state (BattleState): The battle document.
        unit (Unit): The unit whose turn just ended.
        log (ExecutionLog): The execution log.

    """
    expired = unit.status_effects.tick()
    if not expired:
        return
    names = {record.name for record in expired}
    log.info(f"Expired on {unit.display_name}: {', '.join(sorted(names))}.")
    state.active_effects = [
        effect
        for effect in state.active_effects
        if not (effect.target_id == unit.id and effect.name in names)
    ]
