"""
Per-call entry points of the resolver.

Every function takes the serialized documents the host holds, resolves one
step of the battle on its own copy and returns a ResolutionResult. None of
them raises: failures come back as an Error-tagged document together with
the execution log. A battle that is already over is handed back untouched.
"""

import random
from typing import Any

from actions.base_action import ActionOutcome
from actions.basic_attack import resolve_basic_attack
from actions.item_action import use_item
from actions.skill_action import resolve_skill
from battle.battle_state import BattleState
from battle.progression_data import ProgressionData
from combat import turn_manager
from combat.npc_ai import resolve_enemy_turn
from core.config import DEFAULT_CONFIG, ResolverConfig
from core.constants import TriggerPhase
from core.error_handling import (
    InputError,
    parse_json_input,
    require_non_empty_string,
    resolution_boundary,
)
from core.logging import ExecutionLog
from effects.effect_scheduler import process_phase_effects
from interface.results import ResolutionResult
from progression.battle_init import prepare_battle
from progression.battle_results import finalize_battle_results
from progression.exercise import add_exercise_exp, parse_amount


def _parse_affected_ids(value: Any) -> list[str]:
    """
    Reads the ids the player's targeting affected.

    Args:
        value (Any): A JSON array string, a list of ids, or nothing.

    Returns:
        list[str]: The ids, empty when nothing was selected.

    Raises:
        InputError: If the value is not an array of ids.

    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return []
    ids = parse_json_input(value, "affected_target_ids")
    if not isinstance(ids, list) or not all(isinstance(i, str) for i in ids):
        raise InputError("Input 'affected_target_ids' must be an array of unit ids.")
    return ids


def _drop_units_without_id(raw: dict[str, Any], log: ExecutionLog) -> dict[str, Any]:
    units = raw.get("units")
    if not isinstance(units, list):
        return raw
    kept = []
    for index, unit in enumerate(units):
        if isinstance(unit, dict) and unit.get("id"):
            kept.append(unit)
        else:
            log.warning("Skipping a unit without an id.", {"index": index})
    return {**raw, "units": kept}


def _battle_has_ended(state: BattleState, log: ExecutionLog) -> bool:
    # Win, Lose and Error documents are handed back untouched.
    if not state.state.is_terminal():
        return False
    log.info(f"The battle is already over ({state.state.value}), nothing to resolve.")
    return True


def initiate_battle(
    battle_state: Any,
    progression_data: Any,
    rng: random.Random | None = None,
    config: ResolverConfig = DEFAULT_CONFIG,
) -> ResolutionResult:
    """
    Prepares a roster for its first turn.

    Args:
        battle_state (Any): The roster document (JSON string or dict).
        progression_data (Any): The progression document (JSON string or dict).
        rng (random.Random | None): The random source for the turn order shuffle.
        config (ResolverConfig): The rule constants.

    Returns:
        ResolutionResult: The battle ready for its first turn.

    """
    rng = rng or random.Random()
    log = ExecutionLog("INIT_BATTLE")
    raw = None
    with resolution_boundary() as boundary:
        raw = parse_json_input(battle_state, "battle_state")
        if not isinstance(raw, dict):
            raise InputError("Input 'battle_state' must be a JSON object.")
        state = BattleState.from_document(_drop_units_without_id(raw, log))
        progression = ProgressionData.from_document(progression_data)
        state.clear_last_action()
        prepare_battle(state, progression, rng, config, log)
        return ResolutionResult.success(state, log)
    return ResolutionResult.failure(raw, "Init", boundary.error, log)


def process_basic_attack(
    battle_state: Any,
    actor_id: Any,
    target_id: Any,
    rng: random.Random | None = None,
    config: ResolverConfig = DEFAULT_CONFIG,
) -> ResolutionResult:
    """
    Resolves a basic attack of ``actor_id`` against ``target_id``.

    Returns:
        ResolutionResult: The battle after the attack and the elimination flag.

    """
    rng = rng or random.Random()
    log = ExecutionLog("BASIC_ATTACK")
    raw = None
    with resolution_boundary() as boundary:
        raw = parse_json_input(battle_state, "battle_state")
        state = BattleState.from_document(raw)
        if _battle_has_ended(state, log):
            return ResolutionResult.success(state, log)
        state.clear_last_action()
        outcome = resolve_basic_attack(
            state,
            require_non_empty_string(actor_id, "actor_id"),
            require_non_empty_string(target_id, "target_id"),
            rng,
            config,
            log,
        )
        return ResolutionResult.success(state, log, outcome)
    return ResolutionResult.failure(raw, "Attack", boundary.error, log)


def process_skill(
    battle_state: Any,
    actor_id: Any,
    command_id: Any,
    affected_target_ids: Any,
    rng: random.Random | None = None,
    config: ResolverConfig = DEFAULT_CONFIG,
) -> ResolutionResult:
    """
    Resolves a skill.

    Args:
        battle_state (Any): The battle document.
        actor_id (Any): The unit using the skill.
        command_id (Any): The skill's command id.
        affected_target_ids (Any): The ids the player's targeting affected,
            as a JSON array string or a list.
        rng (random.Random | None): The random source for chance rolls.
        config (ResolverConfig): The rule constants.

    Returns:
        ResolutionResult: The battle after the skill, with the elimination
        flag, the sound effect and the act-again flag.

    """
    rng = rng or random.Random()
    log = ExecutionLog("SKILL_PROC")
    raw = None
    with resolution_boundary() as boundary:
        raw = parse_json_input(battle_state, "battle_state")
        state = BattleState.from_document(raw)
        if _battle_has_ended(state, log):
            return ResolutionResult.success(state, log)
        state.clear_last_action()
        outcome = resolve_skill(
            state,
            require_non_empty_string(actor_id, "actor_id"),
            require_non_empty_string(command_id, "command_id"),
            _parse_affected_ids(affected_target_ids),
            rng,
            config,
            log,
        )
        return ResolutionResult.success(state, log, outcome)
    return ResolutionResult.failure(raw, "Skill", boundary.error, log)


def consume_item(
    battle_state: Any,
    item_id: Any,
    rng: random.Random | None = None,
    config: ResolverConfig = DEFAULT_CONFIG,
) -> ResolutionResult:
    """
    Uses an item on behalf of the active unit.

    Returns:
        ResolutionResult: The battle after the item.

    """
    rng = rng or random.Random()
    log = ExecutionLog("ITEM")
    raw = None
    with resolution_boundary() as boundary:
        raw = parse_json_input(battle_state, "battle_state")
        state = BattleState.from_document(raw)
        if _battle_has_ended(state, log):
            return ResolutionResult.success(state, log)
        state.clear_last_action()
        outcome = use_item(state, require_non_empty_string(item_id, "item_id"), rng, config, log)
        return ResolutionResult.success(state, log, outcome)
    return ResolutionResult.failure(raw, "Item", boundary.error, log)


def process_enemy_action(
    battle_state: Any,
    rng: random.Random | None = None,
    config: ResolverConfig = DEFAULT_CONFIG,
) -> ResolutionResult:
    """
    Plays the turn of the active enemy.

    Returns:
        ResolutionResult: The battle after the enemy's turn.

    """
    rng = rng or random.Random()
    log = ExecutionLog("ENEMY_ACTION")
    raw = None
    with resolution_boundary() as boundary:
        raw = parse_json_input(battle_state, "battle_state")
        state = BattleState.from_document(raw)
        if _battle_has_ended(state, log):
            return ResolutionResult.success(state, log)
        state.clear_last_action()
        outcome = resolve_enemy_turn(state, rng, config, log)
        return ResolutionResult.success(state, log, outcome)
    return ResolutionResult.failure(raw, "Enemy Action", boundary.error, log)


def _process_effects(
    battle_state: Any,
    phase: TriggerPhase,
    prefix: str,
    config: ResolverConfig,
) -> ResolutionResult:
    log = ExecutionLog(prefix)
    raw = None
    with resolution_boundary() as boundary:
        raw = parse_json_input(battle_state, "battle_state")
        state = BattleState.from_document(raw)
        if _battle_has_ended(state, log):
            return ResolutionResult.success(state, log)
        state.clear_last_action()
        eliminated = process_phase_effects(state, phase, config, log)
        return ResolutionResult.success(
            state, log, ActionOutcome(was_target_eliminated=eliminated)
        )
    return ResolutionResult.failure(raw, "Effects", boundary.error, log)


def process_effects_start_of_turn(
    battle_state: Any,
    config: ResolverConfig = DEFAULT_CONFIG,
) -> ResolutionResult:
    """Ticks the start-of-turn effects of the unit that was just given the turn."""
    return _process_effects(battle_state, TriggerPhase.START_OF_TURN, "EFFECTS_START", config)


def process_effects_end_of_turn(
    battle_state: Any,
    config: ResolverConfig = DEFAULT_CONFIG,
) -> ResolutionResult:
    """Ticks the end-of-turn effects of the unit that just acted."""
    return _process_effects(battle_state, TriggerPhase.END_OF_TURN, "EFFECTS_END", config)


def advance_turn(
    battle_state: Any,
    rng: random.Random | None = None,
) -> ResolutionResult:
    """
    Hands the turn to the next unit, starting a new round when needed.

    Returns:
        ResolutionResult: The battle with its next active unit.

    """
    rng = rng or random.Random()
    log = ExecutionLog("TURN_MANAGER")
    raw = None
    with resolution_boundary() as boundary:
        raw = parse_json_input(battle_state, "battle_state")
        state = BattleState.from_document(raw)
        if _battle_has_ended(state, log):
            return ResolutionResult.success(state, log)
        turn_manager.advance_turn(state, rng, log)
        return ResolutionResult.success(state, log)
    return ResolutionResult.failure(raw, "Turn Manager", boundary.error, log)


def process_battle_results(
    battle_state: Any,
    progression_data: Any = None,
    config: ResolverConfig = DEFAULT_CONFIG,
) -> ResolutionResult:
    """
    Applies the outcome of a finished battle to the progression.

    Args:
        battle_state (Any): The finished battle.
        progression_data (Any): The progression document; the battle's own
            snapshot is used when it is not given.
        config (ResolverConfig): The curve constants and rewards.

    Returns:
        ResolutionResult: The battle carrying its result summary, and the
        updated progression document.

    """
    log = ExecutionLog("BATTLE_RESULTS")
    raw = None
    raw_progression = None
    with resolution_boundary() as boundary:
        raw = parse_json_input(battle_state, "battle_state")
        state = BattleState.from_document(raw)
        if progression_data is None:
            if state.progression_snapshot is None:
                raise InputError("Input 'progression_data' is empty.")
            progression = state.progression_snapshot.model_copy(deep=True)
        else:
            raw_progression = parse_json_input(progression_data, "progression_data")
            progression = ProgressionData.from_document(raw_progression)
        state.clear_last_action()
        finalize_battle_results(state, progression, config, log)
        return ResolutionResult.success(state, log, progression=progression)
    return ResolutionResult.failure(raw, "Battle Results", boundary.error, log, raw_progression)


def process_exercise_progression(
    progression_data: Any,
    exercise_id: Any,
    amount: Any,
    config: ResolverConfig = DEFAULT_CONFIG,
) -> ResolutionResult:
    """
    Adds experience to an exercise.

    On failure the progression document comes back unchanged with ``error``
    set.

    Args:
        progression_data (Any): The progression document.
        exercise_id (Any): The exercise.
        amount (Any): The experience, as a number or a numeric string.
        config (ResolverConfig): The curve constants.

    Returns:
        ResolutionResult: The updated progression and the level-up flag.

    """
    log = ExecutionLog("EXERCISE")
    raw_progression = None
    with resolution_boundary() as boundary:
        raw_progression = parse_json_input(progression_data, "progression_data")
        progression = ProgressionData.from_document(raw_progression)
        leveled = add_exercise_exp(
            progression,
            require_non_empty_string(exercise_id, "exercise_id"),
            parse_amount(amount),
            config,
            log,
        )
        return ResolutionResult.success(None, log, progression=progression, did_level_up=leveled)
    return ResolutionResult.failure(
        None, "Exercise", boundary.error, log, raw_progression, with_battle_state=False
    )
