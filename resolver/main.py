"""
Demonstration script for the turn-based combat resolver.

Loads the sample roster and progression from the ``data`` folder and plays a
whole battle by calling the entry points in the order the host would: the
action of the active unit, its end-of-turn effects, the turn manager, then
the start-of-turn effects of the next unit. Allies use their first
affordable skill, or a basic attack; enemies run the enemy AI.
"""

import logging
import random
from pathlib import Path

from battle.battle_state import BattleState
from battle.unit import Unit
from combat.targeting import get_area_affected_targets, get_valid_primary_targets
from core.error_handling import InvalidActionError
from core.logging import setup_logging
from core.utils import cprint, crule, make_bar
from interface import entry_points
from interface.results import ResolutionResult

# Get the path to the data folder.
data_dir = Path(__file__).with_suffix("").parent / "../data"

# Safety net for documents that never reach a terminal state.
MAX_STEPS = 200


def print_unit(unit: Unit) -> None:
    hp_bar = make_bar(unit.stats.hp, unit.stats.max_hp, color="green")
    line = (
        f"{unit.type.emoji} {unit.type.colorize(unit.display_name):<28} "
        f"{hp_bar} {unit.stats.hp:>3}/{unit.stats.max_hp:<3}"
    )
    if unit.stats.shield_hp:
        line += f" [cyan]+{unit.stats.shield_hp} shield[/]"
    if unit.is_defeated:
        line += " [dim](defeated)[/]"
    cprint(line)


def print_state(state: BattleState) -> None:
    crule(f"Round {state.round}, turn {state.turn_in_round}", style="bold blue", characters="-")
    for unit_id in state.turn_order:
        unit = state.get_unit(unit_id)
        if unit is not None:
            print_unit(unit)
    cprint(f"Team SP: {state.team_sp}/{state.max_team_sp}")
    cprint(f"[bold]{state.battle_message}[/]")


def choose_ally_action(state: BattleState, rng: random.Random, document: dict) -> ResolutionResult:
    """Picks the first skill with a valid target that the team can pay for."""
    actor = state.active_unit
    if actor is None:
        raise InvalidActionError("No active unit to act.")
    for command in actor.commands:
        if command.sp_cost > state.team_sp:
            continue
        if command.is_ultimate and actor.stats.gauge < (command.gauge_cost or actor.stats.max_gauge):
            continue
        primaries = get_valid_primary_targets(actor, command, state)
        if not primaries:
            continue
        primary = rng.choice(primaries)
        affected = get_area_affected_targets(primary, actor, command, state)
        return entry_points.process_skill(document, actor.id, command.command_id, affected, rng=rng)
    enemies = state.living_units(actor.type.opponent())
    return entry_points.process_basic_attack(document, actor.id, rng.choice(enemies).id, rng=rng)


def run_battle(seed: int) -> None:
    rng = random.Random(seed)
    roster = (data_dir / "battle_roster.json").read_text()
    progression = (data_dir / "progression.json").read_text()

    result = entry_points.initiate_battle(roster, progression, rng=rng)
    document = result.battle_state
    state = BattleState.from_document(document)
    print_state(state)

    for _ in range(MAX_STEPS):
        if state.state.is_terminal():
            break
        active = state.active_unit
        if active is None:
            break
        if active.is_ally:
            result = choose_ally_action(state, rng, document)
        else:
            result = entry_points.process_enemy_action(document, rng=rng)
        document = result.battle_state
        cprint(f"  {BattleState.from_document(document).battle_message}")
        if result.actor_acts_again:
            cprint(f"  [yellow]{active.display_name} acts again![/]")

        for step in (
            lambda doc: entry_points.process_effects_end_of_turn(doc),
            lambda doc: entry_points.advance_turn(doc, rng=rng),
            lambda doc: entry_points.process_effects_start_of_turn(doc),
        ):
            result = step(document)
            document = result.battle_state
        state = BattleState.from_document(document)
        if state.turn_in_round == 1:
            print_state(state)

    crule(f"Battle over: {state.state.value}", style="bold green")
    print_state(state)

    result = entry_points.process_battle_results(document, progression)
    summary = BattleState.from_document(result.battle_state).battle_result_summary
    if summary is not None:
        cprint(f"EXP gained: {summary.total_exp_gained} (base {summary.base_exp_gained})")
        for hero in summary.heroes_progression:
            cprint(f"  {hero.id}: level {hero.level_before} -> {hero.level_after}")
        cprint(f"Enemy level: {summary.enemy_level_before} -> {summary.enemy_level_after}")

    result = entry_points.process_exercise_progression(result.progression, "push_ups", "25")
    cprint(f"Exercise push_ups leveled up: {result.did_level_up}")


if __name__ == "__main__":
    setup_logging(logging.WARNING)
    crule("Turn-Based Combat Resolver", style="bold green")
    run_battle(seed=42)
