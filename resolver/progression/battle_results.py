"""
Battle results.

Turns the enemies defeated during a battle into experience for every hero,
moves the shared enemy level and builds the summary for the results screen.
"""

from battle.battle_state import BattleState
from battle.progression_data import ProgressionData
from battle.results_summary import (
    BattleResultSummary,
    DefeatedEnemyExp,
    HeroProgressionSummary,
)
from combat.combat_math import round_half_up
from core.config import ResolverConfig
from core.constants import BattleStateTag
from core.logging import ExecutionLog
from progression.leveling import apply_enemy_exp_change, hero_exp_for_level, level_up


def finalize_battle_results(
    state: BattleState,
    progression: ProgressionData,
    config: ResolverConfig,
    log: ExecutionLog,
) -> BattleResultSummary:
    """
    Applies the outcome of a finished battle to the progression document.

    The summary is stored on the battle document and the defeated-enemies
    accumulator is removed from it.

    Args:
        state (BattleState): The finished battle, updated in place.
        progression (ProgressionData): The progression, updated in place.
        config (ResolverConfig): The curve constants and rewards.
        log (ExecutionLog): The execution log.

    Returns:
        BattleResultSummary: The summary.

    """
    is_win = state.state == BattleStateTag.WIN
    bonus = config.win_bonus_multiplier if is_win else 1.0
    enemy_level = progression.enemy_progression.global_level
    summary = BattleResultSummary(win_bonus_multiplier=bonus)

    base_exp = 0
    for record in state.defeated_enemies or []:
        exp = round_half_up(enemy_level * config.enemy_exp_scale * record.exp_value)
        base_exp += exp
        unit = state.get_unit(record.id)
        name = unit.name if unit is not None and unit.name else f"Enemy ({record.tier or 'N/A'})"
        summary.defeated_enemies_with_exp.append(
            DefeatedEnemyExp(id=record.id, name=name, exp_gained=exp)
        )
    summary.base_exp_gained = base_exp
    summary.total_exp_gained = round_half_up(base_exp * bonus)
    log.info(f"Base EXP {base_exp} x {bonus} = {summary.total_exp_gained}")

    if is_win:
        summary.rewards = [reward.model_copy() for reward in config.victory_rewards]

    for hero in progression.heroes:
        entry = HeroProgressionSummary(
            id=hero.id,
            level_before=hero.level,
            exp_before=hero.exp,
            exp_to_level_up_before=hero_exp_for_level(hero.level, config),
        )
        hero.exp += summary.total_exp_gained
        gained = level_up(hero, lambda level: hero_exp_for_level(level, config))
        if gained:
            log.info(f"{hero.id} reached level {hero.level}.")
        entry.level_after = hero.level
        entry.exp_after = hero.exp
        entry.exp_to_level_up_after = hero_exp_for_level(hero.level, config)
        summary.heroes_progression.append(entry)

    enemy = progression.enemy_progression
    summary.enemy_level_before = enemy.global_level
    change = config.enemy_exp_on_win if is_win else config.enemy_exp_on_loss
    apply_enemy_exp_change(enemy, change, config)
    summary.enemy_level_after = enemy.global_level
    summary.enemy_leveled_up = summary.enemy_level_after > summary.enemy_level_before
    log.info(f"Enemy level {summary.enemy_level_before} -> {summary.enemy_level_after} (exp {enemy.exp}).")

    state.battle_result_summary = summary
    state.defeated_enemies = None
    return summary
