"""
Experience curves and leveling loops.

Heroes and exercises use a triangular curve, ``base * L * (L + 1) / 2`` to
leave level L. The shared enemy level uses a linear step both ways. Every
loop subtracts the cost of the level it leaves, so one grant can cross
several levels and always stops below the next threshold.
"""

from typing import Callable

from battle.progression_data import EnemyProgression, LevelRecord
from core.config import ResolverConfig


def triangular_cost(base: int, level: int) -> int:
    """Experience needed to leave a level on a triangular curve."""
    return base * level * (level + 1) // 2


def hero_exp_for_level(level: int, config: ResolverConfig) -> int:
    return triangular_cost(config.hero_exp_base, level)


def exercise_exp_for_level(level: int, config: ResolverConfig) -> int:
    return triangular_cost(config.exercise_exp_base, level)


def enemy_exp_for_level_up(level: int, config: ResolverConfig) -> int:
    return config.enemy_exp_step * level


def enemy_exp_for_level_down(level: int, config: ResolverConfig) -> int:
    return config.enemy_exp_step * (level - 1)


def level_up(record: LevelRecord, cost: Callable[[int], int]) -> int:
    """
    Converts accumulated experience into levels.

    Args:
        record (LevelRecord):
            The hero or exercise record, updated in place.
        cost (Callable[[int], int]):
            Experience needed to leave a given level; must be positive.

    Returns:
        int:
            The number of levels gained.

    """
    gained = 0
    while record.exp >= cost(record.level):
        record.exp -= cost(record.level)
        record.level += 1
        gained += 1
    return gained


def apply_enemy_exp_change(
    enemy: EnemyProgression, change: int, config: ResolverConfig
) -> int:
    """
    Moves the shared enemy level after a battle.

    Negative experience first costs levels (never below 1, experience is
    then clamped at 0); enough positive experience gains levels.

    Args:
        enemy (EnemyProgression): The enemy progression, updated in place.
        change (int): The experience gained or lost.
        config (ResolverConfig): The curve constants.

    Returns:
        int: The level change, negative when levels were lost.

    """
    before = enemy.global_level
    enemy.exp += change
    while enemy.exp < 0 and enemy.global_level > 1:
        enemy.exp += enemy_exp_for_level_down(enemy.global_level, config)
        enemy.global_level -= 1
    enemy.exp = max(0, enemy.exp)
    while enemy.exp >= enemy_exp_for_level_up(enemy.global_level, config):
        enemy.exp -= enemy_exp_for_level_up(enemy.global_level, config)
        enemy.global_level += 1
    return enemy.global_level - before
