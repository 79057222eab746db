"""
Exercise progression: experience logged outside of battle.
"""

from typing import Any

from battle.progression_data import ProgressionData
from core.config import ResolverConfig
from core.error_handling import InputError
from core.logging import ExecutionLog
from progression.leveling import exercise_exp_for_level, level_up


def parse_amount(amount: Any) -> int:
    """
    Reads an experience amount given as a number or a numeric string.

    Args:
        amount (Any): The raw amount.

    Returns:
        int: The amount.

    Raises:
        InputError: If the amount is not an integer.

    """
    if isinstance(amount, bool):
        raise InputError(f"Input 'amount' ({amount}) is not a valid number.")
    if isinstance(amount, int):
        return amount
    if isinstance(amount, float) and amount.is_integer():
        return int(amount)
    try:
        return int(str(amount).strip())
    except ValueError as e:
        raise InputError(f"Input 'amount' ({amount}) is not a valid number.") from e


def add_exercise_exp(
    progression: ProgressionData,
    exercise_id: str,
    amount: int,
    config: ResolverConfig,
    log: ExecutionLog,
) -> bool:
    """
    Adds experience to an exercise and levels it up.

    Args:
        progression (ProgressionData): The progression, updated in place.
        exercise_id (str): The exercise.
        amount (int): The experience to add.
        config (ResolverConfig): The curve constants.
        log (ExecutionLog): The execution log.

    Returns:
        bool: True if the exercise gained at least one level.

    Raises:
        InputError: If the exercise does not exist.

    """
    exercise = progression.get_exercise(exercise_id)
    if exercise is None:
        raise InputError(
            f"Exercise with ID '{exercise_id}' not found in progression data.",
            {"exercise_id": exercise_id},
        )
    log.info(f"{exercise_id}: level {exercise.level}, exp {exercise.exp}. Adding {amount} EXP.")
    exercise.exp += amount
    gained = level_up(exercise, lambda level: exercise_exp_for_level(level, config))
    if gained:
        log.info(f"LEVEL UP! {exercise_id} advanced to level {exercise.level}. Remaining EXP: {exercise.exp}.")
    return gained > 0
