"""
Progression document models.

The progression document is owned by the host; the resolver only reads it
when a battle starts and patches it when a battle ends or an exercise is
logged.
"""

from typing import Any

from pydantic import Field

from core.document import DocumentModel
from core.error_handling import InputError, parse_json_input


class LevelRecord(DocumentModel):
    """A level and the experience accumulated towards the next one."""

    level: int = Field(
        default=1,
        ge=1,
        description="Current level.",
    )
    exp: int = Field(
        default=0,
        description="Experience accumulated towards the next level.",
    )


class HeroRecord(LevelRecord):
    id: str = Field(description="Id of the hero unit.")


class ExerciseRecord(LevelRecord):
    id: str = Field(description="Id of the exercise, e.g. push_up.")
    stats: str | None = Field(
        default=None,
        description="Hero stat the exercise level boosts (ATK or HP).",
    )


class EnemyProgression(DocumentModel):
    """The shared difficulty level applied to every enemy."""

    global_level: int = Field(
        default=1,
        ge=1,
        alias="globalLevel",
        description="Level applied to every enemy at battle start.",
    )
    exp: int = Field(
        default=0,
        description="Experience accumulated towards the next global level.",
    )


class ProgressionData(DocumentModel):
    """The root progression document."""

    heroes: list[HeroRecord] = Field(default_factory=list)
    enemy_progression: EnemyProgression = Field(
        default_factory=EnemyProgression,
        alias="enemyProgression",
    )
    exercise_stats_progression: list[ExerciseRecord] = Field(
        default_factory=list,
        alias="exerciseStatsProgression",
    )

    @classmethod
    def from_document(
        cls, source: str | dict[str, Any], name: str = "progression_data"
    ) -> "ProgressionData":
        """
        Decodes a progression document.

        Args:
            source (str | dict[str, Any]): The JSON string or decoded object.
            name (str): Parameter name used in error messages.

        Returns:
            ProgressionData: The decoded document.

        Raises:
            InputError: If the input is empty, not JSON or not an object.

        """
        data = parse_json_input(source, name)
        if not isinstance(data, dict):
            raise InputError(f"Input '{name}' must be a JSON object.")
        return cls.model_validate(data)

    def get_hero(self, hero_id: str) -> HeroRecord | None:
        for hero in self.heroes:
            if hero.id == hero_id:
                return hero
        return None

    def get_exercise(self, exercise_id: str) -> ExerciseRecord | None:
        for exercise in self.exercise_stats_progression:
            if exercise.id == exercise_id:
                return exercise
        return None
