"""
Post-battle summary shown on the results screen.
"""

from pydantic import Field

from core.config import RewardDefinition
from core.document import DocumentModel


class DefeatedEnemyExp(DocumentModel):
    id: str
    name: str
    exp_gained: int = Field(alias="expGained")


class HeroProgressionSummary(DocumentModel):
    """A hero's level and experience before and after the battle."""

    id: str
    level_before: int = Field(alias="levelBefore")
    exp_before: int = Field(alias="expBefore")
    exp_to_level_up_before: int = Field(alias="expToLevelUpBefore")
    level_after: int | None = Field(default=None, alias="levelAfter")
    exp_after: int | None = Field(default=None, alias="expAfter")
    exp_to_level_up_after: int | None = Field(default=None, alias="expToLevelUpAfter")


class BattleResultSummary(DocumentModel):
    """Experience, rewards and level changes produced by a battle."""

    total_exp_gained: int = Field(
        default=0,
        alias="totalExpGained",
        description="Experience granted to every hero, bonus included.",
    )
    base_exp_gained: int = Field(
        default=0,
        alias="baseExpGained",
        description="Experience from defeated enemies before the win bonus.",
    )
    win_bonus_multiplier: float = Field(
        default=1.0,
        alias="winBonusMultiplier",
    )
    defeated_enemies_with_exp: list[DefeatedEnemyExp] = Field(
        default_factory=list,
        alias="defeatedEnemiesWithExp",
    )
    rewards: list[RewardDefinition] = Field(default_factory=list)
    heroes_progression: list[HeroProgressionSummary] = Field(
        default_factory=list,
        alias="heroesProgression",
    )
    enemy_leveled_up: bool = Field(default=False, alias="enemyLeveledUp")
    enemy_level_before: int = Field(default=0, alias="enemyLevelBefore")
    enemy_level_after: int = Field(default=0, alias="enemyLevelAfter")
