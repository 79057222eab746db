"""
Configuration module for the resolver.

Holds every tunable constant of the combat rules as declarative data: the
discrete probability tables, item definitions, stat growth per level and the
progression curve constants. Randomness always goes through a caller supplied
``random.Random`` so the tables can be exercised deterministically.
"""

import json
import random
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from core.constants import EnemyTier, ItemKind, UnitRole
from core.error_handling import InputError
from core.utils import cprint


class WeightedEntry(BaseModel):
    """A single outcome of a weighted table and its relative weight."""

    value: float = Field(
        description="The outcome returned when this entry is chosen.",
    )
    weight: float = Field(
        gt=0,
        description="Relative weight of this outcome.",
    )


class WeightedTable(BaseModel):
    """
    A fixed discrete distribution over a small set of outcomes.

    The weights do not need to sum to one; each entry is chosen with
    probability ``weight / total_weight``.
    """

    entries: list[WeightedEntry] = Field(
        min_length=1,
        description="The possible outcomes and their weights.",
    )

    @classmethod
    def uniform(cls, *values: float) -> "WeightedTable":
        """Builds a table where every value is equally likely."""
        return cls(entries=[WeightedEntry(value=v, weight=1) for v in values])

    @property
    def total_weight(self) -> float:
        return sum(entry.weight for entry in self.entries)

    def roll(self, rng: random.Random) -> float:
        """
        Draws one outcome from the table.

        Args:
            rng (random.Random): The random source to draw from.

        Returns:
            float: The chosen outcome.

        """
        threshold = rng.random() * self.total_weight
        cumulative = 0.0
        for entry in self.entries:
            cumulative += entry.weight
            if threshold < cumulative:
                return entry.value
        return self.entries[-1].value

    def roll_int(self, rng: random.Random) -> int:
        """Draws one outcome and returns it as an integer."""
        return int(self.roll(rng))


class ItemDefinition(BaseModel):
    """Declarative definition of a consumable item."""

    item_id: str = Field(
        description="Identifier the host uses to request the item.",
    )
    name: str = Field(
        description="Display name, also used as the command name of the action.",
    )
    kind: ItemKind = Field(
        description="The behaviour the item pipeline runs for this item.",
    )
    magnitude: WeightedTable = Field(
        description=(
            "Fraction of max HP healed and shielded, or SP granted, chosen "
            "from a small discrete set."
        ),
    )
    radius: int = Field(
        default=0,
        ge=0,
        description="Circular distance from the caster for radius items.",
    )
    roll_per_target: bool = Field(
        default=False,
        description="Roll the magnitude once per target instead of once per use.",
    )
    message: str = Field(
        description="Battle message on success; may use {actor} and {amount}.",
    )
    empty_message: str = Field(
        description="Battle message when the item finds nobody to affect.",
    )
    command_name: str | None = Field(
        default=None,
        description="Command name shown by the presentation layer, defaults to name.",
    )


class StatGrowth(BaseModel):
    """Stats gained per level above 1."""

    hp: float = Field(
        default=0,
        description="Max HP gained per level.",
    )
    atk: float = Field(
        default=0,
        description="ATK gained per level.",
    )


def _default_sp_table() -> WeightedTable:
    return WeightedTable(
        entries=[
            WeightedEntry(value=1, weight=0.3818),
            WeightedEntry(value=2, weight=0.2728),
            WeightedEntry(value=3, weight=0.1636),
            WeightedEntry(value=4, weight=0.1272),
            WeightedEntry(value=5, weight=0.0546),
        ]
    )


def _default_items() -> list[ItemDefinition]:
    return [
        ItemDefinition(
            item_id="soothing_berry",
            name="Soothing Berry",
            kind=ItemKind.HEAL_SHIELD_SELF,
            magnitude=WeightedTable.uniform(0.10, 0.20),
            message="{actor} used a Soothing Berry and feels a calming energy!",
            empty_message="The Soothing Berry was used, but had no effect...",
        ),
        ItemDefinition(
            item_id="restorative_broth",
            name="Restorative Broth",
            kind=ItemKind.HEAL_SHIELD_RADIUS,
            magnitude=WeightedTable.uniform(0.30, 0.50),
            radius=2,
            roll_per_target=True,
            message="{actor} used a Restorative Broth, revitalizing nearby allies!",
            empty_message=(
                "The Restorative Broth was used, but no one was nearby to "
                "receive its effects..."
            ),
        ),
        ItemDefinition(
            item_id="willpower_candy",
            name="Willpower Candy",
            kind=ItemKind.SP_GAIN,
            magnitude=WeightedTable.uniform(1, 2),
            message="{actor} used a Willpower Candy. The team gained {amount} SP!",
            empty_message="The Willpower Candy was used, but had no effect...",
        ),
        ItemDefinition(
            item_id="world_tree_fruit",
            name="World Tree Fruit",
            kind=ItemKind.HEAL_SHIELD_PARTY,
            magnitude=WeightedTable.uniform(0.60, 0.90),
            command_name="Mass Fortification",
            message=(
                "A wave of protective energy washes over the party, restoring "
                "health and creating a barrier!"
            ),
            empty_message=(
                "A powerful energy was released, but no one was there to "
                "receive it..."
            ),
        ),
    ]


class RewardDefinition(BaseModel):
    """An item handed out with a victory."""

    name: str = Field(description="Display name of the reward.")
    image_filename: str = Field(
        alias="imageFilename",
        description="Image shown by the presentation layer.",
    )
    quantity: int = Field(default=1, ge=1, description="Number of copies granted.")

    model_config = ConfigDict(populate_by_name=True)


class ResolverConfig(BaseModel):
    """Every tunable rule constant of the resolver."""

    # --- Basic attack ---
    basic_attack_sp_table: WeightedTable = Field(
        default_factory=_default_sp_table,
        description="Team SP granted by a basic attack.",
    )
    basic_attack_gauge_gain: int = Field(
        default=15,
        ge=0,
        description="Ultimate gauge gained by the attacker on a basic attack.",
    )

    # --- Skills ---
    default_revive_hp_fraction: float = Field(
        default=0.5,
        gt=0,
        le=1,
        description="Fraction of max HP restored by a revive without hpPercentage.",
    )
    revive_insert_index: int = Field(
        default=1,
        ge=0,
        description="Turn order index a revived unit is inserted at.",
    )
    default_status_duration: int = Field(
        default=1,
        ge=1,
        description="Duration of a status effect that does not declare one.",
    )

    # --- Status effect ticks ---
    default_tick_damage: dict[str, int] = Field(
        default_factory=lambda: {"poison": 5, "damage_over_time": 0},
        description="Tick damage per effect type when the effect has no damage field.",
    )

    # --- Enemy AI ---
    attack_range: dict[UnitRole, int] = Field(
        default_factory=lambda: {UnitRole.MELEE: 1, UnitRole.RANGED: 2},
        description="Exact circular distance an enemy of each role attacks at.",
    )

    # --- Items ---
    items: list[ItemDefinition] = Field(
        default_factory=_default_items,
        description="Consumable item definitions.",
    )

    # --- Battle initialization ---
    hero_growth: StatGrowth = Field(
        default_factory=lambda: StatGrowth(hp=4, atk=1),
        description="Stat growth of a hero per level above 1.",
    )
    exercise_hero_marker: str = Field(
        default="kyuris",
        description="Id fragment of the hero whose stats come from exercise progression.",
    )
    exercise_hero_growth: StatGrowth = Field(
        default_factory=lambda: StatGrowth(hp=1, atk=0.25),
        description="Stat growth of the exercise hero per level above 1.",
    )
    enemy_growth: dict[str, StatGrowth] = Field(
        default_factory=lambda: {
            EnemyTier.MINION.value: StatGrowth(hp=2, atk=1),
            EnemyTier.ELITE.value: StatGrowth(hp=4, atk=2),
            EnemyTier.BOSS.value: StatGrowth(hp=6, atk=3),
        },
        description="Stat growth of an enemy per level above 1, by tier.",
    )

    # --- Progression ---
    hero_exp_base: int = Field(
        default=100,
        gt=0,
        description="Hero level cost is hero_exp_base * L * (L + 1) / 2.",
    )
    exercise_exp_base: int = Field(
        default=10,
        gt=0,
        description="Exercise level cost is exercise_exp_base * L * (L + 1) / 2.",
    )
    enemy_exp_step: int = Field(
        default=25,
        gt=0,
        description="Enemy global level cost is enemy_exp_step * L.",
    )
    enemy_exp_on_win: int = Field(
        default=25,
        description="Enemy progression exp change when the heroes win.",
    )
    enemy_exp_on_loss: int = Field(
        default=-50,
        description="Enemy progression exp change when the heroes do not win.",
    )
    enemy_exp_scale: float = Field(
        default=1.25,
        gt=0,
        description="Per-enemy exp is round(globalLevel * enemy_exp_scale * expValue).",
    )
    win_bonus_multiplier: float = Field(
        default=1.25,
        gt=0,
        description="Multiplier applied to the base exp on a win.",
    )
    victory_rewards: list[RewardDefinition] = Field(
        default_factory=lambda: [
            RewardDefinition(name="Mint Candy", image_filename="items/candy.png")
        ],
        description="Rewards granted on a win.",
    )

    def get_item(self, item_id: str) -> ItemDefinition | None:
        """Get an item definition by id, or None if not found."""
        for item in self.items:
            if item.item_id == item_id:
                return item
        return None


DEFAULT_CONFIG = ResolverConfig()


def load_config(filepath: Path) -> ResolverConfig:
    """
    Loads a configuration override file.

    Fields missing from the file keep their default values.

    Args:
        filepath (Path): Path of the JSON file.

    Returns:
        ResolverConfig: The loaded configuration.

    Raises:
        InputError: If the file is missing, not a JSON object or invalid.

    """
    try:
        if not filepath.is_file():
            raise FileNotFoundError(f"File not found: {filepath}")
        with open(filepath, encoding="utf-8") as f:
            data: Any = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Expected object in {filepath}, got {type(data).__name__}")
        cprint(f"  Loading resolver configuration from {filepath}...", style="bold green")
        return ResolverConfig.model_validate(data)
    except (json.JSONDecodeError, FileNotFoundError, ValueError) as e:
        raise InputError(f"File {filepath} raised an error: {e}") from e
