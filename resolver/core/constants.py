"""
Constants and enumerations for the resolver.

Defines the enumerations whose string values are part of the battle document
wire format (unit types, roles, statuses, battle state tags, targeting shapes)
together with the fixed identifiers shared with the presentation layer.
"""

from enum import Enum
from typing import Any

# Command ids and actor ids the presentation layer keys its animations on.
BASIC_ATTACK_COMMAND_ID = "__BASIC_ATTACK__"
BASIC_ATTACK_COMMAND_NAME = "Basic Attack"
STUNNED_COMMAND_ID = "__STUNNED__"
ITEM_HEAL_SHIELD_ACTOR_ID = "SYSTEM_ITEM_HEAL_SHIELD"
ITEM_SP_GAIN_ACTOR_ID = "SYSTEM_ITEM_SP_GAIN"

# Name of the debuff that makes an enemy skip its turn.
STUN_STATUS_NAME = "Stun"


class NiceEnum(Enum):
    """An enumeration that provides a nicer string representation."""

    def __str__(self) -> str:
        return str(self.value)

    @property
    def display_name(self) -> str:
        return str(self.value)


class UnitType(NiceEnum):
    """Defines which side of the battle a unit fights on."""

    ALLY = "Ally"
    ENEMY = "Enemy"

    @property
    def emoji(self) -> str:
        """Returns the emoji associated with this unit type."""
        return {
            UnitType.ALLY: "🤝",
            UnitType.ENEMY: "👹",
        }.get(self, "❔")

    @property
    def color(self) -> str:
        """Returns the color string associated with this unit type."""
        return {
            UnitType.ALLY: "bold green",
            UnitType.ENEMY: "bold red",
        }.get(self, "dim white")

    def colorize(self, message: str) -> str:
        """Applies unit type color formatting to a message."""
        return f"[{self.color}]{message}[/]"

    def opponent(self) -> "UnitType":
        """Returns the unit type fighting on the other side."""
        return UnitType.ENEMY if self == UnitType.ALLY else UnitType.ALLY


class UnitRole(NiceEnum):
    """Defines the attack range class of a unit."""

    MELEE = "Melee"
    RANGED = "Ranged"

    @classmethod
    def _missing_(cls, value: Any) -> "UnitRole | None":
        # Documents written by hand often use lower case roles.
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.lower():
                    return member
        return None


class EnemyTier(NiceEnum):
    """Defines the strength tier of an enemy."""

    MINION = "Minion"
    ELITE = "Elite"
    BOSS = "Boss"


class UnitStatus(NiceEnum):
    """Defines the turn state of a unit."""

    IDLE = "Idle"
    ACTIVE = "Active"
    END_TURN = "EndTurn"
    DEFEATED = "Defeated"


class BattleStateTag(NiceEnum):
    """Defines the overall state of the battle."""

    ONGOING = "Ongoing"
    WIN = "Win"
    LOSE = "Lose"
    ERROR = "Error"

    def is_terminal(self) -> bool:
        """Check if the battle can no longer progress.

        Returns:
            bool: True for Win, Lose and Error.

        """
        return self != BattleStateTag.ONGOING


class CommandType(NiceEnum):
    """Defines the family of a unit command."""

    BASIC_ATTACK = "BasicAttack"
    SKILL = "Skill"


class TriggerPhase(NiceEnum):
    """Defines when a queued status effect is evaluated."""

    START_OF_TURN = "start_of_turn"
    END_OF_TURN = "end_of_turn"


class SelectionShape(NiceEnum):
    """Defines the primary-target selection pattern of a command."""

    ADJACENT = "Adjacent"
    WITHIN_DISTANCE = "WithinDistance"
    SPECIFIC_POSITION = "SpecificPosition"
    SPECIFIC_POSITIONS = "SpecificPositions"
    SELF = "Self"
    ANY_DEFEATED_ALLY = "AnyDefeatedAlly"


class AreaShape(NiceEnum):
    """Defines the area-of-effect pattern of a command."""

    SINGLE_ON_SELECTED = "SingleOnSelected"
    RADIUS_AROUND_ORIGIN = "RadiusAroundOrigin"


class AreaOrigin(NiceEnum):
    """Defines the unit an area-of-effect is centred on."""

    CASTER = "Caster"
    SELECTED_TARGET = "SelectedTarget"


class Direction(NiceEnum):
    """Defines which way ordinal offsets are counted from the actor."""

    FORWARD = "Forward"
    BACKWARD = "Backward"
    BOTH = "Both"


class EffectTarget(NiceEnum):
    """Defines who a skill effect lands on."""

    CASTER = "caster"
    SELECTED = "selected"
    AREA = "area"
    CASTER_ADJACENT_ENEMIES = "caster_adjacent_enemies"


class StatBasis(NiceEnum):
    """Defines the stat a heal or shield amount is scaled against."""

    CASTER_ATK = "caster_atk"
    TARGET_MAX_HP = "target_max_hp"


class ItemKind(NiceEnum):
    """Defines the behaviours the item pipeline knows how to run."""

    HEAL_SHIELD_SELF = "heal_shield_self"
    HEAL_SHIELD_RADIUS = "heal_shield_radius"
    HEAL_SHIELD_PARTY = "heal_shield_party"
    SP_GAIN = "sp_gain"
