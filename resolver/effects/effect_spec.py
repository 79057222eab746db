"""
Skill effect variants.

A command's ``effects`` list is a closed tagged union keyed by the ``type``
field. Every variant knows how it is targeted; the skill pipeline dispatches
on the variant class.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import Discriminator, Field, Tag

from core.constants import EffectTarget, StatBasis
from core.document import DocumentModel


class SkillEffect(DocumentModel):
    """
    Base class for all the effects a skill can carry.
    """

    type: str = Field(
        description="Tag selecting the variant.",
    )
    target: str | None = Field(
        default=None,
        description=(
            "Who the effect lands on: caster, selected, area or "
            "caster_adjacent_enemies."
        ),
    )

    @property
    def effect_target(self) -> EffectTarget | None:
        """The parsed target, or None when the value is not recognized."""
        try:
            return EffectTarget(self.target)
        except ValueError:
            return None


class DamageEffect(SkillEffect):
    """Damage scaled against the caster's ATK, absorbed by shields first."""

    type: Literal["damage", "damage_aoe_adjacent"] = "damage"
    multiplier: float = Field(
        default=1.0,
        ge=0,
        description="Multiplier applied to the caster's ATK.",
    )


class _ScaledRestoreEffect(SkillEffect):
    multiplier: float = Field(
        default=1.0,
        ge=0,
        description="Multiplier applied to the selected basis.",
    )
    based_on: str | None = Field(
        default=None,
        alias="basedOn",
        description="caster_atk scales with the caster, anything else with the target max HP.",
    )

    def basis(self, caster_atk: float, target_max_hp: float) -> float:
        """
        Returns the stat the effect magnitude is scaled against.

        Args:
            caster_atk (float): The caster's ATK.
            target_max_hp (float): The receiving unit's max HP.

        Returns:
            float: The chosen basis.

        """
        if self.based_on == StatBasis.CASTER_ATK.value:
            return caster_atk
        return target_max_hp


class HealEffect(_ScaledRestoreEffect):
    """Restores HP, capped at max HP."""

    type: Literal["heal"] = "heal"


class ShieldEffect(_ScaledRestoreEffect):
    """Adds shield HP that absorbs damage before HP."""

    type: Literal["shield"] = "shield"


class HealLowestEffect(_ScaledRestoreEffect):
    """Heals the living ally with the lowest HP fraction."""

    type: Literal["heal_lowest_hp_ally"] = "heal_lowest_hp_ally"


class ReviveEffect(SkillEffect):
    """Brings a defeated unit back into the turn order."""

    type: Literal["revive"] = "revive"
    hp_percentage: float | None = Field(
        default=None,
        gt=0,
        le=1,
        alias="hpPercentage",
        description="Fraction of max HP restored; the configured default when unset.",
    )


class StatusApplyEffect(SkillEffect):
    """Attaches a debuff to the target and queues it for ticking."""

    type: Literal["status"] = "status"
    status_name: str = Field(
        alias="statusName",
        description="Name of the debuff, e.g. Poison or Stun.",
    )
    chance: float = Field(
        default=1.0,
        ge=0,
        le=1,
        description="Probability of the status landing on each target.",
    )
    duration: int | None = Field(
        default=None,
        description="Number of the target's turns the debuff lasts.",
    )
    effect_details: dict[str, Any] = Field(
        default_factory=dict,
        alias="effectDetails",
        description="Extra fields merged into the status record (trigger_phase, damage...).",
    )


class ActAgainEffect(SkillEffect):
    """Lets the caster take another action instead of ending its turn."""

    type: Literal["act_again"] = "act_again"


class UnknownEffect(SkillEffect):
    """An effect whose type the resolver does not implement."""


_EFFECT_TAGS: dict[str, str] = {
    "damage": "damage",
    "damage_aoe_adjacent": "damage",
    "heal": "heal",
    "shield": "shield",
    "revive": "revive",
    "status": "status",
    "act_again": "act_again",
    "heal_lowest_hp_ally": "heal_lowest_hp_ally",
}


def _effect_tag(value: Any) -> str:
    if isinstance(value, dict):
        effect_type = value.get("type")
    else:
        effect_type = getattr(value, "type", None)
    return _EFFECT_TAGS.get(str(effect_type), "unknown")


AnySkillEffect = Annotated[
    Union[
        Annotated[DamageEffect, Tag("damage")],
        Annotated[HealEffect, Tag("heal")],
        Annotated[ShieldEffect, Tag("shield")],
        Annotated[ReviveEffect, Tag("revive")],
        Annotated[StatusApplyEffect, Tag("status")],
        Annotated[ActAgainEffect, Tag("act_again")],
        Annotated[HealLowestEffect, Tag("heal_lowest_hp_ally")],
        Annotated[UnknownEffect, Tag("unknown")],
    ],
    Discriminator(_effect_tag),
]
