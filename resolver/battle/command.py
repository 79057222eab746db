"""
Command models of the battle document.

A command is either the basic attack or a skill; skills carry their effects,
the status templates they queue and the targeting rules the presentation
layer uses to offer targets.
"""

from pydantic import Field

from core.constants import CommandType, Direction, UnitType
from core.document import DocumentModel
from effects.effect_spec import AnySkillEffect
from effects.status_effect import StatusEffectTemplate


class SelectionPattern(DocumentModel):
    """Ordinal pattern used to pick the primary target."""

    shape: str = Field(
        description="Adjacent, WithinDistance, SpecificPosition(s), Self or AnyDefeatedAlly.",
    )
    distance: int | None = Field(
        default=None,
        ge=0,
        description="Circular distance for the distance-based shapes.",
    )
    positions: list[int] | None = Field(
        default=None,
        description="Ordinal offsets for the SpecificPosition(s) shapes.",
    )
    direction: str = Field(
        default=Direction.BOTH.value,
        description="Forward, Backward or Both.",
    )


class Selection(DocumentModel):
    """Primary-target selection rule."""

    pattern: SelectionPattern
    targetable_types: list[str] = Field(
        default_factory=lambda: [UnitType.ENEMY.value],
        alias="targetableTypes",
        description="Unit types that may be selected; Self allows the actor.",
    )


class Area(DocumentModel):
    """Area-of-effect rule applied around the primary target or the caster."""

    shape: str = Field(
        description="SingleOnSelected or RadiusAroundOrigin.",
    )
    origin: str = Field(
        default="SelectedTarget",
        description="Caster or SelectedTarget.",
    )
    distance: int = Field(
        default=0,
        ge=0,
        description="Circular radius around the origin.",
    )
    affected_types: list[str] = Field(
        default_factory=lambda: [UnitType.ENEMY.value],
        alias="affectedTypes",
        description="Unit types the area affects.",
    )


class TargetingParams(DocumentModel):
    selection: Selection | None = None
    area: Area | None = None


class Command(DocumentModel):
    """A basic attack or skill a unit can use."""

    command_id: str = Field(
        alias="commandId",
        description="Identifier of the command.",
    )
    name: str = Field(
        default="",
        description="Display name.",
    )
    type: CommandType = Field(
        default=CommandType.SKILL,
        description="BasicAttack or Skill.",
    )
    sp_cost: int = Field(
        default=0,
        ge=0,
        alias="spCost",
        description="Team SP spent on use.",
    )
    is_ultimate: bool = Field(
        default=False,
        alias="isUltimate",
        description="Ultimates are paid with a full gauge.",
    )
    gauge_cost: int | None = Field(
        default=None,
        ge=0,
        alias="gaugeCost",
        description="Gauge required by an ultimate; the unit's max gauge when unset.",
    )
    effects: list[AnySkillEffect] = Field(
        default_factory=list,
        description="Effects resolved in declared order.",
    )
    applied_effects: list[StatusEffectTemplate] = Field(
        default_factory=list,
        description="Status templates queued on each affected target.",
    )
    targeting_params: TargetingParams | None = Field(
        default=None,
        alias="targetingParams",
        description="Targeting rules offered by the presentation layer.",
    )
    sfx_filename: str | None = Field(
        default=None,
        alias="sfxFilename",
        description="Sound effect the host plays for this command.",
    )

    @property
    def display_name(self) -> str:
        return self.name or self.command_id
