"""
Status effect records.

Templates live on a command's ``applied_effects`` list; instances are the
copies queued in the battle's ``active_effects`` once a template lands on a
target. Both keep any extra payload field they are given, so new effect
types can carry their own data.
"""

from typing import Any

from pydantic import Field

from core.constants import TriggerPhase
from core.document import DocumentModel


class StatusEffectInstance(DocumentModel):
    """A queued status effect waiting for its trigger phase."""

    effect_id: str | None = Field(
        default=None,
        description="Identifier of the effect definition.",
    )
    name: str | None = Field(
        default=None,
        description="Name of the debuff this effect belongs to, if any.",
    )
    type: str = Field(
        description="Tag selecting how the effect ticks (poison, regeneration...).",
    )
    trigger_phase: str | None = Field(
        default=None,
        description="start_of_turn or end_of_turn.",
    )
    target_id: str | None = Field(
        default=None,
        description="Unit the effect ticks on.",
    )
    target_type: str | None = Field(
        default=None,
        description="individual for single-unit effects.",
    )
    duration: int | None = Field(
        default=None,
        description="Remaining duration of the linked debuff.",
    )
    damage: int | None = Field(
        default=None,
        description="Damage dealt per tick.",
    )
    heal: int | None = Field(
        default=None,
        description="HP restored per tick.",
    )
    one_shot: bool = Field(
        default=False,
        description="Remove the effect after it fires once.",
    )
    source_skill_name: str | None = Field(
        default=None,
        description="Skill that queued the effect.",
    )
    source_actor_id: str | None = Field(
        default=None,
        description="Unit whose skill queued the effect.",
    )
    source_unit_id: str | None = Field(
        default=None,
        alias="sourceUnitId",
        description="Unit that applied the linked debuff.",
    )

    @property
    def phase(self) -> TriggerPhase | None:
        """The parsed trigger phase, or None when unset or unknown."""
        try:
            return TriggerPhase(self.trigger_phase)
        except ValueError:
            return None

    def to_document(self) -> dict[str, Any]:
        document = super().to_document()
        if not self.one_shot:
            document.pop("one_shot", None)
        return document


class StatusEffectTemplate(DocumentModel):
    """An effect a skill queues on each affected target when its chance roll succeeds."""

    effect_id: str | None = Field(
        default=None,
        description="Identifier of the effect definition.",
    )
    type: str = Field(
        description="Tag selecting how the queued effect ticks.",
    )
    trigger_phase: str | None = Field(
        default=None,
        description="start_of_turn or end_of_turn.",
    )
    target_type: str | None = Field(
        default=None,
        description="individual binds the copy to the affected target.",
    )
    chance: float = Field(
        default=1.0,
        ge=0,
        le=1,
        description="Probability of the effect landing on each target.",
    )

    def instantiate(
        self,
        skill_name: str,
        actor_id: str,
        target_id: str,
    ) -> StatusEffectInstance:
        """
        Builds the queued copy of this template for one target.

        The chance field is dropped; the source skill and actor are recorded,
        and the copy is bound to the target unless the template declares a
        non-individual target type.

        Args:
            skill_name (str): Name of the skill that applied the template.
            actor_id (str): Id of the unit using the skill.
            target_id (str): Id of the affected unit.

        Returns:
            StatusEffectInstance: The instance to queue.

        """
        data = self.model_dump(by_alias=True, exclude_none=True, exclude={"chance"})
        data["source_skill_name"] = skill_name
        data["source_actor_id"] = actor_id
        if self.target_type in (None, "individual"):
            data["target_id"] = target_id
        return StatusEffectInstance.model_validate(data)
