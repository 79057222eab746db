"""
The battle document, the aggregate root every resolution call works on.

Each call decodes its own copy of the document, mutates it in memory and
serializes it back; nothing is shared between calls.
"""

from typing import Any

from pydantic import Field

from battle.progression_data import ProgressionData
from battle.results_summary import BattleResultSummary
from battle.unit import Unit
from core.constants import BattleStateTag, UnitStatus, UnitType
from core.document import DocumentModel
from core.error_handling import InputError, InvalidActionError, parse_json_input
from core.logging import ExecutionLog
from effects.status_effect import StatusEffectInstance


class DefeatedEnemyRecord(DocumentModel):
    """An enemy defeated during the battle, kept for experience scoring."""

    id: str
    tier: str | None = None
    exp_value: int | float = Field(
        default=1,
        alias="expValue",
        description="Experience value of the enemy at the time of its defeat.",
    )


class EffectLogEntry(DocumentModel):
    """A single numeric effect the presentation layer shows as a pop-up."""

    type: str = Field(
        description="heal, shield, damage or sp_gain.",
    )
    unit_id: str | None = Field(
        default=None,
        alias="unitId",
        description="Unit the pop-up is shown on; None for team-wide effects.",
    )
    amount: int = Field(
        description="Magnitude of the effect.",
    )


class LastActionDetails(DocumentModel):
    """Summary of the most recent action, used to drive animations."""

    actor_id: str = Field(
        alias="actorId",
        description="Acting unit, or a system id for items.",
    )
    command_id: str | None = Field(default=None, alias="commandId")
    command_name: str | None = Field(default=None, alias="commandName")
    targets: list[str] | None = Field(
        default=None,
        description="Ids of the units the action was aimed at.",
    )
    effects_summary: list[str] | None = Field(
        default=None,
        alias="effectsSummary",
        description='Readable outcome per target, e.g. "Goblin (-20 HP)".',
    )
    effects: list[EffectLogEntry] | None = Field(
        default=None,
        description="Structured numeric outcomes.",
    )
    action_outcome: str | None = Field(
        default=None,
        alias="actionOutcome",
        description="STUNNED or NO_TARGET_IN_RANGE for actions that did nothing.",
    )


class BattleState(DocumentModel):
    """The root battle document."""

    units: list[Unit] = Field(
        default_factory=list,
        description="Every combatant of the battle.",
    )
    turn_order: list[str] = Field(
        default_factory=list,
        alias="_turnOrder",
        description="Circular order of unit ids; the active unit is first.",
    )
    active_unit_id: str | None = Field(
        default=None,
        alias="activeUnitID",
        description="Unit currently acting; None once the battle is over.",
    )
    active_unit_type: UnitType | None = Field(
        default=None,
        alias="activeUnitType",
        description="Side of the active unit.",
    )
    round: int = Field(
        default=1,
        ge=0,
        description="Current round.",
    )
    turn_in_round: int = Field(
        default=0,
        ge=0,
        alias="turnInRound",
        description="Number of turns started in the current round.",
    )
    team_sp: int = Field(
        default=0,
        ge=0,
        alias="teamSP",
        description="Shared skill points of the heroes.",
    )
    max_team_sp: int | None = Field(
        default=None,
        ge=0,
        alias="maxTeamSP",
        description="Cap of the shared skill points; no SP can be gained without it.",
    )
    active_effects: list[StatusEffectInstance] = Field(
        default_factory=list,
        description="Queued status effects waiting for their trigger phase.",
    )
    state: BattleStateTag = Field(
        default=BattleStateTag.ONGOING,
        alias="battleState",
        description="Ongoing, Win, Lose or Error.",
    )
    battle_message: str = Field(
        default="",
        alias="battleMessage",
        description="Human readable description of what just happened.",
    )
    last_action_details: LastActionDetails | None = Field(
        default=None,
        alias="lastActionDetails",
        description="What the presentation layer should animate.",
    )
    defeated_enemies: list[DefeatedEnemyRecord] | None = Field(
        default=None,
        alias="_defeatedEnemiesThisBattle",
        description="Enemies defeated so far; removed when results are finalized.",
    )
    actor_should_act_again: str | None = Field(
        default=None,
        alias="_actorShouldActAgain",
        description="Id of the unit granted another action by its last skill.",
    )
    turn_order_modified_by_skill: bool | None = Field(
        default=None,
        alias="_turnOrderModifiedBySkill",
        description="Set when a skill reordered the turn order mid-turn.",
    )
    progression_snapshot: ProgressionData | None = Field(
        default=None,
        description="Progression data the battle was initialized from.",
    )
    battle_result_summary: BattleResultSummary | None = Field(
        default=None,
        alias="battleResultSummary",
        description="Experience and rewards, set when results are finalized.",
    )

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    @classmethod
    def from_document(cls, source: str | dict[str, Any]) -> "BattleState":
        """
        Decodes a battle document.

        Args:
            source (str | dict[str, Any]): The JSON string or decoded object.

        Returns:
            BattleState: The decoded document.

        Raises:
            InputError: If the input is empty, not JSON or not an object.
            ValidationError: If the object does not describe a battle.

        """
        data = parse_json_input(source, "battle_state")
        if not isinstance(data, dict):
            raise InputError("Input 'battle_state' must be a JSON object.")
        return cls.model_validate(data)

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def get_unit(self, unit_id: str | None) -> Unit | None:
        """Get a unit by id, or None if not found."""
        if unit_id is None:
            return None
        for unit in self.units:
            if unit.id == unit_id:
                return unit
        return None

    def require_unit(self, unit_id: str | None, role: str) -> Unit:
        """
        Get a unit by id, raising when it is missing.

        Args:
            unit_id (str | None): The id to look up.
            role (str): What the unit is for (actor, target), used in the message.

        Returns:
            Unit: The unit.

        Raises:
            InputError: If no unit has this id.

        """
        unit = self.get_unit(unit_id)
        if unit is None:
            raise InputError(
                f"{role.capitalize()} with ID '{unit_id}' not found.",
                {"unit_id": unit_id},
            )
        return unit

    def require_living_unit(self, unit_id: str | None, role: str) -> Unit:
        """Like require_unit, also rejecting defeated units."""
        unit = self.require_unit(unit_id, role)
        if unit.is_defeated:
            raise InvalidActionError(
                f"{role.capitalize()} {unit.display_name} is already defeated.",
                {"unit_id": unit.id},
            )
        return unit

    @property
    def active_unit(self) -> Unit | None:
        return self.get_unit(self.active_unit_id)

    def living_units(self, unit_type: UnitType | None = None) -> list[Unit]:
        """Returns the living units, optionally restricted to one side."""
        return [
            unit
            for unit in self.units
            if unit.is_alive and (unit_type is None or unit.type == unit_type)
        ]

    # -------------------------------------------------------------------------
    # Shared bookkeeping
    # -------------------------------------------------------------------------

    def clear_last_action(self) -> None:
        self.last_action_details = None

    def gain_team_sp(self, amount: int, log: ExecutionLog) -> int:
        """
        Adds team SP, clamped to the cap.

        Args:
            amount (int): The SP to add.
            log (ExecutionLog): Where to report a document without a cap.

        Returns:
            int: The SP actually gained.

        """
        if self.max_team_sp is None:
            log.warning("maxTeamSP is missing from the battle document, no SP gained.", {"amount": amount})
            return 0
        before = self.team_sp
        self.team_sp = max(0, min(self.max_team_sp, self.team_sp + amount))
        return self.team_sp - before

    def record_defeat(self, unit: Unit) -> bool:
        """
        Records a unit defeated by an action or an effect tick.

        Enemies are added to the defeated-enemies accumulator once, with the
        experience value they are worth.

        Args:
            unit (Unit): The unit that was just defeated.

        Returns:
            bool: True if the unit was added to the accumulator.

        """
        if unit.status != UnitStatus.DEFEATED or unit.type != UnitType.ENEMY:
            return False
        if self.defeated_enemies is None:
            self.defeated_enemies = []
        if any(record.id == unit.id for record in self.defeated_enemies):
            return False
        self.defeated_enemies.append(
            DefeatedEnemyRecord(
                id=unit.id,
                tier=unit.tier,
                exp_value=unit.exp_value or 1,
            )
        )
        return True
