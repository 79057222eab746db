"""
Combatant models of the battle document.
"""

from pydantic import Field

from battle.command import Command
from core.constants import UnitRole, UnitStatus, UnitType
from core.document import DocumentModel


class UnitStats(DocumentModel):
    """The mutable combat numbers of a unit."""

    hp: int = Field(
        default=0,
        ge=0,
        description="Current hit points.",
    )
    max_hp: int = Field(
        default=0,
        ge=0,
        alias="maxHp",
        description="Maximum hit points.",
    )
    atk: int | float = Field(
        default=0,
        description="Attack, the base of every damage calculation.",
    )
    defense: int | float = Field(
        default=0,
        alias="def",
        description="Defense; carried for the presentation layer.",
    )
    shield_hp: int = Field(
        default=0,
        ge=0,
        alias="shieldHP",
        description="Shield points absorbed before hit points.",
    )
    gauge: int = Field(
        default=0,
        ge=0,
        description="Ultimate gauge charge.",
    )
    max_gauge: int = Field(
        default=100,
        ge=0,
        alias="maxGauge",
        description="Charge needed for an ultimate.",
    )

    @property
    def hp_ratio(self) -> float:
        """Current HP over max HP, 1.0 when max HP is zero."""
        return (self.hp / self.max_hp) if self.max_hp > 0 else 1.0


class StatusRecord(DocumentModel):
    """A buff or debuff attached to a unit."""

    name: str = Field(
        description="Name of the status, e.g. Stun.",
    )
    duration: int = Field(
        default=1,
        description="Remaining number of the holder's turns.",
    )
    source_unit_id: str | None = Field(
        default=None,
        alias="sourceUnitId",
        description="Unit that applied the status.",
    )


class StatusEffects(DocumentModel):
    """The buffs and debuffs currently attached to a unit."""

    buffs: list[StatusRecord] = Field(default_factory=list)
    debuffs: list[StatusRecord] = Field(default_factory=list)

    def has_debuff(self, name: str) -> bool:
        return any(record.name == name for record in self.debuffs)

    def find_debuff(self, name: str) -> StatusRecord | None:
        for record in self.debuffs:
            if record.name == name:
                return record
        return None

    def clear(self) -> None:
        self.buffs.clear()
        self.debuffs.clear()

    def tick(self) -> list[StatusRecord]:
        """
        Decrements every duration and drops the expired records.

        Returns:
            list[StatusRecord]: The records that expired.

        """
        expired: list[StatusRecord] = []
        for records in (self.buffs, self.debuffs):
            for record in records:
                record.duration -= 1
            expired.extend(record for record in records if record.duration <= 0)
            records[:] = [record for record in records if record.duration > 0]
        return expired


class Unit(DocumentModel):
    """A combatant, hero or enemy."""

    id: str = Field(
        description="Unique identifier of the unit within the battle.",
    )
    name: str = Field(
        default="",
        description="Display name.",
    )
    type: UnitType = Field(
        description="Which side the unit fights on.",
    )
    tier: str | None = Field(
        default=None,
        description="Strength tier of an enemy (Minion, Elite, Boss).",
    )
    role: str | None = Field(
        default=None,
        description="Attack range class (Melee, Ranged).",
    )
    status: UnitStatus = Field(
        default=UnitStatus.IDLE,
        description="Turn state of the unit.",
    )
    pseudo_pos: int | None = Field(
        default=None,
        alias="pseudoPos",
        description="Index of the unit in the turn order.",
    )
    level: int | None = Field(
        default=None,
        description="Level applied at battle initialization.",
    )
    exp_value: int | float | None = Field(
        default=None,
        alias="expValue",
        description="Experience an enemy is worth when defeated.",
    )
    stats: UnitStats = Field(
        default_factory=UnitStats,
        description="Combat numbers.",
    )
    commands: list[Command] = Field(
        default_factory=list,
        description="Commands the unit can use.",
    )
    status_effects: StatusEffects = Field(
        default_factory=StatusEffects,
        alias="statusEffects",
        description="Attached buffs and debuffs.",
    )

    @property
    def display_name(self) -> str:
        return self.name or self.id

    @property
    def is_defeated(self) -> bool:
        return self.status == UnitStatus.DEFEATED

    @property
    def is_alive(self) -> bool:
        return self.status != UnitStatus.DEFEATED

    @property
    def is_ally(self) -> bool:
        return self.type == UnitType.ALLY

    @property
    def is_enemy(self) -> bool:
        return self.type == UnitType.ENEMY

    @property
    def combat_role(self) -> UnitRole:
        """The unit's role, Melee when missing or unrecognized."""
        try:
            return UnitRole(self.role)
        except ValueError:
            return UnitRole.MELEE

    def get_command(self, command_id: str) -> Command | None:
        """Get a command by id, or None if the unit does not have it."""
        for command in self.commands:
            if command.command_id == command_id:
                return command
        return None

    def __str__(self) -> str:
        return f"{self.display_name} ({self.id})"
