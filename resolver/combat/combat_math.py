"""
Combat math module for the resolver.

Applies damage, healing, shields and revives to a single unit. These
functions only touch the unit they are given; logging, elimination tracking
and the battle-end check are the caller's job.
"""

import math

from pydantic import BaseModel, Field

from battle.unit import Unit
from core.constants import UnitStatus
from core.error_handling import InvalidActionError


def round_half_up(value: float) -> int:
    """
    Rounds to the nearest integer, halves going up.

    Effect magnitudes are always rounded this way before they touch HP or
    shields (so 2.5 becomes 3, not 2 as with the builtin round).

    Args:
        value (float): The raw magnitude.

    Returns:
        int: The rounded magnitude.

    """
    return math.floor(value + 0.5)


class DamageResult(BaseModel):
    """How a damage application was split between shield and HP."""

    total_damage: int = Field(
        description="The damage requested, after rounding.",
    )
    shield_damage: int = Field(
        default=0,
        description="Damage absorbed by the shield.",
    )
    hp_damage: int = Field(
        default=0,
        description="Damage taken from HP.",
    )
    eliminated: bool = Field(
        default=False,
        description="True if this application defeated the unit.",
    )

    @property
    def dealt(self) -> int:
        """The damage that actually landed on shield and HP."""
        return self.shield_damage + self.hp_damage


def apply_damage(target: Unit, amount: float) -> DamageResult:
    """
    Applies damage to a unit, shield first.

    Args:
        target (Unit):
            The unit receiving the damage.
        amount (float):
            The raw damage, rounded before it is applied.

    Returns:
        DamageResult:
            The split of the damage and whether the unit was defeated.

    """
    total = max(0, round_half_up(amount))
    stats = target.stats
    shield_damage = min(stats.shield_hp, total)
    stats.shield_hp -= shield_damage
    hp_damage = min(stats.hp, total - shield_damage)
    stats.hp -= hp_damage
    eliminated = False
    if stats.hp <= 0 and target.is_alive:
        target.status = UnitStatus.DEFEATED
        eliminated = True
    return DamageResult(
        total_damage=total,
        shield_damage=shield_damage,
        hp_damage=hp_damage,
        eliminated=eliminated,
    )


def apply_direct_damage(target: Unit, amount: float) -> DamageResult:
    """
    Applies damage straight to HP, ignoring the shield.

    Used by damage-over-time ticks.

    Args:
        target (Unit):
            The unit receiving the damage.
        amount (float):
            The raw damage, rounded before it is applied.

    Returns:
        DamageResult:
            The damage taken and whether the unit was defeated.

    """
    total = max(0, round_half_up(amount))
    hp_damage = min(target.stats.hp, total)
    target.stats.hp -= hp_damage
    eliminated = False
    if target.stats.hp <= 0 and target.is_alive:
        target.status = UnitStatus.DEFEATED
        eliminated = True
    return DamageResult(total_damage=total, hp_damage=hp_damage, eliminated=eliminated)


def apply_heal(target: Unit, amount: float) -> int:
    """
    Heals a living unit, capped at its max HP.

    Args:
        target (Unit): The unit to heal.
        amount (float): The raw amount, rounded before it is applied.

    Returns:
        int: The HP actually restored, 0 for defeated units.

    """
    if target.is_defeated:
        return 0
    before = target.stats.hp
    target.stats.hp = min(target.stats.max_hp, before + max(0, round_half_up(amount)))
    return max(0, target.stats.hp - before)


def apply_shield(target: Unit, amount: float) -> int:
    """
    Adds shield points to a living unit. Shields have no cap.

    Args:
        target (Unit): The unit to shield.
        amount (float): The raw amount, rounded before it is applied.

    Returns:
        int: The shield points added, 0 for defeated units.

    """
    if target.is_defeated:
        return 0
    added = max(0, round_half_up(amount))
    target.stats.shield_hp += added
    return added


def apply_revive(target: Unit, hp_fraction: float) -> int:
    """
    Brings a defeated unit back with a fraction of its max HP.

    The unit comes back Idle with no shield and no buffs or debuffs. Putting
    it back into the turn order is the caller's job.

    Args:
        target (Unit):
            The defeated unit.
        hp_fraction (float):
            Fraction of max HP restored; at least 1 HP is always restored.

    Returns:
        int:
            The HP the unit was revived with.

    Raises:
        InvalidActionError:
            If the unit is not defeated.

    """
    if not target.is_defeated:
        raise InvalidActionError(
            f"Cannot revive {target.display_name}: the unit is not defeated.",
            {"unit_id": target.id},
        )
    target.status = UnitStatus.IDLE
    target.stats.hp = max(1, round_half_up(target.stats.max_hp * hp_fraction))
    target.stats.shield_hp = 0
    target.status_effects.clear()
    return target.stats.hp
