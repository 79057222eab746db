"""
Targeting module for the resolver.

Positions are ordinal: a unit's position is its index among the living units
taken in turn order, and distances wrap around the ring of living units. The
primary-target step returns what the player may select; the area step
expands a selected target into every unit the command affects.
"""

from typing import Any

from catchery import log_warning

from battle.battle_state import BattleState
from battle.command import Command
from battle.unit import Unit
from core.constants import AreaOrigin, AreaShape, Direction, SelectionShape, UnitType
from core.logging import ExecutionLog, log_debug


def _trace(log: ExecutionLog | None, message: str) -> None:
    if log is not None:
        log.debug(message)
    else:
        log_debug(message)


def _warn(log: ExecutionLog | None, message: str, context: dict[str, Any]) -> None:
    if log is not None:
        log.warning(message, context)
    else:
        log_warning(message, context)


def circular_distance(first: int, second: int, size: int) -> int:
    """
    Computes the shortest distance between two positions on a ring.

    Args:
        first (int): The first position.
        second (int): The second position.
        size (int): Number of positions on the ring.

    Returns:
        int: The shortest distance, going either way around.

    """
    if size <= 0:
        return 0
    diff = abs(first - second) % size
    return min(diff, size - diff)


def ordered_alive_units(state: BattleState, log: ExecutionLog | None = None) -> list[Unit]:
    """
    Returns the living units in turn order.

    Ids in the turn order that do not resolve to a living unit are skipped.
    When the document has no turn order at all, the living units are sorted
    by their stored ``pseudoPos`` instead; units without one go last.

    Args:
        state (BattleState): The battle document.
        log (ExecutionLog | None): Where to trace the fallback.

    Returns:
        list[Unit]: The living units, position 0 first.

    """
    if state.turn_order:
        ordered: list[Unit] = []
        for unit_id in state.turn_order:
            unit = state.get_unit(unit_id)
            if unit is None:
                _trace(log, f"Turn order references unknown unit '{unit_id}', skipping.")
                continue
            if unit.is_alive:
                ordered.append(unit)
        return ordered
    _trace(log, "No turn order in the document, ordering units by pseudoPos.")
    alive = [unit for unit in state.units if unit.is_alive]
    return sorted(
        alive,
        key=lambda u: (u.pseudo_pos is None, u.pseudo_pos if u.pseudo_pos is not None else 0),
    )


def _position_map(units: list[Unit]) -> dict[str, int]:
    return {unit.id: index for index, unit in enumerate(units)}


def _type_matches(unit: Unit, types: list[str]) -> bool:
    return unit.type.value in types


def units_within_distance(
    state: BattleState,
    origin: Unit,
    distance: int,
    unit_type: UnitType | None = None,
    exact: bool = False,
    include_origin: bool = False,
) -> list[Unit]:
    """
    Finds the living units around an origin unit.

    Args:
        state (BattleState):
            The battle document.
        origin (Unit):
            The unit distances are measured from.
        distance (int):
            The radius, or the exact distance when ``exact`` is set.
        unit_type (UnitType | None):
            Restrict the result to one side.
        exact (bool):
            Only keep units at exactly ``distance``.
        include_origin (bool):
            Keep the origin itself when it matches.

    Returns:
        list[Unit]:
            The matching units in turn order; empty if the origin is not a
            living unit of the turn order.

    """
    ordered = ordered_alive_units(state)
    positions = _position_map(ordered)
    if origin.id not in positions:
        return []
    origin_pos = positions[origin.id]
    result: list[Unit] = []
    for unit in ordered:
        if unit.id == origin.id and not include_origin:
            continue
        if unit_type is not None and unit.type != unit_type:
            continue
        gap = circular_distance(origin_pos, positions[unit.id], len(ordered))
        if (gap == distance) if exact else (gap <= distance):
            result.append(unit)
    return result


def _dedupe(ids: list[str]) -> list[str]:
    return list(dict.fromkeys(ids))


def get_valid_primary_targets(
    actor: Unit,
    command: Command,
    state: BattleState,
    log: ExecutionLog | None = None,
) -> list[str]:
    """
    Lists the units the player may select as the primary target of a command.

    Args:
        actor (Unit):
            The unit using the command.
        command (Command):
            The command, with its selection rule.
        state (BattleState):
            The battle document.
        log (ExecutionLog | None):
            Where to trace the resolution.

    Returns:
        list[str]:
            The ids of the valid primary targets, without duplicates.

    """
    params = command.targeting_params
    if params is None or params.selection is None:
        _trace(log, f"Command {command.display_name} has no selection rule.")
        return []
    selection = params.selection
    pattern = selection.pattern
    types = selection.targetable_types

    # Defeated allies have no position, so revive targets ignore the ring.
    if pattern.shape == SelectionShape.ANY_DEFEATED_ALLY.value:
        return [unit.id for unit in state.units if unit.is_ally and unit.is_defeated]

    ordered = ordered_alive_units(state, log)
    positions = _position_map(ordered)
    if not ordered or actor.id not in positions:
        _trace(log, f"{actor.display_name} has no position in the turn order.")
        return []
    size = len(ordered)
    actor_pos = positions[actor.id]
    targets: list[str] = []

    if pattern.shape in (SelectionShape.ADJACENT.value, SelectionShape.WITHIN_DISTANCE.value):
        max_distance = pattern.distance or 1
        for unit in ordered:
            if unit.id == actor.id or not _type_matches(unit, types):
                continue
            if circular_distance(actor_pos, positions[unit.id], size) <= max_distance:
                targets.append(unit.id)

    elif pattern.shape in (
        SelectionShape.SPECIFIC_POSITION.value,
        SelectionShape.SPECIFIC_POSITIONS.value,
    ):
        offsets = pattern.positions or [pattern.distance or 1]
        direction = pattern.direction
        for offset in offsets:
            candidates: list[int] = []
            if direction in (Direction.FORWARD.value, Direction.BOTH.value):
                candidates.append((actor_pos + offset) % size)
            if direction in (Direction.BACKWARD.value, Direction.BOTH.value):
                candidates.append((actor_pos - offset) % size)
            for index in candidates:
                unit = ordered[index]
                if unit.id != actor.id and _type_matches(unit, types):
                    targets.append(unit.id)

    elif pattern.shape == SelectionShape.SELF.value:
        if SelectionShape.SELF.value in types or _type_matches(actor, types):
            targets.append(actor.id)

    else:
        _warn(
            log,
            f"Unknown selection shape '{pattern.shape}'.",
            {"command_id": command.command_id},
        )

    targets = _dedupe(targets)
    _trace(log, f"Valid primary targets for {command.display_name}: {targets}")
    return targets


def get_area_affected_targets(
    primary_target_id: str | None,
    actor: Unit,
    command: Command,
    state: BattleState,
    log: ExecutionLog | None = None,
) -> list[str]:
    """
    Expands a selected primary target into every unit the command affects.

    Without an area rule only the primary target is affected. An unknown
    area shape degrades to the origin unit alone, provided its type matches.

    Args:
        primary_target_id (str | None):
            The id the player selected.
        actor (Unit):
            The unit using the command.
        command (Command):
            The command, with its area rule.
        state (BattleState):
            The battle document.
        log (ExecutionLog | None):
            Where to trace the resolution.

    Returns:
        list[str]:
            The ids of the affected units, without duplicates.

    """
    params = command.targeting_params
    if params is None or params.area is None:
        return [primary_target_id] if primary_target_id else []
    area = params.area
    types = area.affected_types

    ordered = ordered_alive_units(state, log)
    positions = _position_map(ordered)
    if not ordered:
        return []

    if area.origin == AreaOrigin.CASTER.value:
        origin = actor if actor.id in positions else None
    else:
        origin = next((u for u in ordered if u.id == primary_target_id), None)
    if origin is None:
        _warn(
            log,
            "Cannot determine the origin of the area of effect.",
            {"command_id": command.command_id, "primary_target_id": primary_target_id},
        )
        return []
    origin_pos = positions[origin.id]
    affected: list[str] = []

    if area.shape == AreaShape.SINGLE_ON_SELECTED.value:
        primary = next((u for u in ordered if u.id == primary_target_id), None)
        if primary is not None and _type_matches(primary, types):
            affected.append(primary.id)

    elif area.shape == AreaShape.RADIUS_AROUND_ORIGIN.value:
        for unit in ordered:
            gap = circular_distance(origin_pos, positions[unit.id], len(ordered))
            if gap <= area.distance and _type_matches(unit, types):
                affected.append(unit.id)

    else:
        _warn(
            log,
            f"Unknown area shape '{area.shape}', affecting the origin only.",
            {"command_id": command.command_id},
        )
        if _type_matches(origin, types):
            affected.append(origin.id)

    affected = _dedupe(affected)
    _trace(log, f"Units affected by {command.display_name}: {affected}")
    return affected
