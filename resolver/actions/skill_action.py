"""
Skill pipeline.

A skill pays its cost, queues its status templates on every affected target
and then resolves its effects one after the other, in the order the command
declares them.
"""

import random
from typing import Any

from actions.base_action import ActionOutcome, register_hit
from battle.battle_state import BattleState, LastActionDetails
from battle.command import Command
from battle.unit import StatusRecord, Unit
from combat.combat_math import (
    apply_damage,
    apply_heal,
    apply_revive,
    apply_shield,
    round_half_up,
)
from combat.targeting import units_within_distance
from combat.turn_order import insert_unit
from core.config import ResolverConfig
from core.constants import EffectTarget, UnitStatus
from core.error_handling import InputError, InsufficientResourceError
from core.logging import ExecutionLog
from effects.effect_spec import (
    ActAgainEffect,
    DamageEffect,
    HealEffect,
    HealLowestEffect,
    ReviveEffect,
    ShieldEffect,
    SkillEffect,
    StatusApplyEffect,
    UnknownEffect,
)
from effects.status_effect import StatusEffectInstance


def pay_skill_cost(state: BattleState, actor: Unit, command: Command, log: ExecutionLog) -> None:
    """
    Deducts the SP and gauge a skill costs.

    Args:
        state (BattleState): The battle document.
        actor (Unit): The unit using the skill.
        command (Command): The skill.
        log (ExecutionLog): The execution log.

    Raises:
        InsufficientResourceError: If the team lacks SP or the actor lacks gauge.

    """
    if command.sp_cost > 0:
        if state.team_sp < command.sp_cost:
            raise InsufficientResourceError(
                f"Not enough SP for {command.display_name}. "
                f"Required: {command.sp_cost}, Available: {state.team_sp}.",
                {"command_id": command.command_id},
            )
        state.team_sp -= command.sp_cost
        log.debug(f"Spent {command.sp_cost} SP. Team SP: {state.team_sp}/{state.max_team_sp}")

    if command.is_ultimate:
        gauge_cost = command.gauge_cost if command.gauge_cost is not None else actor.stats.max_gauge
        if actor.stats.gauge < gauge_cost:
            raise InsufficientResourceError(
                f"Not enough Gauge for {command.display_name}. "
                f"Required: {gauge_cost}, Available: {actor.stats.gauge}.",
                {"command_id": command.command_id},
            )
        actor.stats.gauge = 0
        log.debug(f"Ultimate used, gauge of {actor.display_name} reset.")


class SkillResolution:
    """
    Resolves one use of a skill against the targets chosen by the player.

    Attributes:
        state (BattleState):
            The battle document.
        actor (Unit):
            The unit using the skill.
        command (Command):
            The skill.
        affected_ids (list[str]):
            Ids of the units the player's targeting affected.
        summary (list[str]):
            Readable outcome of each effect on each target.

    """

    def __init__(
        self,
        state: BattleState,
        actor: Unit,
        command: Command,
        affected_ids: list[str],
        rng: random.Random,
        config: ResolverConfig,
        log: ExecutionLog,
    ) -> None:
        self.state = state
        self.actor = actor
        self.command = command
        self.affected_ids = affected_ids
        self.rng = rng
        self.config = config
        self.log = log
        self.summary: list[str] = []
        self.eliminated = False
        self.acts_again = False

    # =========================================================================
    # Status templates
    # =========================================================================

    def queue_applied_effects(self) -> None:
        """Queues each status template on each affected target that passes its chance roll."""
        for template in self.command.applied_effects:
            for target_id in self.affected_ids:
                if self.state.get_unit(target_id) is None:
                    self.log.debug(f"Skipping unknown target '{target_id}' for '{template.effect_id}'.")
                    continue
                if self.rng.random() >= template.chance:
                    self.log.info(f"Effect '{template.effect_id}' failed to land on {target_id}.")
                    continue
                instance = template.instantiate(self.command.display_name, self.actor.id, target_id)
                self.state.active_effects.append(instance)
                self.log.info(f"Queued effect '{template.effect_id}' for {target_id}.")

    # =========================================================================
    # Effect targets
    # =========================================================================

    def resolve_targets(self, effect: SkillEffect) -> list[Unit] | None:
        """
        Finds the units an effect lands on.

        Args:
            effect (SkillEffect): The effect.

        Returns:
            list[Unit] | None: The units, or None if the target value is unknown.

        """
        target = effect.effect_target
        if target == EffectTarget.CASTER:
            return [self.actor]
        if target in (EffectTarget.SELECTED, EffectTarget.AREA):
            units = []
            for unit_id in self.affected_ids:
                unit = self.state.get_unit(unit_id)
                if unit is None:
                    self.log.debug(f"Skipping unknown target '{unit_id}'.")
                    continue
                units.append(unit)
            return units
        if target == EffectTarget.CASTER_ADJACENT_ENEMIES:
            return units_within_distance(self.state, self.actor, 1, self.actor.type.opponent())
        self.log.warning(
            f"Unknown effect target '{effect.target}', skipping '{effect.type}'.",
            {"command_id": self.command.command_id},
        )
        return None

    # =========================================================================
    # Effect handlers
    # =========================================================================

    def _damage(self, effect: DamageEffect, target: Unit) -> None:
        amount = round_half_up(self.actor.stats.atk * effect.multiplier)
        result = apply_damage(target, amount)
        if register_hit(self.state, target, result, self.log):
            self.eliminated = True
        self.summary.append(f"{target.display_name} (-{result.dealt} HP)")

    def _heal(self, effect: HealEffect, target: Unit) -> None:
        basis = effect.basis(self.actor.stats.atk, target.stats.max_hp)
        amount = round_half_up(basis * effect.multiplier)
        apply_heal(target, amount)
        self.summary.append(f"{target.display_name} (+{amount} HP)")

    def _shield(self, effect: ShieldEffect, target: Unit) -> None:
        basis = effect.basis(self.actor.stats.atk, target.stats.max_hp)
        amount = round_half_up(basis * effect.multiplier)
        apply_shield(target, amount)
        self.summary.append(f"{target.display_name} (+{amount} Shield)")

    def _revive(self, effect: ReviveEffect, target: Unit) -> None:
        if not target.is_defeated:
            self.log.debug(f"{target.display_name} is not defeated, nothing to revive.")
            return
        fraction = effect.hp_percentage or self.config.default_revive_hp_fraction
        hp = apply_revive(target, fraction)
        index = insert_unit(self.state, target.id, self.config.revive_insert_index)
        self.summary.append(f"{target.display_name} (Revived)")
        self.log.info(f"{target.display_name} was revived with {hp} HP at turn order index {index}.")

    def _status(self, effect: StatusApplyEffect, target: Unit) -> None:
        if self.rng.random() >= effect.chance:
            self.log.info(f"Failed to apply {effect.status_name} to {target.display_name}.")
            return
        duration = effect.duration or self.config.default_status_duration
        existing = target.status_effects.find_debuff(effect.status_name)
        if existing is not None:
            duration = max(existing.duration, duration)
        record: dict[str, Any] = {
            "name": effect.status_name,
            "duration": duration,
            "sourceUnitId": self.actor.id,
            "source_skill_name": self.command.display_name,
            "target_id": target.id,
            "type": effect.status_name.lower(),
            **effect.effect_details,
        }
        instance = StatusEffectInstance.model_validate(record)

        if existing is not None:
            existing.duration = duration
            self.state.active_effects = [
                queued
                for queued in self.state.active_effects
                if not (queued.target_id == target.id and queued.name == effect.status_name)
            ]
            self.log.info(f"{effect.status_name} on {target.display_name} refreshed to {existing.duration} turns.")
        else:
            target.status_effects.debuffs.append(
                StatusRecord(name=effect.status_name, duration=duration, source_unit_id=self.actor.id)
            )
            self.log.info(f"{effect.status_name} applied to {target.display_name} for {duration} turns.")
        self.state.active_effects.append(instance)
        self.summary.append(f"{target.display_name} ({effect.status_name})")

    def _heal_lowest(self, effect: HealLowestEffect) -> None:
        allies = self.state.living_units(self.actor.type)
        if not allies:
            self.log.info("No living allies to heal.")
            return
        lowest = sorted(allies, key=lambda unit: unit.stats.hp_ratio)[0]
        basis = effect.basis(self.actor.stats.atk, lowest.stats.max_hp)
        amount = round_half_up(basis * effect.multiplier)
        apply_heal(lowest, amount)
        self.summary.append(f"{lowest.display_name} (+{amount} HP)")
        self.log.info(f"{lowest.display_name} has the lowest HP and is healed by {amount}.")

    def apply_effect(self, effect: SkillEffect) -> None:
        """
        Resolves one effect of the skill.

        Args:
            effect (SkillEffect): The effect.

        """
        if isinstance(effect, ActAgainEffect):
            self.acts_again = True
            self.log.info(f"{self.actor.display_name} will act again.")
            return
        if isinstance(effect, HealLowestEffect):
            self._heal_lowest(effect)
            return
        if isinstance(effect, UnknownEffect):
            self.log.warning(
                f"Unknown effect type '{effect.type}', skipping it.",
                {"command_id": self.command.command_id},
            )
            return

        targets = self.resolve_targets(effect)
        if targets is None:
            return
        if not targets:
            self.log.warning(
                f"No valid targets found for effect '{effect.type}'.",
                {"command_id": self.command.command_id},
            )
            return
        self.log.debug(f"Applying '{effect.type}' to: {', '.join(u.display_name for u in targets)}")

        for target in targets:
            if target.is_defeated and not isinstance(effect, ReviveEffect):
                continue
            if isinstance(effect, DamageEffect):
                self._damage(effect, target)
            elif isinstance(effect, HealEffect):
                self._heal(effect, target)
            elif isinstance(effect, ShieldEffect):
                self._shield(effect, target)
            elif isinstance(effect, ReviveEffect):
                self._revive(effect, target)
            elif isinstance(effect, StatusApplyEffect):
                self._status(effect, target)

    # =========================================================================
    # Finalization
    # =========================================================================

    def finalize(self) -> ActionOutcome:
        """Writes the battle message and action details and ends or extends the turn."""
        headline = f"{self.actor.display_name} used {self.command.display_name}!"
        unique = list(dict.fromkeys(self.summary))
        if not self.state.state.is_terminal():
            if unique:
                self.state.battle_message = f"{headline} {'. '.join(unique)}."
            elif self.acts_again:
                self.state.battle_message = headline
            else:
                self.state.battle_message = f"{headline} ...but no valid targets were found."

        self.state.last_action_details = LastActionDetails(
            actor_id=self.actor.id,
            command_id=self.command.command_id,
            command_name=self.command.display_name,
            targets=list(self.affected_ids),
            effects_summary=self.summary,
        )

        if self.acts_again:
            self.state.actor_should_act_again = self.actor.id
        else:
            self.actor.status = UnitStatus.END_TURN
        return ActionOutcome(
            was_target_eliminated=self.eliminated,
            actor_acts_again=self.acts_again,
            sfx_id=self.command.sfx_filename,
        )


def resolve_skill(
    state: BattleState,
    actor_id: str,
    command_id: str,
    affected_ids: list[str],
    rng: random.Random,
    config: ResolverConfig,
    log: ExecutionLog,
) -> ActionOutcome:
    """
    Resolves a skill.

    Args:
        state (BattleState): The battle document.
        actor_id (str): The unit using the skill.
        command_id (str): The skill's command id.
        affected_ids (list[str]): Ids of the units the player's targeting affected.
        rng (random.Random): The random source for chance rolls.
        config (ResolverConfig): The rule constants.
        log (ExecutionLog): The execution log.

    Returns:
        ActionOutcome: Elimination, act-again and sound effect outputs.

    Raises:
        InputError: If the actor or the command does not exist.
        InvalidActionError: If the actor is defeated.
        InsufficientResourceError: If the skill cannot be paid for.

    """
    actor = state.require_living_unit(actor_id, "actor")
    command = actor.get_command(command_id)
    if command is None:
        raise InputError(
            f"Command with ID {command_id} not found for Actor {actor.display_name}.",
            {"actor_id": actor_id, "command_id": command_id},
        )
    log.info(f"Actor: {actor.display_name} | Skill: {command.display_name}")
    if command.sfx_filename:
        log.debug(f"SFX found: {command.sfx_filename}")

    pay_skill_cost(state, actor, command, log)

    resolution = SkillResolution(state, actor, command, affected_ids, rng, config, log)
    resolution.queue_applied_effects()
    for effect in command.effects:
        resolution.apply_effect(effect)
    return resolution.finalize()
