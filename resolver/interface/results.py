"""
Result of a resolution call and its mapping to the host's output variables.
"""

import json
from typing import Any

from pydantic import BaseModel, Field

from actions.base_action import ActionOutcome
from battle.battle_state import BattleState
from battle.progression_data import ProgressionData
from core.constants import BattleStateTag
from core.error_handling import build_error_document, describe_error
from core.logging import ExecutionLog


def _flag(value: bool) -> str:
    return "true" if value else "false"


class ResolutionResult(BaseModel):
    """Everything a resolution call hands back to its caller."""

    battle_state: dict[str, Any] | None = Field(
        default=None,
        description="The next battle document, None for calls that do not touch a battle.",
    )
    log: str = Field(
        default="",
        description="The execution log of the call.",
    )
    was_target_eliminated: bool = Field(default=False)
    sfx_id: str = Field(
        default="",
        description="Sound effect file of the skill used, empty when there is none.",
    )
    actor_acts_again: bool = Field(default=False)
    progression: dict[str, Any] | None = Field(
        default=None,
        description="The updated progression document, for progression calls.",
    )
    did_level_up: bool = Field(default=False)
    error: str | None = Field(
        default=None,
        description="Description of the failure, None on success.",
    )

    @classmethod
    def success(
        cls,
        state: BattleState | None,
        log: ExecutionLog,
        outcome: ActionOutcome | None = None,
        progression: ProgressionData | None = None,
        did_level_up: bool = False,
    ) -> "ResolutionResult":
        """
        Builds the result of a call that went through.

        Args:
            state (BattleState | None): The updated battle document.
            log (ExecutionLog): The execution log.
            outcome (ActionOutcome | None): Side outputs of the action, if any.
            progression (ProgressionData | None): The updated progression document.
            did_level_up (bool): Whether an exercise gained a level.

        Returns:
            ResolutionResult: The result.

        """
        outcome = outcome or ActionOutcome()
        error = None
        if state is not None and state.state == BattleStateTag.ERROR:
            error = state.battle_message
        return cls(
            battle_state=state.to_document() if state is not None else None,
            log=log.text,
            was_target_eliminated=outcome.was_target_eliminated,
            sfx_id=outcome.sfx_id or "",
            actor_acts_again=outcome.actor_acts_again,
            progression=progression.to_document() if progression is not None else None,
            did_level_up=did_level_up,
            error=error,
        )

    @classmethod
    def failure(
        cls,
        raw_document: Any,
        label: str,
        error: Exception,
        log: ExecutionLog,
        raw_progression: Any = None,
        with_battle_state: bool = True,
    ) -> "ResolutionResult":
        """
        Builds the result of a call that failed.

        The battle document is the input document tagged as an error; the
        progression document, when the call has one, is returned unchanged.

        Args:
            raw_document (Any): The decoded input battle document, if any.
            label (str): Human-readable name of the failing step.
            error (Exception): The error raised inside the call.
            log (ExecutionLog): The execution log.
            raw_progression (Any): The decoded input progression document, if any.
            with_battle_state (bool): False for calls that do not touch a battle.

        Returns:
            ResolutionResult: The result.

        """
        document = build_error_document(raw_document, label, error, log)
        return cls(
            battle_state=document if with_battle_state else None,
            log=log.text,
            progression=raw_progression if isinstance(raw_progression, dict) else None,
            error=describe_error(error),
        )

    def to_outputs(self) -> dict[str, str]:
        """
        Maps the result to the host's output variables.

        Documents are JSON strings and flags are ``"true"`` / ``"false"``.

        Returns:
            dict[str, str]: The output variables.

        """
        progression = json.dumps(self.progression) if self.progression is not None else ""
        return {
            "battle_state": json.dumps(self.battle_state) if self.battle_state is not None else "",
            "js_script_log": self.log,
            "was_target_eliminated": _flag(self.was_target_eliminated),
            "skills_sfx": self.sfx_id,
            "actorActsAgain": _flag(self.actor_acts_again),
            "new_progression_data_to_save": progression,
            "new_progression_data": progression,
            "did_level_up": _flag(self.did_level_up),
        }
