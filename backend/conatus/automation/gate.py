"""
Automation Gate - decides whether a triggered automation's actions fire.

An automation runs when it is active and its conditional logic (if any)
holds for the trigger event. Every decision is logged with the automation
id so runs can be audited.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import Field, model_validator

from conatus.automation.conditions import ConditionalExpression, CamelModel, count_conditions
from conatus.automation.context import SystemFacts, build_context
from conatus.automation.evaluator import check_nesting, evaluate_group
from conatus.automation.exceptions import TooManyConditionsError
from conatus.core.config import settings
from conatus.core.logging import log_with_context

logger = logging.getLogger(__name__)


class TriggerType(str, Enum):
    TIME = "time"
    EVENT = "event"
    LOCATION = "location"
    CONDITION = "condition"


_LOCATION_EVENTS = ("enter", "exit", "both")


class ActionType(str, Enum):
    SEND = "send"
    FETCH = "fetch"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    NOTIFY = "notify"
    ORDER = "order"


class Trigger(CamelModel):
    type: TriggerType
    config: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode='after')
    def validate_config(self) -> 'Trigger':
        """Check the config carries what its trigger type needs."""
        config = self.config

        if self.type == TriggerType.TIME:
            schedule = config.get("schedule")
            if not schedule:
                raise ValueError("Time-based trigger requires a schedule")
            # Five cron fields: minute hour day month weekday
            if not isinstance(schedule, str) or len(schedule.split(" ")) != 5:
                raise ValueError("Invalid cron schedule format")

        elif self.type == TriggerType.EVENT:
            if not config.get("service"):
                raise ValueError("Event-based trigger requires a service name")
            if not config.get("event"):
                raise ValueError("Event-based trigger requires an event type")

        elif self.type == TriggerType.LOCATION:
            if not config.get("area"):
                raise ValueError("Location-based trigger requires an area name")
            if config.get("event") not in _LOCATION_EVENTS:
                raise ValueError("Location-based trigger requires a valid event (enter, exit, or both)")

        elif self.type == TriggerType.CONDITION:
            if not config.get("condition"):
                raise ValueError("Condition-based trigger requires a condition type")
            if not config.get("operator"):
                raise ValueError("Condition-based trigger requires an operator")
            if "value" not in config:
                raise ValueError("Condition-based trigger requires a value")

        return self


class Action(CamelModel):
    type: ActionType
    service: str = Field(min_length=1)
    config: Dict[str, Any] = Field(default_factory=dict)


class Automation(CamelModel):
    """The parts of an automation the gate needs."""

    id: Optional[str] = None
    name: str = Field(min_length=1)
    description: Optional[str] = None
    is_active: bool = True
    trigger: Trigger
    conditional_logic: Optional[ConditionalExpression] = None
    actions: List[Action] = Field(min_length=1)


class DecisionReason(str, Enum):
    INACTIVE = "inactive"
    NO_CONDITIONS = "no_conditions"
    CONDITIONS_MET = "conditions_met"
    CONDITIONS_NOT_MET = "conditions_not_met"


@dataclass
class GateDecision:
    """Whether an automation fires, and why."""

    should_run: bool
    reason: DecisionReason
    evaluated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    context: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "shouldRun": self.should_run,
            "reason": self.reason.value,
            "evaluatedAt": self.evaluated_at.isoformat(),
            "context": self.context,
        }


class AutomationGate:
    """
    Evaluates automations against trigger events.

    Limits default to the configured values; conditional logic that
    exceeds them raises instead of being evaluated.
    """

    def __init__(
        self,
        max_nesting_level: Optional[int] = None,
        max_conditions: Optional[int] = None,
    ):
        self.max_nesting_level = (
            max_nesting_level if max_nesting_level is not None else settings.condition_max_nesting_level
        )
        self.max_conditions = (
            max_conditions if max_conditions is not None else settings.condition_max_conditions
        )

    def should_run(
        self,
        automation: Automation,
        trigger_data: Optional[Dict[str, Any]] = None,
        action_results: Optional[Dict[str, Any]] = None,
        variables: Optional[Dict[str, Any]] = None,
        system: Optional[SystemFacts] = None,
        request_id: Optional[str] = None,
    ) -> GateDecision:
        context = build_context(trigger_data, action_results, variables, system)

        if not automation.is_active:
            decision = GateDecision(False, DecisionReason.INACTIVE, context=context)
        elif automation.conditional_logic is None or automation.conditional_logic.is_empty:
            decision = GateDecision(True, DecisionReason.NO_CONDITIONS, context=context)
        else:
            root = automation.conditional_logic.root_group
            total = count_conditions(root)
            if total > self.max_conditions:
                raise TooManyConditionsError(total, self.max_conditions)
            check_nesting(root, self.max_nesting_level)

            met = evaluate_group(root, context)
            reason = DecisionReason.CONDITIONS_MET if met else DecisionReason.CONDITIONS_NOT_MET
            decision = GateDecision(met, reason, context=context)

        log_with_context(
            logger,
            logging.INFO,
            f"[GATE] Automation '{automation.name}' -> {decision.reason.value}",
            request_id=request_id,
            automation_id=automation.id,
            decision=decision.should_run,
        )
        return decision
