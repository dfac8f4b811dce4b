"""
Evaluation context for automation conditions.

Variables reference four namespaces by dot path:

- ``trigger``   payload of the event that fired the automation
- ``actions``   outputs of actions that already ran, keyed by action id/name
- ``variables`` values assigned while the automation runs
- ``system``    facts about the moment of evaluation (time, date, weather)
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from conatus.core.config import settings

TRIGGER = "trigger"
ACTIONS = "actions"
VARIABLES = "variables"
SYSTEM = "system"


@dataclass
class SystemFacts:
    """Facts about the moment an automation is evaluated."""

    now: datetime
    timezone: str = "UTC"
    weather: Optional[Dict[str, Any]] = None

    @classmethod
    def capture(
        cls,
        tz_name: Optional[str] = None,
        weather: Optional[Dict[str, Any]] = None,
        now: Optional[datetime] = None,
    ) -> "SystemFacts":
        """
        Snapshot the current time in the given timezone.

        Weather is supplied by the caller; it is not fetched here.
        """
        tz_name = tz_name or settings.default_timezone
        try:
            tz = ZoneInfo(tz_name)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone '{tz_name}'") from None

        if now is None:
            now = datetime.now(timezone.utc)
        elif now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)

        return cls(now=now.astimezone(tz), timezone=tz_name, weather=weather)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "time": self.now.strftime("%H:%M"),
            "date": self.now.date().isoformat(),
            "dateTime": self.now.isoformat(),
            "dayOfWeek": self.now.strftime("%A").lower(),
            "hour": self.now.hour,
            "timezone": self.timezone,
            "weather": self.weather or {},
        }


@dataclass
class EvaluationContext:
    """Everything a condition can reference."""

    trigger: Dict[str, Any] = field(default_factory=dict)
    actions: Dict[str, Any] = field(default_factory=dict)
    variables: Dict[str, Any] = field(default_factory=dict)
    system: Optional[SystemFacts] = None

    def to_dict(self) -> Dict[str, Any]:
        system = self.system or SystemFacts.capture()
        return {
            TRIGGER: self.trigger,
            ACTIONS: self.actions,
            VARIABLES: self.variables,
            SYSTEM: system.as_dict(),
        }


def build_context(
    trigger_data: Optional[Dict[str, Any]] = None,
    action_results: Optional[Dict[str, Any]] = None,
    variables: Optional[Dict[str, Any]] = None,
    system: Optional[SystemFacts] = None,
) -> Dict[str, Any]:
    """Assemble the mapping condition paths are resolved against."""
    return EvaluationContext(
        trigger=trigger_data or {},
        actions=action_results or {},
        variables=variables or {},
        system=system,
    ).to_dict()
