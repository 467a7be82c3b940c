"""
Data types shared by the extraction helpers, the slot planner and the bot.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal, get_args

PreferredTime = Literal["morning", "afternoon", "evening", "flexible"]
Urgency = Literal["low", "medium", "high"]

PREFERRED_TIMES: tuple[str, ...] = get_args(PreferredTime)
URGENCY_LEVELS: tuple[str, ...] = get_args(Urgency)


@dataclass(frozen=True)
class SchedulingRequest:
    """Structured form of an activity request.

    Attributes:
        frequency: Number of sessions wanted
        duration_minutes: Length of each session
        preferred_time: Time of day the user asked for, or "flexible"
        urgency: How hard the planner should push to find slots
    """
    frequency: int
    duration_minutes: int
    preferred_time: PreferredTime = "flexible"
    urgency: Urgency = "low"

    def __post_init__(self) -> None:
        if self.frequency < 1:
            raise ValueError(f"frequency must be positive, got {self.frequency}")
        if self.duration_minutes < 1:
            raise ValueError(f"duration_minutes must be positive, got {self.duration_minutes}")
        if self.preferred_time not in PREFERRED_TIMES:
            raise ValueError(f"Unknown preferred time '{self.preferred_time}'")
        if self.urgency not in URGENCY_LEVELS:
            raise ValueError(f"Unknown urgency '{self.urgency}'")


@dataclass
class ScheduleResult:
    """Everything the bot produced for one request."""
    activity_info: str
    activity_name: str
    request: SchedulingRequest
    scheduled_times: list[datetime]
    explanation: str = ""
    calendar_events: list[dict[str, Any]] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        """True when every requested session found a slot."""
        return len(self.scheduled_times) >= self.request.frequency
