"""
The scheduling bot - wires the text service, the slot planner and the
calendar together.

Flow for one request:
1. Text service turns the free-text request into labelled lines
2. Extraction helpers read a SchedulingRequest from those lines
3. Slot planner finds conflict-free times
4. Text service explains the result (plus a per-day breakdown)
5. On confirmation, one calendar event is created per session
"""

import asyncio
import logging
from datetime import datetime
from typing import Any

from .calendar_tools import GoogleCalendarOracle, calendar_create_sessions
from .extraction import MalformedRequestError, extract_activity_name, parse_request
from .formatting import capitalize_words, format_daily_breakdown
from .llm import TextService
from .models import ScheduleResult
from .planner import AvailabilityOracle, SlotPlanner

logger = logging.getLogger(__name__)

NO_SLOTS_SUGGESTIONS = [
    "Being more flexible with preferred times",
    "Reducing frequency",
    "Extending the deadline",
]


class SchedulingBot:
    """Turns scheduling requests into conflict-free sessions."""

    def __init__(
        self,
        text_service: TextService | None = None,
        oracle: AvailabilityOracle | None = None,
        planner: SlotPlanner | None = None,
    ):
        self.text_service = text_service or TextService()
        self.planner = planner or SlotPlanner(oracle or GoogleCalendarOracle())

    async def schedule(self, user_request: str, now: datetime | None = None) -> ScheduleResult:
        """Understand, plan and explain one request.

        An empty scheduled_times list means no slot was free; the result is
        still returned so the caller can suggest relaxing the request.

        Raises:
            MalformedRequestError: If the request could not be understood.
        """
        activity_info = await asyncio.to_thread(self.text_service.understand_request, user_request)
        if activity_info is None:
            raise MalformedRequestError("Could not understand request")

        request = parse_request(activity_info)
        activity_name = extract_activity_name(activity_info)
        logger.info("Understood: %s", activity_name)

        times = await self.planner.plan(request, now)
        result = ScheduleResult(
            activity_info=activity_info,
            activity_name=activity_name,
            request=request,
            scheduled_times=times,
        )
        if not times:
            logger.warning("No conflict-free times found for %s", activity_name)
            return result

        explanation = await asyncio.to_thread(
            self.text_service.explain_schedule, times, activity_info, request.urgency
        )
        result.explanation = explanation + format_daily_breakdown(times, request.urgency)
        return result

    def add_to_calendar(self, result: ScheduleResult) -> dict[str, Any]:
        """Create one calendar event per scheduled session."""
        outcome = calendar_create_sessions(
            title=capitalize_words(result.activity_name),
            scheduled_times=result.scheduled_times,
            duration_minutes=result.request.duration_minutes,
            description=result.activity_info,
        )
        result.calendar_events = outcome["events"]
        logger.info(outcome["message"])
        return outcome
