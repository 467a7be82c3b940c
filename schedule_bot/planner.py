"""
Slot planner - turns a SchedulingRequest into concrete session start times.

The planner walks forward one day at a time from "now". For each day it
builds an ordered list of hour-aligned candidate slots, asks the availability
oracle about each one in turn and keeps the conflict-free ones until either
the requested number of sessions is reached or the search horizon runs out.

A short schedule is a normal result, not an error: callers decide how to
present it.
"""

import asyncio
import logging
from datetime import date, datetime, time, timedelta
from typing import Protocol

from .config import settings
from .extraction import parse_request
from .models import SchedulingRequest

logger = logging.getLogger(__name__)


# =============================================================================
# Slot tables
# =============================================================================

MORNING_HOURS = (7, 8, 9, 10)
AFTERNOON_HOURS = (13, 14, 15, 16, 17)
EVENING_HOURS = (18, 19, 20)
LATE_EVENING_HOUR = 21  # only offered to high-urgency requests

# Hours borrowed from the other parts of the day when urgency overrides preference
URGENT_EXPANSION_HOURS: dict[str, tuple[int, ...]] = {
    "morning": (7, 8, 9),
    "afternoon": (13, 14, 15, 16),
    "evening": (18, 19, 20, 21),
}
URGENT_EXTRA_HOURS = (12, 22)  # lunch and late slots

WEEKEND = (5, 6)  # date.weekday() for Saturday, Sunday


class AvailabilityOracle(Protocol):
    """Anything that can tell whether an interval collides with the calendar."""

    async def check_conflict(self, start: datetime, duration_minutes: int) -> bool:
        ...


# =============================================================================
# Horizon and candidate slots
# =============================================================================

def choose_horizon_days(urgency: str, frequency: int) -> int:
    """How many calendar days ahead to search.

    Urgent or high-frequency requests stay in the near term; low urgency
    gets three weeks to find preferred slots.
    """
    if urgency == "high" or frequency > 5:
        return 10
    if urgency == "low":
        return 21
    return 14


def _evening_hours(urgency: str) -> tuple[int, ...]:
    if urgency == "high":
        return EVENING_HOURS + (LATE_EVENING_HOUR,)
    return EVENING_HOURS


def _candidate_hours(preferred_time: str, urgency: str) -> list[int]:
    if preferred_time == "morning":
        hours = list(MORNING_HOURS)
    elif preferred_time == "afternoon":
        hours = list(AFTERNOON_HOURS)
    elif preferred_time == "evening":
        hours = list(_evening_hours(urgency))
    else:
        hours = [*MORNING_HOURS, *AFTERNOON_HOURS, *_evening_hours(urgency)]

    if urgency == "high" and preferred_time != "flexible":
        for part_of_day, extra in URGENT_EXPANSION_HOURS.items():
            if part_of_day != preferred_time:
                hours.extend(extra)
        hours.extend(URGENT_EXTRA_HOURS)

    return hours


def generate_candidate_slots(
    day: date,
    preferred_time: str,
    duration_minutes: int,
    urgency: str,
    now: datetime,
) -> list[datetime]:
    """Ordered, de-duplicated candidate start times for one day.

    Args:
        day: Calendar day to fill
        preferred_time: "morning", "afternoon", "evening" or "flexible"
        duration_minutes: Session length (slot timing does not depend on it)
        urgency: "low", "medium" or "high"
        now: Evaluation instant; slots at or before it are dropped.
             Slots inherit its tzinfo, so pass a naive local time or one
             carrying a zoneinfo zone. A fixed offset such as
             datetime.now().astimezone() puts slots an hour off wall-clock
             time once a DST change falls inside the horizon.

    Returns:
        Ascending list of on-the-hour datetimes, possibly empty
    """
    if urgency == "low" and day.weekday() in WEEKEND:
        return []

    slots = {
        datetime.combine(day, time(hour), tzinfo=now.tzinfo)
        for hour in _candidate_hours(preferred_time, urgency)
    }
    return sorted(slot for slot in slots if slot > now)


# =============================================================================
# Planner
# =============================================================================

_FROM_SETTINGS = object()


class SlotPlanner:
    """
    Accumulates conflict-free slots day by day.

    The planner holds configuration only; every call to plan() keeps its own
    accepted list and per-day counter, so one planner can serve concurrent
    requests.
    """

    def __init__(
        self,
        oracle: AvailabilityOracle,
        max_sessions_per_day: int | None = None,
        fail_open: bool | None = None,
        probe_timeout: float | None = _FROM_SETTINGS,
    ):
        self.oracle = oracle
        self.max_sessions_per_day = (
            settings.max_sessions_per_day if max_sessions_per_day is None else max_sessions_per_day
        )
        self.fail_open = settings.oracle_fail_open if fail_open is None else fail_open
        self.probe_timeout = (
            settings.oracle_timeout_seconds if probe_timeout is _FROM_SETTINGS else probe_timeout
        )

        if self.max_sessions_per_day < 1:
            raise ValueError("max_sessions_per_day must be at least 1")
        if self.probe_timeout is not None and self.probe_timeout < 0:
            raise ValueError("probe_timeout must be positive, 0 or None to disable")

    async def _has_conflict(self, slot: datetime, duration_minutes: int) -> bool:
        """Probe the oracle once. Failures resolve according to fail_open."""
        try:
            probe = self.oracle.check_conflict(slot, duration_minutes)
            if self.probe_timeout:
                return bool(await asyncio.wait_for(probe, self.probe_timeout))
            return bool(await probe)
        except Exception as e:
            outcome = "no conflict" if self.fail_open else "conflict"
            logger.warning(
                "Availability check failed for %s (%r); treating as %s",
                slot.isoformat(), e, outcome,
            )
            return not self.fail_open

    async def plan(self, request: SchedulingRequest, now: datetime | None = None) -> list[datetime]:
        """Find up to request.frequency conflict-free slots.

        Days are visited in order and, within a day, slots in ascending time,
        with one oracle probe awaited at a time. The result is chronological
        and may be shorter than requested.

        now defaults to naive local time; see generate_candidate_slots for
        aware values.
        """
        now = now or datetime.now()
        horizon = choose_horizon_days(request.urgency, request.frequency)

        logger.info(
            "Looking for %d sessions of %d minutes each (%s, %s urgency, %d days, up to %d per day)",
            request.frequency, request.duration_minutes, request.preferred_time,
            request.urgency, horizon, self.max_sessions_per_day,
        )

        accepted: list[datetime] = []
        today = now.date()

        for offset in range(horizon):
            if len(accepted) >= request.frequency:
                break

            day = today + timedelta(days=offset)
            candidates = generate_candidate_slots(
                day,
                request.preferred_time,
                request.duration_minutes,
                request.urgency,
                now,
            )

            sessions_today = 0
            for slot in candidates:
                if sessions_today >= self.max_sessions_per_day:
                    break
                if len(accepted) >= request.frequency:
                    break

                logger.debug("Checking %s", slot.strftime("%A %H:%M"))
                if await self._has_conflict(slot, request.duration_minutes):
                    logger.debug("Conflict at %s", slot.isoformat())
                    continue

                accepted.append(slot)
                sessions_today += 1

            if sessions_today:
                logger.info(
                    "Added %d session(s) on %s (%d/%d total)",
                    sessions_today, day.strftime("%A, %B %d"), len(accepted), request.frequency,
                )

        if len(accepted) < request.frequency:
            logger.warning(
                "Only found %d conflict-free slots out of %d requested; "
                "consider more flexible times or a longer date range",
                len(accepted), request.frequency,
            )

        return accepted

    async def find_schedule(self, activity_info: str, now: datetime | None = None) -> list[datetime]:
        """Parse structured request text and plan it.

        Raises:
            MalformedRequestError: If the text is empty.
        """
        return await self.plan(parse_request(activity_info), now)
