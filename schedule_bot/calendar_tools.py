"""
Google Calendar tools for schedule_bot.

Provides conflict lookup and session creation via the Calendar API v3.
Requires a one-time OAuth setup: `python -m schedule_bot calendar-setup`

Tool functions return dict[str, Any] with either success data or {"error": "..."}.
GoogleCalendarOracle wraps the conflict lookup for the slot planner.
"""

import asyncio
import logging
from datetime import datetime, time, timedelta
from typing import Any

from .config import settings

logger = logging.getLogger(__name__)


# =============================================================================
# OAuth / Service Helper
# =============================================================================

SCOPES = ["https://www.googleapis.com/auth/calendar"]


def _get_calendar_service(timeout: float | None = None):
    """Build and return an authenticated Google Calendar service.

    Loads credentials from the token file (created by `calendar-setup`).
    Auto-refreshes expired tokens using the stored refresh token.
    A timeout bounds every HTTP request the service makes.

    Raises:
        RuntimeError: If credentials file or token file are missing / invalid.
    """
    try:
        import httplib2
        from google.oauth2.credentials import Credentials
        from google.auth.transport.requests import Request
        from google_auth_httplib2 import AuthorizedHttp
        from googleapiclient.discovery import build
    except ImportError:
        raise RuntimeError(
            "Google API libraries not installed. Run: "
            "pip install google-api-python-client google-auth-httplib2 google-auth-oauthlib"
        )

    token_path = settings.google_calendar_token_file
    creds = None

    if token_path.exists():
        creds = Credentials.from_authorized_user_file(str(token_path), SCOPES)

    if not creds:
        raise RuntimeError(
            "Google Calendar not set up. Run: python -m schedule_bot calendar-setup"
        )

    if not creds.valid:
        if creds.expired and creds.refresh_token:
            creds.refresh(Request())
            token_path.write_text(creds.to_json())
        else:
            raise RuntimeError(
                "Google Calendar token is invalid. Re-run: python -m schedule_bot calendar-setup"
            )

    if timeout is None:
        return build("calendar", "v3", credentials=creds)
    http = AuthorizedHttp(creds, http=httplib2.Http(timeout=timeout))
    return build("calendar", "v3", http=http)


def _parse_event(event: dict) -> dict:
    """Extract the fields we care about from a raw Calendar API event."""
    start = event.get("start", {})
    end = event.get("end", {})

    return {
        "id": event.get("id", ""),
        "title": event.get("summary", "(no title)"),
        "start": start.get("dateTime") or start.get("date", ""),
        "end": end.get("dateTime") or end.get("date", ""),
        "description": event.get("description", ""),
        "link": event.get("htmlLink", ""),
    }


def _to_rfc3339(dt: datetime) -> str:
    """RFC 3339 timestamp with offset; naive datetimes are read as local time."""
    if dt.tzinfo is None:
        dt = dt.astimezone()
    return dt.isoformat()


def _make_timed_field(dt: datetime) -> dict:
    """Build a Calendar API start/end timed-event object."""
    return {
        "dateTime": _to_rfc3339(dt),
        "timeZone": settings.calendar_timezone,
    }


# =============================================================================
# Tool Implementations
# =============================================================================

def calendar_check_conflicts(
    start: datetime,
    duration_minutes: int,
    service: Any = None,
) -> dict[str, Any]:
    """Look for events overlapping [start, start + duration).

    Args:
        start: Proposed session start
        duration_minutes: Proposed session length
        service: Already-built Calendar service to reuse (built on demand otherwise)

    Returns:
        Dict with "conflict" flag and the overlapping "events"
    """
    end = start + timedelta(minutes=duration_minutes)

    try:
        service = service or _get_calendar_service()

        result = service.events().list(
            calendarId=settings.google_calendar_id,
            timeMin=_to_rfc3339(start),
            timeMax=_to_rfc3339(end),
            singleEvents=True,
            orderBy="startTime",
        ).execute()
        events = [_parse_event(e) for e in result.get("items", [])]

        for event in events:
            logger.debug("Conflicting event: %s at %s", event["title"], event["start"])

        return {"conflict": bool(events), "events": events, "count": len(events)}

    except RuntimeError as e:
        return {"error": str(e)}
    except Exception as e:
        return {"error": f"Failed to check conflicts: {str(e)}"}


def calendar_add_event(
    title: str,
    start: datetime,
    duration_minutes: int,
    description: str | None = None,
    location: str | None = None,
) -> dict[str, Any]:
    """Create a single timed event with email and popup reminders.

    Args:
        title: Event title/summary
        start: Start datetime
        duration_minutes: Event length
        description: Optional event description / notes
        location: Optional location (room, URL, address)

    Returns:
        Dict with created event details including id and link
    """
    try:
        service = _get_calendar_service()

        body: dict[str, Any] = {
            "summary": title,
            "start": _make_timed_field(start),
            "end": _make_timed_field(start + timedelta(minutes=duration_minutes)),
            "reminders": {
                "useDefault": False,
                "overrides": [
                    {"method": "email", "minutes": settings.reminder_email_minutes},
                    {"method": "popup", "minutes": settings.reminder_popup_minutes},
                ],
            },
        }
        if description:
            body["description"] = description
        if location:
            body["location"] = location

        event = service.events().insert(
            calendarId=settings.google_calendar_id,
            body=body,
        ).execute()

        return {
            "success": True,
            "event": _parse_event(event),
            "message": f"Event '{title}' created successfully",
        }

    except RuntimeError as e:
        return {"error": str(e)}
    except Exception as e:
        return {"error": f"Failed to create event: {str(e)}"}


def calendar_create_sessions(
    title: str,
    scheduled_times: list[datetime],
    duration_minutes: int,
    description: str = "",
) -> dict[str, Any]:
    """Create one event per scheduled session, titled "<title> (Session N)".

    Sessions that fail to create are reported in "failed" and do not stop
    the remaining ones.

    Returns:
        Dict with created "events", "created" count and "failed" list
    """
    created: list[dict[str, Any]] = []
    failed: list[dict[str, str]] = []

    for i, start in enumerate(scheduled_times, 1):
        result = calendar_add_event(
            title=f"{title} (Session {i})",
            start=start,
            duration_minutes=duration_minutes,
            description=f"{description}\n\nScheduled by schedule_bot".strip(),
        )
        if "error" in result:
            logger.warning("Could not create session %d at %s: %s", i, start, result["error"])
            failed.append({"start": start.isoformat(), "error": result["error"]})
        else:
            created.append(result["event"])

    return {
        "success": not failed,
        "events": created,
        "created": len(created),
        "failed": failed,
        "message": f"Created {len(created)} of {len(scheduled_times)} events",
    }


def calendar_list_events_today(now: datetime | None = None) -> dict[str, Any]:
    """List today's events on the configured calendar.

    Returns:
        Dict with "events" list and "count"
    """
    now = now or datetime.now()
    day_start = datetime.combine(now.date(), time(), tzinfo=now.tzinfo)

    try:
        service = _get_calendar_service()

        result = service.events().list(
            calendarId=settings.google_calendar_id,
            timeMin=_to_rfc3339(day_start),
            timeMax=_to_rfc3339(day_start + timedelta(days=1)),
            singleEvents=True,
            orderBy="startTime",
        ).execute()
        events = [_parse_event(e) for e in result.get("items", [])]

        return {"events": events, "count": len(events)}

    except RuntimeError as e:
        return {"error": str(e)}
    except Exception as e:
        return {"error": f"Failed to list events: {str(e)}"}


# =============================================================================
# Availability oracle
# =============================================================================

class GoogleCalendarOracle:
    """Availability oracle backed by the Google Calendar events list.

    The Google client is blocking, so each lookup runs in a worker thread.
    The service is built on the first lookup and reused afterwards; its HTTP
    requests carry the same timeout the planner applies to a probe. A probe
    the planner abandons still finishes its request in the background, so
    right after a timeout two lookups can briefly overlap.

    Lookup errors are raised; the planner decides how to treat them.
    """

    def __init__(self, timeout: float | None = None):
        self.timeout = settings.oracle_timeout_seconds if timeout is None else timeout
        self._service = None

    def _lookup(self, start: datetime, duration_minutes: int) -> dict[str, Any]:
        if self._service is None:
            self._service = _get_calendar_service(timeout=self.timeout)
        return calendar_check_conflicts(start, duration_minutes, service=self._service)

    async def check_conflict(self, start: datetime, duration_minutes: int) -> bool:
        result = await asyncio.to_thread(self._lookup, start, duration_minutes)
        if "error" in result:
            raise RuntimeError(result["error"])
        return result["conflict"]
