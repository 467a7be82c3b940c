"""
Keyword heuristics that turn the text service's structured answer into a
SchedulingRequest.

Each field is resolved by an ordered rule table of (keywords, value) pairs.
Rules are checked top to bottom and the first rule with any keyword present
in the text wins, so the order of the tables is part of the behaviour.
"""

import re

from .models import SchedulingRequest

Rule = tuple[tuple[str, ...], object]


class MalformedRequestError(ValueError):
    """Raised when no scheduling request can be read from the text."""


DEFAULT_FREQUENCY = 3
DEFAULT_DURATION_MINUTES = 45

FREQUENCY_PATTERN = re.compile(r"(\d+)\s*times")
DURATION_PATTERN = re.compile(r"(\d+)[-\s]*(?:minutes?|min)", re.IGNORECASE)

FREQUENCY_RULES: list[Rule] = [
    (("daily", "every day"), 7),
    (("eight times",), 8),
    (("seven times",), 7),
    (("six times",), 6),
    (("five times",), 5),
    (("four times",), 4),
    (("three times",), 3),
    (("twice", "two times"), 2),
    (("once", "one time"), 1),
]

DURATION_RULES: list[Rule] = [
    (("hour",), 60),
    (("guitar", "piano"), 45),
    (("exercise", "workout"), 60),
]

PREFERRED_TIME_RULES: list[Rule] = [
    (("morning",), "morning"),
    (("evening", "after dinner", "night"), "evening"),
    (("afternoon",), "afternoon"),
]

URGENCY_RULES: list[Rule] = [
    (("urgent", "asap", "immediately", "emergency", "critical", "tomorrow"), "high"),
    (("this week", "by friday", "by tomorrow"), "high"),
    (("soon", "quickly", "next week", "important"), "medium"),
    # Explicit markers from the structured answer
    (("urgency: high",), "high"),
    (("urgency: medium",), "medium"),
]


def first_match(rules: list[Rule], lowered: str, default: object) -> object:
    """Return the value of the first rule whose keywords occur in the text."""
    for keywords, value in rules:
        if any(keyword in lowered for keyword in keywords):
            return value
    return default


def extract_frequency(text: str) -> int:
    lowered = text.lower()
    match = FREQUENCY_PATTERN.search(lowered)
    if match:
        return int(match.group(1))
    return first_match(FREQUENCY_RULES, lowered, DEFAULT_FREQUENCY)


def extract_duration_minutes(text: str) -> int:
    match = DURATION_PATTERN.search(text)
    if match:
        return int(match.group(1))
    return first_match(DURATION_RULES, text.lower(), DEFAULT_DURATION_MINUTES)


def extract_preferred_time(text: str) -> str:
    return first_match(PREFERRED_TIME_RULES, text.lower(), "flexible")


def extract_urgency(text: str) -> str:
    return first_match(URGENCY_RULES, text.lower(), "low")


def _labelled_line(text: str, label: str) -> str | None:
    """Value of a "Label: value" line, matched case-insensitively."""
    prefix = f"{label.lower()}:"
    for line in text.splitlines():
        stripped = line.strip()
        if stripped.lower().startswith(prefix):
            return stripped[len(prefix):].strip()
    return None


def extract_activity_name(text: str) -> str:
    """Activity named on the "Activity:" line, or a generic placeholder."""
    return _labelled_line(text, "Activity") or "your activity"


def extract_deadline(text: str) -> str | None:
    """Deadline named on the "Deadline:" line; None when absent or "none"."""
    deadline = _labelled_line(text, "Deadline")
    if not deadline or deadline.lower() == "none":
        return None
    return deadline


def parse_request(text: str | None) -> SchedulingRequest:
    """Build a SchedulingRequest from structured request text.

    Raises:
        MalformedRequestError: If there is no text to read from.
    """
    if text is None or not text.strip():
        raise MalformedRequestError("Could not understand request")

    # "0 times" / "0 minutes" would make an invalid request; use the defaults
    frequency = extract_frequency(text) or DEFAULT_FREQUENCY
    duration = extract_duration_minutes(text) or DEFAULT_DURATION_MINUTES

    return SchedulingRequest(
        frequency=frequency,
        duration_minutes=duration,
        preferred_time=extract_preferred_time(text),
        urgency=extract_urgency(text),
    )
