"""Tests for the keyword rule tables that build SchedulingRequest."""
from __future__ import annotations

import pytest

from schedule_bot.extraction import (
    FREQUENCY_RULES,
    MalformedRequestError,
    extract_activity_name,
    extract_deadline,
    extract_duration_minutes,
    extract_frequency,
    extract_preferred_time,
    extract_urgency,
    first_match,
    parse_request,
)
from schedule_bot.models import SchedulingRequest

STRUCTURED = """Activity: guitar practice
How often: 3 times per week
How long: 45 minutes
When: evening
Deadline: none
Urgency: low"""


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Practice 3 times a week", 3),
        ("How often: 10 times", 10),
        ("twice a week, but really 5 times", 5),
        ("I want to run daily", 7),
        ("every day please", 7),
        ("eight times before the recital", 8),
        ("Six times this month", 6),
        ("twice a week", 2),
        ("two times a week", 2),
        ("once a week", 1),
        ("one time only", 1),
        ("whenever I can", 3),
        ("", 3),
    ],
)
def test_extract_frequency(text, expected) -> None:
    assert extract_frequency(text) == expected


@pytest.mark.parametrize(
    "text, expected",
    [
        ("How long: 30 minutes", 30),
        ("a 90-minute session", 90),
        ("20 min each", 20),
        ("15 Minutes", 15),
        ("about an hour", 60),
        ("2 hours of reading", 60),
        ("guitar practice", 45),
        ("piano", 45),
        ("morning workout", 60),
        ("Exercise", 60),
        ("knitting", 45),
    ],
)
def test_extract_duration_minutes(text, expected) -> None:
    assert extract_duration_minutes(text) == expected


@pytest.mark.parametrize(
    "text, expected",
    [
        ("When: morning", "morning"),
        ("in the mornings or evenings", "morning"),
        ("after dinner", "evening"),
        ("late at night", "evening"),
        ("When: Evening", "evening"),
        ("early afternoon", "afternoon"),
        ("any time works", "flexible"),
    ],
)
def test_extract_preferred_time(text, expected) -> None:
    assert extract_preferred_time(text) == expected


@pytest.mark.parametrize(
    "text, expected",
    [
        ("this is urgent!", "high"),
        ("ASAP", "high"),
        ("exam is tomorrow", "high"),
        ("need it done this week", "high"),
        ("Deadline: by Friday", "high"),
        ("I'd like to start soon", "medium"),
        ("it's important to me", "medium"),
        ("exam next week", "medium"),
        ("Urgency: high", "high"),
        ("Urgency: medium", "medium"),
        ("Urgency: low", "low"),
        ("whenever", "low"),
    ],
)
def test_extract_urgency(text, expected) -> None:
    assert extract_urgency(text) == expected


def test_keyword_urgency_outranks_explicit_marker() -> None:
    assert extract_urgency("Deadline: next week\nUrgency: low") == "medium"


def test_first_match_respects_rule_order() -> None:
    # "daily" sits above "twice" in the table
    assert first_match(FREQUENCY_RULES, "daily, or at least twice", 3) == 7
    assert first_match(FREQUENCY_RULES, "nothing here", 3) == 3


def test_extract_activity_name_and_deadline() -> None:
    assert extract_activity_name(STRUCTURED) == "guitar practice"
    assert extract_activity_name("no labels") == "your activity"
    assert extract_deadline(STRUCTURED) is None
    assert extract_deadline("Deadline: Friday exam") == "Friday exam"
    assert extract_deadline("nothing") is None


def test_parse_request_reads_every_field() -> None:
    request = parse_request(STRUCTURED)

    assert request == SchedulingRequest(
        frequency=3, duration_minutes=45, preferred_time="evening", urgency="low"
    )


def test_parse_request_urgent_study_plan() -> None:
    text = (
        "Activity: study for exam\n"
        "How often: 5 times\n"
        "How long: 60 minutes\n"
        "When: flexible\n"
        "Deadline: Friday\n"
        "Urgency: high"
    )

    request = parse_request(text)

    assert request.frequency == 5
    assert request.duration_minutes == 60
    assert request.preferred_time == "flexible"
    assert request.urgency == "high"


@pytest.mark.parametrize("text", [None, "", "   \n  "])
def test_parse_request_rejects_missing_text(text) -> None:
    with pytest.raises(MalformedRequestError):
        parse_request(text)


def test_parse_request_falls_back_on_zero_values() -> None:
    request = parse_request("0 times for 0 minutes")

    assert request.frequency == 3
    assert request.duration_minutes == 45


@pytest.mark.parametrize(
    "kwargs",
    [
        {"frequency": 0, "duration_minutes": 45},
        {"frequency": 3, "duration_minutes": -5},
        {"frequency": 3, "duration_minutes": 45, "preferred_time": "noon"},
        {"frequency": 3, "duration_minutes": 45, "urgency": "extreme"},
    ],
)
def test_scheduling_request_validates_fields(kwargs) -> None:
    with pytest.raises(ValueError):
        SchedulingRequest(**kwargs)
