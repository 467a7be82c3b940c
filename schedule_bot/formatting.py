"""Human-readable rendering of schedules."""

from datetime import datetime

INTENSIVE_TIPS = [
    "Take 15-minute breaks between same-day sessions",
    "Stay hydrated during intensive days",
    "Review/practice different aspects in each session",
]


def format_time(dt: datetime) -> str:
    """'6:00 PM'"""
    return dt.strftime("%I:%M %p").lstrip("0")


def format_day(dt: datetime) -> str:
    """'Monday, October 19'"""
    return f"{dt:%A, %B} {dt.day}"


def format_slot(dt: datetime) -> str:
    """'Monday, October 19 at 6:00 PM'"""
    return f"{format_day(dt)} at {format_time(dt)}"


def format_times_for_explanation(times: list[datetime]) -> str:
    """Join slots into an English list: 'a', 'a and b', 'a, b, and c'."""
    if not times:
        return "No times scheduled"

    formatted = [format_slot(t) for t in times]
    if len(formatted) == 1:
        return formatted[0]
    if len(formatted) == 2:
        return f"{formatted[0]} and {formatted[1]}"
    return ", ".join(formatted[:-1]) + f", and {formatted[-1]}"


def group_by_day(times: list[datetime]) -> dict[str, list[datetime]]:
    """Group slots by calendar day, keeping first-seen day order."""
    grouped: dict[str, list[datetime]] = {}
    for t in times:
        grouped.setdefault(format_day(t), []).append(t)
    return grouped


def format_daily_breakdown(times: list[datetime], urgency: str = "low") -> str:
    """Per-day summary, only produced when some day holds several sessions."""
    by_day = group_by_day(times)
    if not any(len(sessions) > 1 for sessions in by_day.values()):
        return ""

    lines = ["", "", "📅 **Daily Breakdown:**"]
    for day, sessions in by_day.items():
        if len(sessions) > 1:
            slot_times = ", ".join(format_time(s) for s in sorted(sessions))
            lines.append(f"• {day}: {len(sessions)} sessions at {slot_times}")
        else:
            lines.append(f"• {day}: {format_time(sessions[0])}")

    if urgency == "high":
        lines += ["", "⚡ **Intensive Schedule Tips:**"]
        lines += [f"• {tip}" for tip in INTENSIVE_TIPS]

    return "\n".join(lines)


def capitalize_words(text: str) -> str:
    return " ".join(word[:1].upper() + word[1:].lower() for word in text.split(" "))
