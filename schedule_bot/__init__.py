"""schedule_bot - books recurring activity sessions into your calendar."""

__version__ = "0.1.0"
