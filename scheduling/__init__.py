"""Stundenplan-Modul: Zeit-Auflösung und Platzierung im Wochenraster."""

from .time_slots import (
    NO_MATCH,
    SlotMinutes,
    format_time,
    parse_slot_label,
    resolve_period_slot_minutes,
    to_24_hour,
)
from .grid import TimetableGrid, place_periods

__all__ = [
    "NO_MATCH",
    "SlotMinutes",
    "format_time",
    "parse_slot_label",
    "resolve_period_slot_minutes",
    "to_24_hour",
    "TimetableGrid",
    "place_periods",
]
