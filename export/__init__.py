"""Export-Modul: Terminal-Anzeige (Rich) für Stundenplan und Zeugnis."""

from export.tui_renderer import (
    print_report_card,
    print_timetable,
    render_report_card_rows,
    render_timetable_rows,
)

__all__ = [
    "print_report_card",
    "print_timetable",
    "render_report_card_rows",
    "render_timetable_rows",
]
