"""Renderer für Terminal-Anzeige von Stundenplan und Zeugnis.

Die render_*-Funktionen liefern reine Tabellenzeilen (testbar), die
print_*-Funktionen geben sie über Rich aus.
"""

from typing import TYPE_CHECKING, Optional

from export.helpers import EMPTY_CELL, format_percentage, format_score, period_summary

if TYPE_CHECKING:
    from rich.console import Console
    from models.report_card import ReportCard
    from models.viewer import Viewer
    from scheduling.grid import TimetableGrid


def render_timetable_rows(grid: "TimetableGrid") -> list[list[str]]:
    """Gibt Tabellenzeilen für das Wochenraster zurück.

    Jede Zeile: [slot_label, Tag 1, Tag 2, ...]; leere Zellen als '—'.
    """
    rows: list[list[str]] = []
    for slot in grid.slots:
        cells = [slot]
        for day_index in range(len(grid.days)):
            period = grid.get(day_index, slot)
            cells.append(period_summary(period) if period else EMPTY_CELL)
        rows.append(cells)
    return rows


def render_report_card_rows(report: "ReportCard") -> list[list[str]]:
    """Gibt Tabellenzeilen für das Zeugnis zurück.

    Jede Zeile: [Fach, "Prüfung: x / y" …, Summe, Prozent]. Unbewertete
    Prüfungen werden als "Prüfung: offen" aufgeführt.
    """
    rows: list[list[str]] = []
    for subject in report.subjects:
        parts = [
            f"{m.exam_title}: {format_score(m.score)} / {format_score(m.max_score)}"
            for m in subject.marks
        ]
        parts += [f"{title}: offen" for title in subject.pending_exams]
        rows.append([
            subject.subject_name,
            "\n".join(parts) or EMPTY_CELL,
            f"{format_score(subject.total_obtained)} / {format_score(subject.total_max)}",
            format_percentage(subject.percentage, 0),
        ])
    return rows


def print_timetable(
    grid: "TimetableGrid",
    console: "Console",
    title: str = "Stundenplan",
    viewer: Optional["Viewer"] = None,
) -> None:
    from rich.table import Table
    from rich import box
    from models.viewer import Action

    table = Table(title=title, box=box.ROUNDED, show_lines=True)
    table.add_column("Zeit", style="dim")
    for day in grid.days:
        table.add_column(day, justify="center")
    for row in render_timetable_rows(grid):
        table.add_row(*row)
    console.print(table)

    if grid.unplaced or grid.collisions:
        console.print(
            f"[yellow]{len(grid.unplaced)} Periode(n) außerhalb des Rasters, "
            f"{len(grid.collisions)} doppelt belegte Zelle(n).[/yellow]"
        )
    if viewer is not None and not viewer.can(Action.EDIT_TIMETABLE):
        console.print("[dim]Nur Ansicht – keine Bearbeitungsrechte.[/dim]")


def print_report_card(report: "ReportCard", console: "Console",
                      school_name: str = "", session_name: str = "") -> None:
    from rich.panel import Panel
    from rich.table import Table
    from rich import box

    header = [
        f"[bold]{school_name}[/bold]" if school_name else "",
        f"Zeitraum: {session_name or report.exam_session_id}",
        f"Schüler: {report.student_id}",
        "",
        f"Gesamt: [bold]{format_score(report.overall_total_obtained)} / "
        f"{format_score(report.overall_total_max)}[/bold]",
        f"Prozent: [bold]{format_percentage(report.percentage)}[/bold]",
        f"Note: [bold]{report.grade}[/bold]",
    ]
    console.print(Panel("\n".join(header),
                        title="Zeugnis", border_style="cyan"))

    table = Table(box=box.ROUNDED, show_lines=True)
    table.add_column("Fach", style="bold")
    table.add_column("Prüfungen")
    table.add_column("Summe", justify="center")
    table.add_column("%", justify="right")
    for row in render_report_card_rows(report):
        table.add_row(*row)
    console.print(table)
