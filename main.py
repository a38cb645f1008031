"""Schulportal: Haupt-CLI für Stundenplan und Zeugnisse.

Verwendung:
  python main.py config init                          Default-Konfiguration anlegen
  python main.py config show                          Konfiguration anzeigen
  python main.py timetable show -s <klasse>           Wochenraster anzeigen
  python main.py timetable add -s <klasse> ...        Periode anlegen
  python main.py timetable edit -s <klasse> -p <id>   Periode ändern
  python main.py timetable delete -s <klasse> -p <id> Periode löschen
  python main.py report-card --student <id> --session <id>
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich import box

from models.viewer import Action, Role, Viewer

console = Console()


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _build_client(config):
    """Erzeugt den API-Client; Token aus der konfigurierten Umgebungsvariable."""
    from api.client import ApiClient
    token = os.getenv(config.api.token_env)
    return ApiClient(config.api.base_url, token=token,
                     timeout=config.api.timeout_seconds)


def _notify(level: str, message: str) -> None:
    color = {"success": "green", "warning": "yellow"}.get(level, "red")
    symbol = "✓" if level == "success" else "!"
    console.print(f"[{color}]{symbol}[/{color}] {message}")


class AppContext:
    """Gemeinsamer Zustand aller Befehle (Konfiguration, Betrachter, Client)."""

    def __init__(self, config_path: Optional[Path], role: str):
        from config.manager import ConfigManager
        self.manager = ConfigManager(config_path)
        self.viewer = Viewer(role=Role(role))
        self._config = None
        self._client = None

    @property
    def config(self):
        if self._config is None:
            try:
                self._config = self.manager.load_or_default()
            except ValueError as e:
                console.print(f"[red]{e}[/red]")
                sys.exit(1)
        return self._config

    @property
    def client(self):
        if self._client is None:
            self._client = _build_client(self.config)
        return self._client

    def lifecycle(self):
        from scheduling.lifecycle import PeriodLifecycleManager
        return PeriodLifecycleManager(self.client, self.config.timetable)

    def require(self, action: Action) -> None:
        if not self.viewer.can(action):
            console.print(
                f"[red]Rolle '{self.viewer.role.value}' darf '{action.value}' nicht ausführen.[/red]"
            )
            sys.exit(1)


pass_app = click.make_pass_decorator(AppContext)


# ─── CONFIG ───────────────────────────────────────────────────────────────────

@click.group("config")
def cmd_config():
    """Konfiguration anzeigen oder anlegen."""


@cmd_config.command("init")
@click.option("--force", is_flag=True, default=False,
              help="Bestehende Konfiguration überschreiben.")
@pass_app
def config_init(app: AppContext, force: bool):
    """Legt eine Default-Konfiguration an."""
    from config.defaults import default_app_config
    if not app.manager.first_run_check() and not force:
        console.print(
            f"[yellow]Konfiguration existiert bereits: {app.manager.path}[/yellow]\n"
            "Mit [bold]--force[/bold] überschreiben."
        )
        sys.exit(1)
    app.manager.save(default_app_config())


@cmd_config.command("show")
@pass_app
def config_show(app: AppContext):
    """Zeigt die aktuelle Konfiguration an."""
    config = app.config
    console.print(Panel(
        f"[bold]{config.school_name}[/bold]  |  API: {config.api.base_url}  |  "
        f"Log: {config.log_level.value}",
        title="Konfiguration",
        border_style="cyan",
    ))

    tg = config.timetable
    console.print(
        f"[bold]Raster:[/bold] {', '.join(tg.day_names)}\n"
        f"[bold]Slots:[/bold] {', '.join(tg.slot_labels)}\n"
        f"[bold]Referenzdatum:[/bold] {tg.reference_date.isoformat()}  |  "
        f"[bold]Zeitzone:[/bold] {tg.timezone or 'System'}"
    )

    table = Table(title="Notenstufen", box=box.ROUNDED)
    table.add_column("ab %")
    table.add_column("Note")
    for band in config.grading.bands:
        table.add_row(f"{band.min_percentage:g}", band.grade)
    console.print(table)


# ─── STUNDENPLAN ──────────────────────────────────────────────────────────────

@click.group("timetable")
def cmd_timetable():
    """Wochenraster einer Klasse anzeigen und bearbeiten."""


def _parse_weekday(lifecycle, value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    if value.strip().isdigit():
        return int(value)
    try:
        return lifecycle.weekday_from_label(value)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--weekday")


def _report(result) -> None:
    """Gibt Feldfehler aus und beendet bei Misserfolg mit Status 1."""
    if result.ok:
        return
    for field, message in result.field_errors.items():
        console.print(f"  [red]• {field}: {message}[/red]")
    sys.exit(1)


@cmd_timetable.command("show")
@click.option("--section", "-s", required=True, help="ID der Klasse.")
@pass_app
def timetable_show(app: AppContext, section: str):
    """Zeigt das Wochenraster einer Klasse."""
    from api.client import RemoteError
    from export.tui_renderer import print_timetable

    app.require(Action.VIEW_TIMETABLE)
    try:
        grid = app.lifecycle().grid(section)
    except RemoteError as e:
        console.print(f"[red]{e.user_message('Stundenplan konnte nicht geladen werden')}[/red]")
        sys.exit(1)
    print_timetable(grid, console, title=f"Stundenplan {section}", viewer=app.viewer)


@cmd_timetable.command("add")
@click.option("--section", "-s", required=True, help="ID der Klasse.")
@click.option("--subject", "class_subject_id", default="", help="ClassSubject-ID.")
@click.option("--room", "room_id", default=None, help="Raum-ID (optional).")
@click.option("--weekday", "-w", default=None, help="1–7 oder Name des Wochentags.")
@click.option("--slot", default=None, help="Raster-Slot, z.B. '08:00 AM' (setzt Startzeit).")
@click.option("--start", "start_time", default=None, help="Startzeit HH:MM.")
@click.option("--end", "end_time", default="", help="Endzeit HH:MM.")
@pass_app
def timetable_add(app: AppContext, section: str, class_subject_id: str,
                  room_id: Optional[str], weekday: Optional[str], slot: Optional[str],
                  start_time: Optional[str], end_time: str):
    """Legt eine neue Periode an."""
    from scheduling.lifecycle import PeriodEditor

    app.require(Action.EDIT_TIMETABLE)
    lifecycle = app.lifecycle()
    editor = PeriodEditor(lifecycle, section, notify=_notify)
    parsed = _parse_weekday(lifecycle, weekday)
    try:
        editor.open_for_slot(1 if parsed is None else parsed, slot)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--slot")

    changes = {"class_subject_id": class_subject_id, "room_id": room_id, "end_time": end_time}
    if start_time:
        changes["start_time"] = start_time
    _report(editor.submit(**changes))


@cmd_timetable.command("edit")
@click.option("--section", "-s", required=True, help="ID der Klasse.")
@click.option("--period", "-p", "period_id", required=True, help="ID der Periode.")
@click.option("--subject", "class_subject_id", default=None, help="ClassSubject-ID.")
@click.option("--room", "room_id", default=None, help="Raum-ID.")
@click.option("--weekday", "-w", default=None, help="1–7 oder Name des Wochentags.")
@click.option("--start", "start_time", default=None, help="Startzeit HH:MM.")
@click.option("--end", "end_time", default=None, help="Endzeit HH:MM.")
@pass_app
def timetable_edit(app: AppContext, section: str, period_id: str,
                   class_subject_id: Optional[str], room_id: Optional[str],
                   weekday: Optional[str], start_time: Optional[str],
                   end_time: Optional[str]):
    """Ändert eine bestehende Periode; nicht angegebene Felder bleiben."""
    from api.client import RemoteError
    from scheduling.lifecycle import PeriodEditor

    app.require(Action.EDIT_TIMETABLE)
    lifecycle = app.lifecycle()
    try:
        period = next((p for p in lifecycle.periods(section) if p.id == period_id), None)
    except RemoteError as e:
        console.print(f"[red]{e.user_message('Stundenplan konnte nicht geladen werden')}[/red]")
        sys.exit(1)
    if period is None:
        console.print(f"[red]Periode {period_id} nicht in Klasse {section} gefunden.[/red]")
        sys.exit(1)

    editor = PeriodEditor(lifecycle, section, notify=_notify)
    editor.open_for_period(period)
    changes = {
        "class_subject_id": class_subject_id,
        "room_id": room_id,
        "weekday": _parse_weekday(lifecycle, weekday),
        "start_time": start_time,
        "end_time": end_time,
    }
    _report(editor.submit(**{k: v for k, v in changes.items() if v is not None}))


@cmd_timetable.command("delete")
@click.option("--section", "-s", required=True, help="ID der Klasse.")
@click.option("--period", "-p", "period_id", required=True, help="ID der Periode.")
@pass_app
def timetable_delete(app: AppContext, section: str, period_id: str):
    """Löscht eine Periode."""
    app.require(Action.EDIT_TIMETABLE)
    result = app.lifecycle().delete_period(section, period_id)
    _notify("success" if result.ok else "error", result.message)
    _report(result)


# ─── ZEUGNIS ──────────────────────────────────────────────────────────────────

@click.command("report-card")
@click.option("--student", "student_id", required=True, help="ID des Schülers.")
@click.option("--session", "session_id", required=True, help="ID des Prüfungszeitraums.")
@click.option("--section", "class_section_id", default=None,
              help="Nur Prüfungen dieser Klasse berücksichtigen.")
@pass_app
def cmd_report_card(app: AppContext, student_id: str, session_id: str,
                    class_section_id: Optional[str]):
    """Berechnet und zeigt das Zeugnis eines Schülers."""
    from api.client import RemoteError
    from assessment.loader import ReportCardLoader
    from export.tui_renderer import print_report_card

    app.require(Action.VIEW_REPORT_CARD)
    loader = ReportCardLoader(app.client, app.config.grading.bands)
    try:
        report = loader.load(student_id, session_id, class_section_id)
        session_name = app.client.get_exam_session(session_id).name
    except RemoteError as e:
        console.print(f"[red]{e.user_message('Zeugnis konnte nicht geladen werden')}[/red]")
        sys.exit(1)
    print_report_card(report, console, school_name=app.config.school_name,
                      session_name=session_name)


# ─── HAUPT-CLI ────────────────────────────────────────────────────────────────

@click.group()
@click.option("--config", "config_path", type=click.Path(path_type=Path), default=None,
              help="Pfad zur YAML-Konfiguration.")
@click.option("--role", type=click.Choice([r.value for r in Role]), default=Role.ADMIN.value,
              envvar="SCHULPORTAL_ROLE", show_default=True, help="Rolle des Betrachters.")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Debug-Ausgabe.")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], role: str, verbose: bool):
    """Schulportal: Stundenplan-Raster und Zeugnis-Auswertung.

    Starten Sie mit: python main.py config init
    """
    app = AppContext(config_path, role)
    ctx.obj = app
    _setup_logging("DEBUG" if verbose else app.config.log_level.value)


def main():
    """Einstiegspunkt."""
    cli()


# Befehle registrieren
cli.add_command(cmd_config)
cli.add_command(cmd_timetable)
cli.add_command(cmd_report_card)


if __name__ == "__main__":
    main()
