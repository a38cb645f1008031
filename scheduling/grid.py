"""Platzierung von Perioden im Wochenraster (Tage × Zeit-Slots).

Jede Periode landet in höchstens einer Zelle, jede Zelle zeigt höchstens eine
Periode. Konkurrieren mehrere Perioden um dieselbe Zelle, gewinnt die erste
in Eingabereihenfolge – so bleibt die Anzeige bei inkonsistenten Serverdaten
stabil statt zwischen Perioden zu springen.
"""

import logging
from collections import defaultdict
from datetime import tzinfo
from typing import Literal, Optional, Sequence

from models.grid_cell import GridCell
from models.period import Period
from models.viewer import Action, Viewer
from scheduling.time_slots import NO_MATCH, parse_slot_label, resolve_period_slot_minutes

logger = logging.getLogger(__name__)

CellAction = Literal["add", "edit"]


class TimetableGrid:
    """Ergebnis der Platzierung: Zelle → Periode, plus nicht platzierte Perioden."""

    def __init__(self, days: Sequence[str], slots: Sequence[str]):
        self.days: list[str] = list(days)
        self.slots: list[str] = list(slots)
        self._cells: dict[GridCell, Period] = {}
        # Perioden ohne passende Zelle (Wochentag/Uhrzeit nicht im Raster)
        self.unplaced: list[Period] = []
        # Perioden, deren Zelle schon von einer früheren Periode belegt war
        self.collisions: list[Period] = []

    # ─── Zugriff ───

    def get(self, day_index: int, slot: str) -> Optional[Period]:
        return self._cells.get(GridCell(day_index, slot))

    def __getitem__(self, key: tuple[int, str]) -> Optional[Period]:
        day_index, slot = key
        return self.get(day_index, slot)

    def day(self, day_index: int) -> dict[str, Optional[Period]]:
        """Alle Slots einer Tagesspalte."""
        return {slot: self.get(day_index, slot) for slot in self.slots}

    def as_dict(self) -> dict[str, dict[str, Optional[Period]]]:
        """grid[Tagesname][Slot-Label] → Periode oder None."""
        return {name: self.day(i) for i, name in enumerate(self.days)}

    def cells(self) -> list[GridCell]:
        """Alle Zellen in Anzeigereihenfolge (Zeile für Zeile)."""
        return [
            GridCell(day_index, slot)
            for slot in self.slots
            for day_index in range(len(self.days))
        ]

    def cell_of(self, period_id: str) -> Optional[GridCell]:
        for cell, period in self._cells.items():
            if period.id == period_id:
                return cell
        return None

    @property
    def placed(self) -> list[Period]:
        return list(self._cells.values())

    def __len__(self) -> int:
        return len(self._cells)

    # ─── Interaktion ───

    def cell_action(self, cell: GridCell, viewer: Viewer) -> Optional[CellAction]:
        """Was ein Klick auf die Zelle auslöst: "add", "edit" oder nichts.

        Nur Rollen mit EDIT_TIMETABLE dürfen anlegen oder bearbeiten.
        """
        if not viewer.can(Action.EDIT_TIMETABLE):
            return None
        return "edit" if cell in self._cells else "add"


def _slot_lookup(slots: Sequence[str]) -> dict[int, str]:
    """Minutenwert → erstes Slot-Label mit diesem Wert."""
    lookup: dict[int, str] = {}
    for label in slots:
        minutes = parse_slot_label(label)
        if minutes == NO_MATCH:
            logger.warning(f"Slot-Label nicht lesbar, wird ignoriert: {label!r}")
            continue
        lookup.setdefault(minutes, label)
    return lookup


def place_periods(
    periods: Sequence[Period],
    days: Sequence[str],
    slots: Sequence[str],
    tz: Optional[tzinfo] = None,
) -> TimetableGrid:
    """Platziert Perioden deterministisch im Raster.

    Regeln:
    1. Tagesspalte i nimmt Perioden mit weekday == i + 1.
    2. Kandidaten-Zeilen: zuerst der Slot der lokalen Startzeit, dann der
       Slot der UTC-Startzeit. Belegt wird die erste freie Kandidaten-Zelle,
       eine Periode also nie zwei Zellen.
    3. Sind alle Kandidaten-Zellen belegt, gewinnt die frühere Periode der
       Eingabe; die spätere landet in collisions.
    """
    grid = TimetableGrid(days, slots)
    slot_by_minutes = _slot_lookup(grid.slots)

    by_weekday: dict[int, list[Period]] = defaultdict(list)
    for period in periods:
        by_weekday[period.weekday].append(period)

    day_count = len(grid.days)
    for weekday in sorted(by_weekday):
        for period in by_weekday[weekday]:
            if not 1 <= weekday <= day_count:
                grid.unplaced.append(period)
                continue
            resolved = resolve_period_slot_minutes(period, tz)
            candidates: list[GridCell] = []
            for minutes in (resolved.local, resolved.utc):
                label = slot_by_minutes.get(minutes)
                if label is not None and GridCell(weekday - 1, label) not in candidates:
                    candidates.append(GridCell(weekday - 1, label))
            if not candidates:
                logger.debug(
                    f"Periode {period.id}: kein Slot für {resolved.local} / "
                    f"{resolved.utc} Minuten (lokal / UTC)"
                )
                grid.unplaced.append(period)
                continue
            cell = next((c for c in candidates if c not in grid._cells), None)
            if cell is None:
                taken = ", ".join(f"{c}: {grid._cells[c].id}" for c in candidates)
                logger.debug(f"Periode {period.id} verworfen, Zellen belegt ({taken})")
                grid.collisions.append(period)
                continue
            grid._cells[cell] = period

    return grid
