"""Datenmodell für eine Zelle im Wochenraster."""

from dataclasses import dataclass


@dataclass(frozen=True)
class GridCell:
    """Eine Zelle des Wochenrasters: Kombination aus Tagesspalte und Zeit-Label.

    Immutable (frozen=True) damit es als Dict-Key / Set-Element nutzbar ist.
    """

    # Spaltenindex im Raster (0-basiert, 0 = erste konfigurierte Tagesspalte)
    day_index: int
    # 12-Stunden-Label der Zeile, z.B. "08:00 AM"
    slot: str

    @property
    def weekday(self) -> int:
        """Gespeicherter Wochentag (1-basiert, 1=Montag)."""
        return self.day_index + 1

    def __str__(self) -> str:
        return f"Tag {self.weekday} {self.slot}"
