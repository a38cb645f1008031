"""Notenstufen: Prozentwert → Note, rein tabellengesteuert."""

from typing import Optional, Sequence

from config.schema import GradeBand, GradingConfig


def grade_for(percentage: float, bands: Optional[Sequence[GradeBand]] = None) -> str:
    """Note zur Prozentzahl. Totale Funktion: unter allen Schwellen → unterste Stufe."""
    table = sorted(
        bands if bands is not None else GradingConfig().bands,
        key=lambda b: b.min_percentage,
        reverse=True,
    )
    if not table:
        raise ValueError("Leere Notenstufen-Tabelle")
    for band in table:
        if percentage >= band.min_percentage:
            return band.grade
    return table[-1].grade
