from config.schema import (
    AppConfig,
    GradeBand,
    GradingConfig,
    TimetableGridConfig,
)


def default_time_grid() -> TimetableGridConfig:
    """Standard-Wochenraster.

    Spalten: Montag bis Samstag
    Zeilen:  08:00 AM bis 04:00 PM im Stundentakt (9 Slots)

    Referenzdatum 2024-01-01 für alle Uhrzeit-Zeitstempel; Zeitzone = System.
    """
    return TimetableGridConfig()


def default_grading() -> GradingConfig:
    """Standard-Notenstufen.

    A+ ab 90 %, A ab 80 %, B ab 70 %, C ab 60 %, darunter D.
    """
    return GradingConfig()


# Alternative Tabelle nach deutscher Notenskala (IHK-Schlüssel).
NOTENSTUFEN_IHK: list[GradeBand] = [
    GradeBand(min_percentage=92, grade="1"),
    GradeBand(min_percentage=81, grade="2"),
    GradeBand(min_percentage=67, grade="3"),
    GradeBand(min_percentage=50, grade="4"),
    GradeBand(min_percentage=30, grade="5"),
    GradeBand(min_percentage=0, grade="6"),
]


def ihk_grading() -> GradingConfig:
    """Notenstufen nach IHK-Punkteschlüssel (1–6)."""
    return GradingConfig(bands=list(NOTENSTUFEN_IHK))


def default_app_config() -> AppConfig:
    """Vollständige Default-Konfiguration."""
    return AppConfig(
        school_name="Muster-Schule",
        timetable=default_time_grid(),
        grading=default_grading(),
    )
