"""Seasonal welcome message shown when a conversation opens."""

from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo

WEEKDAYS = ("lunedì", "martedì", "mercoledì", "giovedì", "venerdì", "sabato", "domenica")
MONTHS = (
    "gennaio",
    "febbraio",
    "marzo",
    "aprile",
    "maggio",
    "giugno",
    "luglio",
    "agosto",
    "settembre",
    "ottobre",
    "novembre",
    "dicembre",
)

SEASON_PHRASES = {
    "inverno": "tempo di riposo e radici silenziose",
    "primavera": "giorni di germogli e acqua chiara",
    "estate": "luce lunga e sentieri profumati di resina",
    "autunno": "foglie dorate e passi più attenti",
}


def format_italian_date(day: date) -> str:
    """e.g. ``lunedì 19 ottobre 2026``."""
    return f"{WEEKDAYS[day.weekday()]} {day.day} {MONTHS[day.month - 1]} {day.year}"


def time_of_day(hour: int) -> str:
    if hour < 6:
        return "notte"
    if hour < 12:
        return "mattina"
    if hour < 18:
        return "pomeriggio"
    return "sera"


def season_for(day: date) -> str:
    """Astronomical season (northern hemisphere, fixed boundary dates)."""
    if date(day.year, 3, 20) <= day < date(day.year, 6, 21):
        return "primavera"
    if date(day.year, 6, 21) <= day < date(day.year, 9, 22):
        return "estate"
    if date(day.year, 9, 22) <= day < date(day.year, 12, 21):
        return "autunno"
    return "inverno"


def build_greeting(now: Optional[datetime] = None, tz: str = "Europe/Rome") -> str:
    """Build the Italian greeting for the given moment.

    Args:
        now: Moment to describe (defaults to the current time); naive
            datetimes are taken as already local to ``tz``
        tz: IANA timezone name

    Returns:
        Greeting line with date, time of day and season
    """
    zone = ZoneInfo(tz)
    if now is None:
        now = datetime.now(zone)
    elif now.tzinfo is not None:
        now = now.astimezone(zone)

    season = season_for(now.date())
    return (
        f"🌿 Oggi è **{format_italian_date(now.date())}**, "
        f"una **{time_of_day(now.hour)}** di **{season}**: {SEASON_PHRASES[season]}. "
        "Dimmi pure come posso aiutarti."
    )
