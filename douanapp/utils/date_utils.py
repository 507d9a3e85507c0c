"""Utilitaires de parsing et de formatage de dates."""

from datetime import date, datetime
from typing import Optional

from dateutil import parser as dateutil_parser

FORMATS_DATE = [
    "%d/%m/%Y",
    "%Y-%m-%d",
    "%d-%m-%Y",
    "%d.%m.%Y",
    "%d/%m/%y",
]

MOIS_COURTS = [
    "janv.", "févr.", "mars", "avr.", "mai", "juin",
    "juil.", "août", "sept.", "oct.", "nov.", "déc.",
]


def parser_horodatage(valeur) -> Optional[datetime]:
    """Convertit une date ou un horodatage ISO-8601 en datetime naif."""
    if valeur is None:
        return None
    if isinstance(valeur, datetime):
        return valeur.replace(tzinfo=None)
    if isinstance(valeur, date):
        return datetime(valeur.year, valeur.month, valeur.day)
    texte = str(valeur).strip()
    if not texte:
        return None
    try:
        return dateutil_parser.isoparse(texte).replace(tzinfo=None)
    except ValueError:
        pass
    for fmt in FORMATS_DATE:
        try:
            return datetime.strptime(texte, fmt)
        except ValueError:
            continue
    return None


def parser_date(valeur) -> Optional[date]:
    dt = parser_horodatage(valeur)
    return dt.date() if dt else None


def formater_date(valeur) -> str:
    """Format lisible : "20 janv. 2026"."""
    if not valeur:
        return "-"
    d = parser_date(valeur)
    if d is None:
        return str(valeur)
    return f"{d.day} {MOIS_COURTS[d.month - 1]} {d.year}"


def formater_date_heure(valeur) -> str:
    """Format lisible avec heure : "20 janv. 2026 à 14h30"."""
    if not valeur:
        return "-"
    dt = parser_horodatage(valeur)
    if dt is None:
        return str(valeur)
    return f"{formater_date(dt)} à {dt.hour:02d}h{dt.minute:02d}"


def formater_date_court(valeur) -> str:
    """Format court pour les tableaux : "20/01/2026"."""
    if not valeur:
        return "-"
    d = parser_date(valeur)
    return d.strftime("%d/%m/%Y") if d else str(valeur)
