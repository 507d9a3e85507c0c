"""Utilitaires pour le traitement des montants."""

import math
from typing import Optional


def parser_montant(valeur) -> Optional[float]:
    """Parse un montant saisi (1 234,56 ou 1234.56 etc.). None si invalide."""
    if valeur is None or isinstance(valeur, bool):
        return None
    if isinstance(valeur, (int, float)):
        return float(valeur) if math.isfinite(valeur) else None

    v = str(valeur).strip()
    if not v:
        return None

    # Retirer la devise
    v = v.replace("FCFA", "").replace("XOF", "").strip()

    # Gerer le format francais : 1 234,56
    if "," in v and "." in v:
        if v.rindex(",") > v.rindex("."):
            v = v.replace(".", "").replace(",", ".")
        else:
            v = v.replace(",", "")
    v = v.replace(" ", "").replace("\u00a0", "").replace("\u202f", "").replace(",", ".")

    try:
        montant = float(v)
    except ValueError:
        return None
    return montant if math.isfinite(montant) else None


def _compact(valeur: float) -> str:
    s = f"{valeur:.1f}"
    return s[:-2] if s.endswith(".0") else s.replace(".", ",")


def formater_montant(montant: float, devise: str = "FCFA") -> str:
    """Formate un montant : "250 000 FCFA", "1,5 M FCFA", "2 Md FCFA"."""
    signe = "-" if montant < 0 else ""
    abs_montant = abs(montant)

    if abs_montant >= 1_000_000_000:
        return f"{signe}{_compact(abs_montant / 1_000_000_000)} Md {devise}"
    if abs_montant >= 1_000_000:
        return f"{signe}{_compact(abs_montant / 1_000_000)} M {devise}"

    entier = f"{int(round(abs_montant)):,}".replace(",", " ")
    return f"{signe}{entier} {devise}"
