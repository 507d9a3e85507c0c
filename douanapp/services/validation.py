"""Regles de validation des saisies (dossiers, locations, clients, montants)."""

import re
from typing import Any, Callable, Optional

from douanapp.core.exceptions import ValidationError
from douanapp.utils.number_utils import parser_montant

Regle = Callable[[Any], Optional[str]]

_TELEPHONE_RE = re.compile(r"^\+?[0-9]{8,15}$")
_SEPARATEURS_TELEPHONE = re.compile(r"[\s\-.()]")


def telephone_valide(tel: str) -> bool:
    """Un numero vide est accepte ; sinon 8 a 15 chiffres, + initial optionnel."""
    if not tel:
        return True
    return bool(_TELEPHONE_RE.match(_SEPARATEURS_TELEPHONE.sub("", tel)))


def _texte(valeur: Any) -> str:
    return "" if valeur is None else str(valeur).strip()


def champ_obligatoire(libelle: str) -> Regle:
    def regle(valeur):
        if not _texte(valeur):
            return f"{libelle} est obligatoire"
        return None
    return regle


def client_obligatoire() -> Regle:
    def regle(valeur):
        if not _texte(valeur):
            return "Le client est obligatoire"
        return None
    return regle


def numero_ch_unique(dossiers, exclure_id: Optional[str] = None) -> Regle:
    """Numero CH obligatoire et absent des autres dossiers."""
    def regle(valeur):
        numero = _texte(valeur)
        if not numero:
            return "Le numéro CH est obligatoire"
        existant = dossiers.get_par_numero_ch(numero)
        if existant and existant.id != exclure_id:
            return "Ce numéro CH existe déjà"
        return None
    return regle


def telephone_obligatoire() -> Regle:
    def regle(valeur):
        tel = _texte(valeur)
        if not tel:
            return "Le téléphone est obligatoire"
        if not telephone_valide(tel):
            return "Format de téléphone invalide"
        return None
    return regle


def nombre_positif(libelle: str) -> Regle:
    def regle(valeur):
        n = parser_montant(valeur)
        if n is None or n <= 0:
            return f"{libelle} invalide"
        return None
    return regle


def nombre_optionnel_non_negatif(libelle: str) -> Regle:
    def regle(valeur):
        if not _texte(valeur):
            return None
        n = parser_montant(valeur)
        if n is None or n < 0:
            return f"{libelle} invalide"
        return None
    return regle


# --- Jeux de regles par formulaire ---

def regles_dossier(dossiers, exclure_id: Optional[str] = None) -> dict[str, Regle]:
    return {
        "numero_ch": numero_ch_unique(dossiers, exclure_id),
        "reference_vehicule": champ_obligatoire("La référence véhicule"),
        "client_id": client_obligatoire(),
    }


def regles_location() -> dict[str, Regle]:
    return {
        "reference_camion": champ_obligatoire("La référence camion"),
        "client_id": client_obligatoire(),
        "montant_total": nombre_positif("Le montant"),
    }


def regles_client() -> dict[str, Regle]:
    return {
        "nom": champ_obligatoire("Le nom"),
        "prenom": champ_obligatoire("Le prénom"),
        "telephone": telephone_obligatoire(),
    }


def valider(valeurs: dict[str, Any], regles: dict[str, Regle]) -> None:
    """Applique toutes les regles ; leve ValidationError avec chaque message."""
    erreurs = {}
    for champ, regle in regles.items():
        message = regle(valeurs.get(champ))
        if message:
            erreurs[champ] = message
    if erreurs:
        raise ValidationError(erreurs)
