"""Reconnaissance des colonnes et des statuts d'un fichier d'import de dossiers.

Les en-tetes sont normalises (sans accents, minuscules, uniquement lettres et
chiffres) puis compares aux mots-cles de chaque champ. Fonctions pures.
"""

import unicodedata
from typing import Any, Optional

from douanapp.config.constants import StatutDossier

# Champ -> mots-cles normalises, essayes dans l'ordre. L'ordre des champs compte :
# "chassis" avant "numero_ch" (un en-tete "Chassis CH" contient "ch"),
# "prenom" avant "nom" ("prenomclient" contient "nom").
COLONNES_DOSSIER: dict[str, list[str]] = {
    "chassis_ch": ["chassisch", "chassis", "vin"],
    "numero_ch": ["numeroch", "numch", "nch", "ch"],
    "annee": ["annee", "year"],
    "reference_vehicule": ["refvehicule", "reference", "ref"],
    "type_vehicule": ["typevehicule", "type"],
    "prenom_client": ["prenomclient", "prenom"],
    "nom_client": ["nomclient", "nom"],
    "telephone_client": ["telephone", "tel", "phone"],
    "statut": ["statut", "status", "etat"],
    "notes": ["note", "observation", "commentaire"],
}

# Statut -> groupes de mots-cles devant tous figurer dans le texte normalise
_STATUTS_MOTS_CLES: list[tuple[StatutDossier, tuple[str, ...]]] = [
    (StatutDossier.CARTE_GRISE_SORTIE, ("cartegrise", "sortie")),
    (StatutDossier.CARTE_GRISE_ENTREE, ("cartegrise", "entree")),
    (StatutDossier.PROVISOIRE_SORTIE, ("provisoire", "sortie")),
    (StatutDossier.PROVISOIRE_ENTREE, ("provisoire", "entree")),
    (StatutDossier.LANCE, ("lance",)),
]


def normaliser(valeur: Any) -> str:
    """Minuscules, sans accents, sans separateurs : "N° Châssis" -> "nochassis"."""
    if valeur is None:
        return ""
    s = unicodedata.normalize("NFKD", str(valeur))
    s = "".join(c for c in s if not unicodedata.combining(c)).lower()
    return "".join(c for c in s if c.isascii() and c.isalnum())


def trouver_colonne(entetes: list[str], mots_cles: list[str],
                    exclues: Optional[set[int]] = None) -> Optional[int]:
    """Index de la premiere colonne correspondant a un mot-cle (exact puis inclusion)."""
    exclues = exclues or set()
    normalises = [normaliser(e) for e in entetes]
    for kw in mots_cles:
        for i, col in enumerate(normalises):
            if i not in exclues and col == kw:
                return i
    for kw in mots_cles:
        for i, col in enumerate(normalises):
            if i not in exclues and col and kw in col:
                return i
    return None


def mapper_colonnes(entetes: list[str]) -> dict[str, int]:
    """Associe chaque champ reconnu a un index de colonne (une colonne par champ)."""
    mapping = {}
    prises: set[int] = set()
    for champ, mots_cles in COLONNES_DOSSIER.items():
        idx = trouver_colonne(entetes, mots_cles, prises)
        if idx is not None:
            mapping[champ] = idx
            prises.add(idx)
    return mapping


def mapper_statut(texte: Any) -> StatutDossier:
    """Etape du workflow la plus proche d'un libelle libre ; Lance par defaut."""
    s = normaliser(texte)
    if not s:
        return StatutDossier.LANCE
    for statut, mots in _STATUTS_MOTS_CLES:
        if all(m in s for m in mots):
            return statut
    return StatutDossier.LANCE
