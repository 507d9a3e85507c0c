"""Import de dossiers depuis un classeur Excel ou un CSV.

Seule la premiere feuille est lue. La premiere ligne non vide sert d'en-tete ;
les colonnes sont reconnues par mots-cles (voir ``colonnes``).
"""

import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any

from douanapp.core.exceptions import ParseError
from douanapp.models.entities import Dossier, horodatage
from douanapp.parsers.colonnes import mapper_colonnes, mapper_statut
from douanapp.parsers.parser_factory import ParserFactory

logger = logging.getLogger("douanapp.import")


def _texte(valeur: Any) -> str:
    if valeur is None:
        return ""
    if isinstance(valeur, float) and valeur.is_integer():
        return str(int(valeur))
    if isinstance(valeur, (datetime, date)):
        return valeur.isoformat()
    return str(valeur).strip()


def construire_dossiers(entetes: list[str], lignes: list[list[Any]]) -> list[Dossier]:
    """Un dossier neuf par ligne ; un champ sans colonne reconnue reste vide."""
    mapping = mapper_colonnes(entetes)
    logger.debug("Colonnes reconnues : %s", mapping)
    maintenant = horodatage()

    def cellule(row, champ):
        idx = mapping.get(champ)
        if idx is None or idx >= len(row):
            return ""
        return _texte(row[idx])

    dossiers = []
    for row in lignes:
        dossiers.append(Dossier(
            numero_ch=cellule(row, "numero_ch"),
            chassis_ch=cellule(row, "chassis_ch"),
            annee=cellule(row, "annee"),
            reference_vehicule=cellule(row, "reference_vehicule"),
            type_vehicule=cellule(row, "type_vehicule"),
            nom_client=cellule(row, "nom_client"),
            prenom_client=cellule(row, "prenom_client"),
            telephone_client=cellule(row, "telephone_client"),
            statut=mapper_statut(cellule(row, "statut")),
            notes=cellule(row, "notes"),
            date_creation=maintenant,
        ))
    return dossiers


def importer_fichier(chemin: Path, factory: ParserFactory | None = None) -> list[Dossier]:
    """Lit le fichier et retourne les dossiers a importer (rien n'est enregistre)."""
    chemin = Path(chemin)
    if not chemin.exists():
        raise ParseError(f"Fichier introuvable : {chemin}")
    parser = (factory or ParserFactory()).get_parser(chemin)
    entetes, lignes = parser.lire_lignes(chemin)
    if not lignes:
        raise ParseError(f"Aucune ligne de données dans {chemin.name}")
    dossiers = construire_dossiers(entetes, lignes)
    logger.info("%d dossiers lus depuis %s", len(dossiers), chemin.name)
    return dossiers
