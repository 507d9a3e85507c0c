"""
Depots par collection (dossiers, factures, locations, clients, types de vehicule)
et singleton entreprise.

Chaque lecture relit la collection entiere, chaque ecriture la reecrit entiere.
Une collection illisible est traitee comme vide : on journalise et on continue.
"""

import copy
import json
import logging
from datetime import datetime
from typing import Any, Optional

from douanapp.config.constants import (
    CLE_CLIENTS, CLE_DOSSIERS, CLE_ENTREPRISE, CLE_FACTURES, CLE_LOCATIONS,
    CLE_TYPES_VEHICULE, ENTREPRISE_DEFAUT, LIBELLE_DEPENSES_DIVERSES,
    TOUTES_LES_CLES, TYPES_VEHICULE_DEFAUT, WORKFLOW_ORDRE,
)
from douanapp.core.exceptions import IntegrityViolationError, ValidationError
from douanapp.models.entities import (
    Client, Dossier, Enregistrement, EntrepriseInfo, Facture, LigneDepense,
    Location, TypeVehicule, horodatage,
)
from douanapp.storage.backends import StorageBackend
from douanapp.utils.date_utils import parser_horodatage

logger = logging.getLogger("douanapp.storage")


class Repository:
    """CRUD generique sur une collection JSON."""

    modele: type[Enregistrement] = Enregistrement
    cle: str = ""

    def __init__(self, backend: StorageBackend):
        self.backend = backend

    # --- Lecture ---

    def _charger_brut(self) -> Any:
        texte = self.backend.lire(self.cle)
        if texte is None:
            return None
        try:
            return json.loads(texte)
        except (json.JSONDecodeError, TypeError) as e:
            logger.warning("Collection %s illisible, traitee comme vide : %s", self.cle, e)
            return None

    def _depuis_dict(self, data: dict) -> Enregistrement:
        return self.modele.from_dict(data)

    def lister(self) -> list:
        brut = self._charger_brut()
        if brut is None:
            return []
        if not isinstance(brut, list):
            logger.warning("Collection %s : liste attendue, recu %s", self.cle, type(brut).__name__)
            return []
        records = []
        for i, item in enumerate(brut):
            try:
                records.append(self._depuis_dict(item))
            except (TypeError, ValueError, OverflowError) as e:
                logger.warning("Collection %s : ligne %d ignoree (%s)", self.cle, i, e)
        return records

    def get_par_id(self, record_id: str) -> Optional[Any]:
        for record in self.lister():
            if record.id == record_id:
                return record
        return None

    # --- Ecriture ---

    def _persister(self, records: list) -> None:
        texte = json.dumps(
            [r.to_dict() for r in records], ensure_ascii=False, default=str,
        )
        self.backend.ecrire(self.cle, texte)

    def _avant_enregistrement(self, record, records: list) -> None:
        """Point d'extension pour les controles propres a une collection."""

    def enregistrer(self, record):
        """Insere ou remplace (meme id). Retourne l'enregistrement persiste."""
        records = self.lister()
        self._avant_enregistrement(record, records)
        a_sauver = copy.deepcopy(record)
        maintenant = horodatage()
        a_sauver.date_modification = maintenant
        for idx, existant in enumerate(records):
            if existant.id == record.id:
                a_sauver.date_creation = existant.date_creation or a_sauver.date_creation or maintenant
                records[idx] = a_sauver
                break
        else:
            a_sauver.date_creation = a_sauver.date_creation or maintenant
            records.append(a_sauver)
        self._persister(records)
        return a_sauver

    def supprimer(self, record_id: str) -> bool:
        records = self.lister()
        restants = [r for r in records if r.id != record_id]
        if len(restants) == len(records):
            return False
        self._persister(restants)
        return True

    def remplacer_tout(self, records: list) -> None:
        self._persister(records)


class ClientRepository(Repository):
    modele = Client
    cle = CLE_CLIENTS


class LocationRepository(Repository):
    modele = Location
    cle = CLE_LOCATIONS


class FactureRepository(Repository):
    modele = Facture
    cle = CLE_FACTURES

    def _depuis_dict(self, data: dict) -> Facture:
        facture = Facture.from_dict(data)
        return migrer_lignes_depenses(facture)

    def lister_par_dossier(self, dossier_id: str) -> list[Facture]:
        return [f for f in self.lister() if f.dossier_id == dossier_id]


def migrer_lignes_depenses(record):
    """Derive une ligne de depense unique du champ scalaire historique."""
    if not record.depenses_lignes and record.depenses > 0:
        record.depenses_lignes = [
            LigneDepense(
                id=f"{record.id}_dep",
                libelle=LIBELLE_DEPENSES_DIVERSES,
                montant=record.depenses,
            )
        ]
    return record


class DossierRepository(Repository):
    modele = Dossier
    cle = CLE_DOSSIERS

    def __init__(self, backend: StorageBackend, factures: FactureRepository):
        super().__init__(backend)
        self.factures = factures

    def get_par_numero_ch(self, numero_ch: str) -> Optional[Dossier]:
        numero_ch = (numero_ch or "").strip()
        for d in self.lister():
            if d.numero_ch == numero_ch:
                return d
        return None

    def _avant_enregistrement(self, record: Dossier, records: list) -> None:
        numero = (record.numero_ch or "").strip()
        if not numero:
            return
        for d in records:
            if d.numero_ch == numero and d.id != record.id:
                raise ValidationError({"numero_ch": "Ce numéro CH existe déjà"})

    def supprimer(self, record_id: str) -> bool:
        if self.factures.lister_par_dossier(record_id):
            raise IntegrityViolationError(
                "Impossible de supprimer un dossier lié à des factures"
            )
        return super().supprimer(record_id)

    def importer(self, dossiers: list[Dossier], remplacer: bool = False) -> int:
        """Ajoute les dossiers importes et retourne le nombre d'ajouts.

        En mode ajout, tout numero CH deja present (y compris plus haut dans
        le meme lot) est ignore. En mode remplacement, la collection devient
        exactement la liste fournie.
        """
        if remplacer:
            self._persister(dossiers)
            logger.info("Import en remplacement : %d dossiers", len(dossiers))
            return len(dossiers)

        existants = self.lister()
        numeros = {d.numero_ch for d in existants}
        ajoutes = 0
        for d in dossiers:
            if d.numero_ch in numeros:
                continue
            existants.append(d)
            numeros.add(d.numero_ch)
            ajoutes += 1
        self._persister(existants)
        logger.info("Import en ajout : %d/%d dossiers ajoutes", ajoutes, len(dossiers))
        return ajoutes


class TypeVehiculeRepository(Repository):
    modele = TypeVehicule
    cle = CLE_TYPES_VEHICULE

    def lister(self) -> list[TypeVehicule]:
        """Types stockes, migres si besoin, ou jeu par defaut."""
        brut = self._charger_brut()
        types = []
        if isinstance(brut, list) and brut:
            premier = brut[0]
            if isinstance(premier, str):
                # Ancien format : simple liste de libelles
                types = [
                    TypeVehicule(id=f"tv_{i}_{label}", label=label)
                    for i, label in enumerate(brut) if isinstance(label, str)
                ]
            elif isinstance(premier, dict) and "id" in premier and "label" in premier:
                types = super().lister()
        if types:
            return types
        return [
            TypeVehicule(id=f"tv_default_{i}", label=label)
            for i, label in enumerate(TYPES_VEHICULE_DEFAUT)
        ]

    def get_par_label(self, label: str) -> Optional[TypeVehicule]:
        for t in self.lister():
            if t.label == label:
                return t
        return None


class EntrepriseRepository:
    """Singleton : coordonnees de l'entreprise."""

    cle = CLE_ENTREPRISE

    def __init__(self, backend: StorageBackend):
        self.backend = backend

    def get(self) -> EntrepriseInfo:
        texte = self.backend.lire(self.cle)
        if texte is None:
            return EntrepriseInfo.from_dict(ENTREPRISE_DEFAUT)
        try:
            return EntrepriseInfo.from_dict(json.loads(texte))
        except (json.JSONDecodeError, TypeError, ValueError) as e:
            logger.warning("Coordonnees entreprise illisibles, valeurs par defaut : %s", e)
            return EntrepriseInfo.from_dict(ENTREPRISE_DEFAUT)

    def enregistrer(self, info: EntrepriseInfo) -> None:
        self.backend.ecrire(self.cle, json.dumps(info.to_dict(), ensure_ascii=False))


def _date_tri(valeur: Optional[str]) -> datetime:
    return parser_horodatage(valeur) or datetime.min


class DataStore:
    """Point d'acces unique aux collections d'un meme stockage."""

    def __init__(self, backend: StorageBackend):
        self.backend = backend
        self.clients = ClientRepository(backend)
        self.types_vehicule = TypeVehiculeRepository(backend)
        self.factures = FactureRepository(backend)
        self.dossiers = DossierRepository(backend, self.factures)
        self.locations = LocationRepository(backend)
        self.entreprise = EntrepriseRepository(backend)

    def effacer_tout(self) -> None:
        """Supprime definitivement toutes les donnees."""
        for cle in TOUTES_LES_CLES:
            self.backend.supprimer(cle)
        logger.info("Toutes les donnees ont ete effacees")

    def statistiques(self) -> dict:
        """Indicateurs du tableau de bord."""
        dossiers = self.dossiers.lister()
        factures = self.factures.lister()
        locations = self.locations.lister()

        par_statut = {s.value: 0 for s in WORKFLOW_ORDRE}
        for d in dossiers:
            if d.statut.value in par_statut:
                par_statut[d.statut.value] += 1

        def recents(records, cle_date):
            return sorted(records, key=lambda r: _date_tri(cle_date(r)), reverse=True)[:5]

        return {
            "total_dossiers": len(dossiers),
            "total_factures": len(factures),
            "total_locations": len(locations),
            "par_statut": par_statut,
            "total_ventes": sum(f.prix_total_ttc for f in factures),
            "total_encaisse": sum(f.montant_paye for f in factures),
            "total_restant": sum(f.montant_restant for f in factures),
            "dossiers_recents": recents(dossiers, lambda d: d.date_creation),
            "factures_recentes": recents(factures, lambda f: f.date_creation or f.date_facture),
            "locations_recentes": recents(locations, lambda l: l.date_creation),
        }
