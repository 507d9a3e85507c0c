"""Modeles de donnees : clients, dossiers, factures, tranches, paiements, locations.

Les enregistrements sont persistes en JSON avec les noms de champs camelCase
historiques (``numeroCH``, ``prixTotalTTC``, ``dateEcheance``...), ce qui permet
de relire les donnees deja saisies sans conversion.
"""

from __future__ import annotations

import math
import uuid
from dataclasses import MISSING, dataclass, field, fields
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Optional

from douanapp.config.constants import (
    ModePaiement, StatutDossier, StatutFacture, StatutLocation, StatutTranche,
)

# Noms JSON qui ne suivent pas la conversion camelCase reguliere
_ALIAS_JSON = {
    "numero_ch": "numeroCH",
    "chassis_ch": "chassisCH",
    "prix_total_ttc": "prixTotalTTC",
}


def generer_id() -> str:
    return str(uuid.uuid4())


def generer_facture_id(maintenant: datetime | None = None) -> str:
    """Identifiant lisible : Facture_INV-AAAAMMJJ-xxxxxxxx."""
    maintenant = maintenant or datetime.now()
    suffixe = uuid.uuid4().hex[:8]
    return f"Facture_INV-{maintenant.strftime('%Y%m%d')}-{suffixe}"


def generer_tranche_id(facture_id: str, numero: int) -> str:
    return f"{facture_id}_T{numero:02d}"


def horodatage() -> str:
    return datetime.now().isoformat()


def vers_camel(nom: str) -> str:
    if nom in _ALIAS_JSON:
        return _ALIAS_JSON[nom]
    tete, *reste = nom.split("_")
    return tete + "".join(m.capitalize() for m in reste)


def _defaut(f) -> Any:
    if f.default is not MISSING:
        return f.default
    if f.default_factory is not MISSING:
        return f.default_factory()
    return None


def _coercer(valeur: Any, defaut: Any) -> Any:
    """Aligne une valeur JSON sur le type de la valeur par defaut du champ."""
    if isinstance(defaut, bool) or defaut is None:
        return valeur
    if isinstance(defaut, (int, float)):
        if valeur is None or valeur == "":
            return type(defaut)()
        nombre = float(valeur)
        if not math.isfinite(nombre):
            raise ValueError(f"Nombre non fini : {valeur!r}")
        return nombre if isinstance(defaut, float) else int(nombre)
    if isinstance(defaut, str):
        return "" if valeur is None else str(valeur)
    return valeur


def _convertir_enum(enum_cls: type[Enum], valeur: Any, defaut: Enum) -> Enum:
    try:
        return enum_cls(valeur)
    except ValueError:
        return defaut


@dataclass
class Enregistrement:
    """Base commune : conversion dict JSON <-> dataclass."""

    _ENUMS: ClassVar[dict[str, type[Enum]]] = {}
    _IMBRIQUES: ClassVar[dict[str, type]] = {}

    def to_dict(self) -> dict:
        data = {}
        for f in fields(self):
            valeur = getattr(self, f.name)
            if isinstance(valeur, Enum):
                valeur = valeur.value
            elif isinstance(valeur, list):
                valeur = [
                    v.to_dict() if isinstance(v, Enregistrement) else v
                    for v in valeur
                ]
            data[vers_camel(f.name)] = valeur
        return data

    @classmethod
    def from_dict(cls, data: dict):
        if not isinstance(data, dict):
            raise TypeError(f"{cls.__name__} attendu sous forme d'objet JSON, recu {type(data).__name__}")
        kwargs = {}
        for f in fields(cls):
            cle = vers_camel(f.name)
            if cle not in data:
                continue
            valeur = data[cle]
            if f.name in cls._IMBRIQUES:
                sous_type = cls._IMBRIQUES[f.name]
                valeur = [sous_type.from_dict(v) for v in (valeur or [])]
            elif f.name in cls._ENUMS:
                defaut = _defaut(f)
                if valeur is None and defaut is None:
                    kwargs[f.name] = None
                    continue
                valeur = _convertir_enum(cls._ENUMS[f.name], valeur, defaut)
            else:
                valeur = _coercer(valeur, _defaut(f))
            kwargs[f.name] = valeur
        return cls(**kwargs)


# --- Referentiel ---

@dataclass
class Client(Enregistrement):
    id: str = field(default_factory=generer_id)
    nom: str = ""
    prenom: str = ""
    telephone: str = ""
    email: str = ""
    adresse: str = ""
    date_creation: Optional[str] = None
    date_modification: Optional[str] = None


@dataclass
class TypeVehicule(Enregistrement):
    id: str = field(default_factory=generer_id)
    label: str = ""
    date_creation: Optional[str] = None
    date_modification: Optional[str] = None


@dataclass
class EntrepriseInfo(Enregistrement):
    """Coordonnees de l'entreprise (en-tete des factures)."""
    nom: str = ""
    adresse: str = ""
    telephone: str = ""
    email: str = ""


# --- Dossiers ---

@dataclass
class Dossier(Enregistrement):
    """Dossier de dedouanement d'un vehicule."""
    _ENUMS: ClassVar[dict] = {"statut": StatutDossier}

    id: str = field(default_factory=generer_id)
    numero_ch: str = ""
    chassis_ch: str = ""
    annee: str = ""
    reference_vehicule: str = ""
    type_vehicule: str = ""
    type_vehicule_id: Optional[str] = None
    client_id: Optional[str] = None
    statut: StatutDossier = StatutDossier.LANCE
    notes: str = ""
    date_creation: Optional[str] = None
    date_modification: Optional[str] = None
    # Champs client en ligne des imports anterieurs a la fiche client
    nom_client: str = ""
    prenom_client: str = ""
    telephone_client: str = ""


# --- Factures ---

@dataclass
class LigneDepense(Enregistrement):
    id: str = field(default_factory=generer_id)
    libelle: str = ""
    montant: float = 0.0


@dataclass
class Tranche(Enregistrement):
    """Echeance d'une facture payable en plusieurs fois."""
    _ENUMS: ClassVar[dict] = {"statut": StatutTranche, "mode_paiement": ModePaiement}

    id: str = ""
    facture_id: str = ""
    numero_tranche: int = 0
    montant: float = 0.0
    date_echeance: str = ""
    date_paiement: Optional[str] = None
    statut: StatutTranche = StatutTranche.EN_ATTENTE
    mode_paiement: Optional[ModePaiement] = None


@dataclass
class Paiement(Enregistrement):
    _ENUMS: ClassVar[dict] = {"mode_paiement": ModePaiement}

    id: str = field(default_factory=generer_id)
    facture_id: str = ""
    tranche_id: Optional[str] = None
    montant: float = 0.0
    date: str = ""
    mode_paiement: ModePaiement = ModePaiement.ESPECES
    date_creation: Optional[str] = None


@dataclass
class Facture(Enregistrement):
    """Facture de vente. Tranches et paiements sont embarques."""
    _ENUMS: ClassVar[dict] = {"statut": StatutFacture, "mode_paiement": ModePaiement}
    _IMBRIQUES: ClassVar[dict] = {
        "depenses_lignes": LigneDepense,
        "tranches": Tranche,
        "paiements": Paiement,
    }

    id: str = field(default_factory=generer_facture_id)
    dossier_id: str = ""
    client_id: Optional[str] = None
    reference_vehicule: str = ""
    type_vehicule: str = ""
    type_vehicule_id: Optional[str] = None
    vin: str = ""
    date_facture: str = ""
    prix_total_ttc: float = 0.0
    prix_achat: float = 0.0
    dedouanement: float = 0.0
    depenses: float = 0.0
    depenses_lignes: list[LigneDepense] = field(default_factory=list)
    # Derives de la liste des paiements (voir services.facturation.recalculer)
    montant_paye: float = 0.0
    montant_restant: float = 0.0
    statut: StatutFacture = StatutFacture.EN_ATTENTE
    mode_paiement: ModePaiement = ModePaiement.ESPECES
    pays_destination: str = ""
    tranches: list[Tranche] = field(default_factory=list)
    paiements: list[Paiement] = field(default_factory=list)
    date_creation: Optional[str] = None
    date_modification: Optional[str] = None
    nom_client: str = ""
    prenom_client: str = ""
    telephone: str = ""
    adresse: str = ""
    email: str = ""


# --- Locations ---

@dataclass
class Location(Enregistrement):
    """Contrat de location de camion."""
    _ENUMS: ClassVar[dict] = {"statut": StatutLocation}
    _IMBRIQUES: ClassVar[dict] = {"depenses_lignes": LigneDepense}

    id: str = field(default_factory=generer_id)
    reference_camion: str = ""
    type_camion: str = ""
    type_vehicule_id: Optional[str] = None
    client_id: Optional[str] = None
    date_debut: str = ""
    date_fin: str = ""
    montant_total: float = 0.0
    depenses: float = 0.0
    depenses_lignes: list[LigneDepense] = field(default_factory=list)
    statut: StatutLocation = StatutLocation.EN_COURS
    notes: str = ""
    date_creation: Optional[str] = None
    date_modification: Optional[str] = None
    nom_client: str = ""
    prenom_client: str = ""
    telephone_client: str = ""
