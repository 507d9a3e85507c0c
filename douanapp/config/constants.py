"""
Constantes metier de DouanApp.

Statuts des dossiers de dedouanement, des factures, des tranches et des
locations, avec leurs libelles d'affichage (source unique).
"""

from enum import Enum


class StatutDossier(str, Enum):
    """Etapes administratives d'un dossier de dedouanement."""
    LANCE = "Lance"
    PROVISOIRE_ENTREE = "Provisoire_Entree"
    PROVISOIRE_SORTIE = "Provisoire_Sortie"
    CARTE_GRISE_ENTREE = "CarteGrise_Entree"
    CARTE_GRISE_SORTIE = "CarteGrise_Sortie"


class StatutFacture(str, Enum):
    EN_ATTENTE = "En_attente"
    PARTIELLEMENT_PAYEE = "Partiellement_payee"
    SOLDEE = "Soldee"


class StatutTranche(str, Enum):
    EN_ATTENTE = "En_attente"
    PAYEE = "Payee"
    EN_RETARD = "En_retard"


class StatutLocation(str, Enum):
    EN_COURS = "En_cours"
    TERMINEE = "Terminee"
    ANNULEE = "Annulee"


class ModePaiement(str, Enum):
    ESPECES = "Especes"
    VIREMENT = "Virement"
    MOBILE_MONEY = "MobileMoney"
    CHEQUE = "Cheque"


# --- Workflow des dossiers ---

WORKFLOW_ORDRE = [
    StatutDossier.LANCE,
    StatutDossier.PROVISOIRE_ENTREE,
    StatutDossier.PROVISOIRE_SORTIE,
    StatutDossier.CARTE_GRISE_ENTREE,
    StatutDossier.CARTE_GRISE_SORTIE,
]


# --- Libelles ---

LIBELLES_DOSSIER = {
    StatutDossier.LANCE: "Lancé",
    StatutDossier.PROVISOIRE_ENTREE: "Provisoire (Entrée)",
    StatutDossier.PROVISOIRE_SORTIE: "Provisoire (Sortie)",
    StatutDossier.CARTE_GRISE_ENTREE: "Carte grise (Entrée)",
    StatutDossier.CARTE_GRISE_SORTIE: "Carte grise (Sortie)",
}

LIBELLES_FACTURE = {
    StatutFacture.EN_ATTENTE: "En attente",
    StatutFacture.PARTIELLEMENT_PAYEE: "Partiellement payée",
    StatutFacture.SOLDEE: "Soldée",
}

LIBELLES_TRANCHE = {
    StatutTranche.EN_ATTENTE: "En attente",
    StatutTranche.PAYEE: "Payée",
    StatutTranche.EN_RETARD: "En retard",
}

LIBELLES_LOCATION = {
    StatutLocation.EN_COURS: "En cours",
    StatutLocation.TERMINEE: "Terminée",
    StatutLocation.ANNULEE: "Annulée",
}

LIBELLES_PAIEMENT = {
    ModePaiement.ESPECES: "Espèces",
    ModePaiement.VIREMENT: "Virement bancaire",
    ModePaiement.MOBILE_MONEY: "Mobile Money",
    ModePaiement.CHEQUE: "Chèque",
}


def _libelle(table: dict, valeur) -> str:
    if not valeur:
        return "-"
    for cle, libelle in table.items():
        if cle.value == valeur:
            return libelle
    return str(valeur)


def libelle_statut_dossier(statut) -> str:
    return _libelle(LIBELLES_DOSSIER, statut)


def libelle_statut_facture(statut) -> str:
    return _libelle(LIBELLES_FACTURE, statut)


def libelle_statut_tranche(statut) -> str:
    return _libelle(LIBELLES_TRANCHE, statut)


def libelle_statut_location(statut) -> str:
    return _libelle(LIBELLES_LOCATION, statut)


def libelle_mode_paiement(mode) -> str:
    return _libelle(LIBELLES_PAIEMENT, mode)


# --- Stockage ---

CLE_DOSSIERS = "dossiers"
CLE_FACTURES = "factures"
CLE_LOCATIONS = "locations"
CLE_CLIENTS = "clients"
CLE_TYPES_VEHICULE = "types_vehicule"
CLE_ENTREPRISE = "entreprise"

TOUTES_LES_CLES = [
    CLE_DOSSIERS, CLE_FACTURES, CLE_LOCATIONS,
    CLE_CLIENTS, CLE_TYPES_VEHICULE, CLE_ENTREPRISE,
]

TYPES_VEHICULE_DEFAUT = [
    "Berline", "SUV", "Pick-up", "Porteur", "Semi-remorque", "Camion-citerne",
]

ENTREPRISE_DEFAUT = {
    "nom": "Haidara Service Commercial (HSC)",
    "adresse": "",
    "telephone": "",
    "email": "",
}

LIBELLE_DEPENSES_DIVERSES = "Dépenses diverses"


# --- Import ---

SUPPORTED_EXTENSIONS = {
    ".xlsx": "excel",
    ".xls": "excel",
    ".csv": "csv",
}
