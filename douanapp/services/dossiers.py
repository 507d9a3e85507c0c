"""Workflow des dossiers et saisie des dossiers, clients, locations et types.

Le workflow est une suite fixe de cinq etapes. Toute etape est accessible
directement depuis n'importe quelle autre : la position dans la suite ne sert
qu'a l'affichage de la progression.
"""

import logging
from datetime import date
from typing import Optional

from douanapp.config.constants import (
    StatutDossier, StatutLocation, WORKFLOW_ORDRE, libelle_statut_dossier,
)
from douanapp.core.exceptions import NotFoundError, ValidationError
from douanapp.models.entities import Client, Dossier, Location, TypeVehicule
from douanapp.services.facturation import nettoyer_lignes
from douanapp.services.validation import (
    champ_obligatoire, regles_client, regles_dossier, regles_location,
    valider,
)
from douanapp.storage.repositories import DataStore
from douanapp.utils.number_utils import parser_montant

logger = logging.getLogger("douanapp.dossiers")


# ============================
# WORKFLOW
# ============================

def convertir_statut(statut) -> StatutDossier:
    try:
        return StatutDossier(statut)
    except ValueError:
        raise ValidationError({"statut": f"Statut inconnu : {statut}"}) from None


def progression(statut) -> dict:
    """Position d'une etape dans le workflow (affichage uniquement)."""
    statut = convertir_statut(statut)
    index = WORKFLOW_ORDRE.index(statut)
    return {
        "etape": index + 1,
        "total": len(WORKFLOW_ORDRE),
        "pourcentage": round((index + 1) / len(WORKFLOW_ORDRE) * 100),
        "libelle": libelle_statut_dossier(statut),
        "etapes_franchies": [s.value for s in WORKFLOW_ORDRE[:index + 1]],
    }


def changer_statut(store: DataStore, dossier_id: str, statut) -> Dossier:
    """Passe le dossier a l'etape demandee, sans contrainte d'ordre."""
    nouveau = convertir_statut(statut)
    dossier = store.dossiers.get_par_id(dossier_id)
    if dossier is None:
        raise NotFoundError(f"Dossier introuvable : {dossier_id}")
    ancien = dossier.statut
    dossier.statut = nouveau
    dossier = store.dossiers.enregistrer(dossier)
    logger.info("Dossier %s : %s -> %s", dossier.numero_ch, ancien.value, nouveau.value)
    return dossier


# ============================
# SAISIE
# ============================

def _resoudre_type(store: DataStore, label: str, type_id: Optional[str]) -> tuple[str, Optional[str]]:
    """Complete le couple (libelle, id) d'un type de vehicule."""
    if type_id:
        t = store.types_vehicule.get_par_id(type_id)
        if t is None:
            raise ValidationError({"type_vehicule_id": "Type de véhicule introuvable"})
        return t.label, t.id
    if label:
        t = store.types_vehicule.get_par_label(label)
        return label, t.id if t else None
    return "", None


def _verifier_client(store: DataStore, client_id: str) -> None:
    if store.clients.get_par_id(client_id) is None:
        raise ValidationError({"client_id": "Client introuvable"})


def enregistrer_dossier(
    store: DataStore,
    *,
    numero_ch: str,
    reference_vehicule: str,
    client_id: str,
    type_vehicule: str = "",
    type_vehicule_id: Optional[str] = None,
    chassis_ch: str = "",
    annee: str = "",
    statut=StatutDossier.LANCE,
    notes: str = "",
    dossier_id: Optional[str] = None,
) -> Dossier:
    """Cree un dossier, ou le modifie si ``dossier_id`` est fourni."""
    numero_ch = (numero_ch or "").strip()
    valider(
        {"numero_ch": numero_ch, "reference_vehicule": reference_vehicule, "client_id": client_id},
        regles_dossier(store.dossiers, exclure_id=dossier_id),
    )
    _verifier_client(store, client_id)
    label, type_id = _resoudre_type(store, type_vehicule, type_vehicule_id)

    if dossier_id:
        dossier = store.dossiers.get_par_id(dossier_id)
        if dossier is None:
            raise NotFoundError(f"Dossier introuvable : {dossier_id}")
    else:
        dossier = Dossier()
    dossier.numero_ch = numero_ch
    dossier.reference_vehicule = reference_vehicule.strip()
    dossier.client_id = client_id
    dossier.type_vehicule = label
    dossier.type_vehicule_id = type_id
    dossier.chassis_ch = chassis_ch.strip()
    dossier.annee = str(annee).strip()
    dossier.statut = convertir_statut(statut)
    dossier.notes = notes
    return store.dossiers.enregistrer(dossier)


def enregistrer_client(
    store: DataStore,
    *,
    nom: str,
    prenom: str,
    telephone: str,
    email: str = "",
    adresse: str = "",
    client_id: Optional[str] = None,
) -> Client:
    valider({"nom": nom, "prenom": prenom, "telephone": telephone}, regles_client())
    if client_id:
        client = store.clients.get_par_id(client_id)
        if client is None:
            raise NotFoundError(f"Client introuvable : {client_id}")
    else:
        client = Client()
    client.nom = nom.strip()
    client.prenom = prenom.strip()
    client.telephone = telephone.strip()
    client.email = (email or "").strip()
    client.adresse = (adresse or "").strip()
    return store.clients.enregistrer(client)


def enregistrer_location(
    store: DataStore,
    *,
    reference_camion: str,
    client_id: str,
    montant_total,
    type_camion: str = "",
    type_vehicule_id: Optional[str] = None,
    date_debut: str = "",
    date_fin: str = "",
    lignes: Optional[list] = None,
    statut=StatutLocation.EN_COURS,
    notes: str = "",
    location_id: Optional[str] = None,
) -> Location:
    valider(
        {"reference_camion": reference_camion, "client_id": client_id, "montant_total": montant_total},
        regles_location(),
    )
    _verifier_client(store, client_id)
    try:
        statut = StatutLocation(statut)
    except ValueError:
        raise ValidationError({"statut": f"Statut inconnu : {statut}"}) from None
    label, type_id = _resoudre_type(store, type_camion, type_vehicule_id)

    if location_id:
        location = store.locations.get_par_id(location_id)
        if location is None:
            raise NotFoundError(f"Location introuvable : {location_id}")
    else:
        location = Location()
    location.reference_camion = reference_camion.strip()
    location.client_id = client_id
    location.montant_total = parser_montant(montant_total)
    location.type_camion = label
    location.type_vehicule_id = type_id
    # Debut par defaut : aujourd'hui ; fin par defaut : le debut
    location.date_debut = date_debut or date.today().isoformat()
    location.date_fin = date_fin or location.date_debut
    location.statut = statut
    location.notes = notes
    if lignes is not None:
        location.depenses_lignes = nettoyer_lignes(lignes)
        location.depenses = sum(l.montant for l in location.depenses_lignes)
    return store.locations.enregistrer(location)


def enregistrer_type_vehicule(store: DataStore, label: str, type_id: Optional[str] = None) -> TypeVehicule:
    """Cree ou renomme un type. Les references par identifiant suivent le nouveau libelle."""
    valider({"label": label}, {"label": champ_obligatoire("Le libellé")})
    label = label.strip()
    existant = store.types_vehicule.get_par_label(label)
    if existant and existant.id != type_id:
        raise ValidationError({"label": "Ce type de véhicule existe déjà"})
    if type_id:
        type_vehicule = store.types_vehicule.get_par_id(type_id)
        if type_vehicule is None:
            raise NotFoundError(f"Type de véhicule introuvable : {type_id}")
    else:
        type_vehicule = TypeVehicule()
    type_vehicule.label = label
    return store.types_vehicule.enregistrer(type_vehicule)

