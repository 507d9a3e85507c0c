"""Controles d'integrite referentielle entre collections.

Les types de vehicule sont references par identifiant stable
(``typeVehiculeId``) ; les enregistrements anterieurs qui ne portent que le
libelle restent rattaches par egalite de texte.
"""

import logging
from typing import Optional

from douanapp.core.exceptions import IntegrityViolationError, NotFoundError
from douanapp.storage.repositories import DataStore

logger = logging.getLogger("douanapp.integrite")


def client_en_usage(store: DataStore, client_id: str) -> bool:
    """Vrai si un dossier, une facture ou une location reference ce client."""
    return (
        any(d.client_id == client_id for d in store.dossiers.lister())
        or any(f.client_id == client_id for f in store.factures.lister())
        or any(l.client_id == client_id for l in store.locations.lister())
    )


def _reference_type(record_type_id: Optional[str], record_label: str,
                    label: str, type_id: Optional[str]) -> bool:
    if type_id and record_type_id:
        return record_type_id == type_id
    return bool(label) and record_label == label


def type_vehicule_en_usage(store: DataStore, label: str, type_id: Optional[str] = None) -> bool:
    """Vrai si un dossier, une facture ou une location utilise ce type.

    Avec ``type_id``, un enregistrement portant un identifiant est compare
    par identifiant, les autres par libelle.
    """
    return (
        any(_reference_type(d.type_vehicule_id, d.type_vehicule, label, type_id)
            for d in store.dossiers.lister())
        or any(_reference_type(f.type_vehicule_id, f.type_vehicule, label, type_id)
               for f in store.factures.lister())
        or any(_reference_type(l.type_vehicule_id, l.type_camion, label, type_id)
               for l in store.locations.lister())
    )


def dossier_a_factures(store: DataStore, dossier_id: str) -> bool:
    return bool(store.factures.lister_par_dossier(dossier_id))


def libelle_type_vehicule(store: DataStore, record) -> str:
    """Libelle courant du type reference, ou libelle enregistre a defaut."""
    label = getattr(record, "type_vehicule", None)
    if label is None:
        label = getattr(record, "type_camion", "")
    if record.type_vehicule_id:
        t = store.types_vehicule.get_par_id(record.type_vehicule_id)
        if t is not None:
            return t.label
    return label or ""


# --- Suppressions gardees ---

def supprimer_client(store: DataStore, client_id: str) -> None:
    if store.clients.get_par_id(client_id) is None:
        raise NotFoundError(f"Client introuvable : {client_id}")
    if client_en_usage(store, client_id):
        raise IntegrityViolationError(
            "Ce client est lié à des dossiers, factures ou locations"
        )
    store.clients.supprimer(client_id)
    logger.info("Client %s supprime", client_id)


def supprimer_type_vehicule(store: DataStore, type_id: str) -> None:
    type_vehicule = store.types_vehicule.get_par_id(type_id)
    if type_vehicule is None:
        raise NotFoundError(f"Type de véhicule introuvable : {type_id}")
    if type_vehicule_en_usage(store, type_vehicule.label, type_vehicule.id):
        raise IntegrityViolationError(
            f"Le type « {type_vehicule.label} » est utilisé par des dossiers, factures ou locations"
        )
    store.types_vehicule.supprimer(type_id)
    logger.info("Type de vehicule %s supprime", type_vehicule.label)


def supprimer_dossier(store: DataStore, dossier_id: str) -> None:
    if store.dossiers.get_par_id(dossier_id) is None:
        raise NotFoundError(f"Dossier introuvable : {dossier_id}")
    store.dossiers.supprimer(dossier_id)
    logger.info("Dossier %s supprime", dossier_id)
