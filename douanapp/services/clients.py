"""Resolution des coordonnees client affichees pour un dossier, une facture ou une location."""

from dataclasses import dataclass

from douanapp.storage.repositories import DataStore


@dataclass
class AffichageClient:
    nom: str = ""
    prenom: str = ""
    telephone: str = ""
    email: str = ""
    adresse: str = ""


def affichage_client(store: DataStore, record) -> AffichageClient:
    """Fiche client referencee, sinon champs client historiques du record."""
    if record.client_id:
        client = store.clients.get_par_id(record.client_id)
        if client is not None:
            return AffichageClient(
                nom=client.nom,
                prenom=client.prenom,
                telephone=client.telephone or "",
                email=client.email or "",
                adresse=client.adresse or "",
            )
    # Les factures nomment le telephone sans suffixe
    telephone = getattr(record, "telephone_client", None)
    if telephone is None:
        telephone = getattr(record, "telephone", "")
    return AffichageClient(
        nom=record.nom_client or "",
        prenom=record.prenom_client or "",
        telephone=telephone or "",
        email=getattr(record, "email", "") or "",
        adresse=getattr(record, "adresse", "") or "",
    )


def formater_libelle_client(affichage: AffichageClient) -> str:
    nom_complet = f"{affichage.prenom} {affichage.nom}".strip()
    return nom_complet or "-"
