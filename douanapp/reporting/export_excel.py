"""Exports Excel (openpyxl) des clients, dossiers, factures et locations.

Les exports ne modifient jamais le stockage : ils lisent les collections,
resolvent l'affichage client et ecrivent un classeur.
"""

import logging
from pathlib import Path
from typing import Any, Optional

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from douanapp.config.constants import (
    libelle_mode_paiement, libelle_statut_dossier, libelle_statut_facture,
    libelle_statut_location, libelle_statut_tranche,
)
from douanapp.models.entities import Facture
from douanapp.services.clients import affichage_client, formater_libelle_client
from douanapp.services.facturation import (
    benefice_facture, benefice_location, total_depenses,
)
from douanapp.services.integrite import libelle_type_vehicule
from douanapp.storage.repositories import DataStore
from douanapp.utils.date_utils import formater_date

logger = logging.getLogger("douanapp.export")

LARGEURS_DOSSIERS = [15, 18, 10, 18, 15, 18, 18, 15, 20, 14, 30]
LARGEURS_CLIENTS = [18, 18, 18, 25, 30]
LARGEURS_MODELE = [15, 18, 10, 18, 15, 18, 18, 18, 20, 30]

LIGNE_MODELE = {
    "Numéro CH": "CH-001",
    "Châssis CH": "ABC123456789",
    "Année": "2024",
    "Référence Véhicule": "REF-001",
    "Type Véhicule": "Berline",
    "Nom Client": "Diallo",
    "Prénom Client": "Amadou",
    "Téléphone": "+223 70 00 00 00",
    "Statut": "Lancé",
    "Notes": "",
}


def _remplir_feuille(ws, lignes: list[dict[str, Any]], largeurs: Optional[list[int]] = None) -> None:
    """En-tetes = cles de la premiere ligne, puis une ligne par dict."""
    if lignes:
        entetes = list(lignes[0].keys())
        ws.append(entetes)
        for cell in ws[1]:
            cell.font = Font(bold=True)
        for ligne in lignes:
            ws.append([ligne.get(e, "") for e in entetes])
    for i, largeur in enumerate(largeurs or [], start=1):
        ws.column_dimensions[get_column_letter(i)].width = largeur


def _sauver(wb: Workbook, chemin: Path) -> Path:
    chemin = Path(chemin)
    chemin.parent.mkdir(parents=True, exist_ok=True)
    wb.save(chemin)
    logger.info("Export ecrit : %s", chemin)
    return chemin


def _classeur(titre: str, lignes: list[dict], largeurs: Optional[list[int]] = None) -> Workbook:
    wb = Workbook()
    ws = wb.active
    ws.title = titre
    _remplir_feuille(ws, lignes, largeurs)
    return wb


# --- Lignes par entite ---

def lignes_clients(store: DataStore) -> list[dict]:
    return [
        {
            "Nom": c.nom,
            "Prénom": c.prenom,
            "Téléphone": c.telephone,
            "Email": c.email or "",
            "Adresse": c.adresse or "",
        }
        for c in store.clients.lister()
    ]


def lignes_dossiers(store: DataStore) -> list[dict]:
    lignes = []
    for d in store.dossiers.lister():
        c = affichage_client(store, d)
        lignes.append({
            "Numéro CH": d.numero_ch,
            "Châssis CH": d.chassis_ch or "",
            "Année": d.annee or "",
            "Référence Véhicule": d.reference_vehicule,
            "Type Véhicule": libelle_type_vehicule(store, d),
            "Nom Client": c.nom,
            "Prénom Client": c.prenom,
            "Téléphone": c.telephone,
            "Statut": libelle_statut_dossier(d.statut),
            "Date de création": formater_date(d.date_creation),
            "Notes": d.notes,
        })
    return lignes


def lignes_factures(store: DataStore) -> list[dict]:
    lignes = []
    for f in store.factures.lister():
        c = affichage_client(store, f)
        lignes.append({
            "N° Facture": f.id,
            "Client": formater_libelle_client(c),
            "Téléphone": c.telephone,
            "Véhicule": f.reference_vehicule,
            "Type": libelle_type_vehicule(store, f),
            "VIN": f.vin,
            "Date": formater_date(f.date_facture),
            "Prix de vente": f.prix_total_ttc,
            "Prix achat": f.prix_achat or 0,
            "Dédouanement": f.dedouanement or 0,
            "Dépenses": total_depenses(f),
            "Bénéfice": benefice_facture(f),
            "Payé": f.montant_paye,
            "Restant": f.montant_restant,
            "Mode paiement": libelle_mode_paiement(f.mode_paiement),
            "Pays destination": f.pays_destination,
            "Statut": libelle_statut_facture(f.statut),
        })
    return lignes


def lignes_locations(store: DataStore) -> list[dict]:
    lignes = []
    for l in store.locations.lister():
        c = affichage_client(store, l)
        lignes.append({
            "Référence": l.reference_camion,
            "Type": libelle_type_vehicule(store, l),
            "Client": formater_libelle_client(c),
            "Téléphone": c.telephone,
            "Date début": formater_date(l.date_debut),
            "Date fin": formater_date(l.date_fin),
            "Montant location": l.montant_total,
            "Dépenses": total_depenses(l),
            "Bénéfice": benefice_location(l),
            "Statut": libelle_statut_location(l.statut),
            "Date création": formater_date(l.date_creation),
            "Notes": l.notes,
        })
    return lignes


def lignes_tranches(facture: Facture) -> list[dict]:
    return [
        {
            "ID Tranche": t.id,
            "Tranche N°": t.numero_tranche,
            "Montant": t.montant,
            "Échéance": formater_date(t.date_echeance),
            "Date paiement": formater_date(t.date_paiement),
            "Statut": libelle_statut_tranche(t.statut),
            "Mode paiement": libelle_mode_paiement(t.mode_paiement),
        }
        for t in facture.tranches
    ]


# --- Classeurs ---

def exporter_clients(store: DataStore, chemin: Path) -> Path:
    return _sauver(_classeur("Clients", lignes_clients(store), LARGEURS_CLIENTS), chemin)


def exporter_dossiers(store: DataStore, chemin: Path) -> Path:
    return _sauver(_classeur("Dossiers", lignes_dossiers(store), LARGEURS_DOSSIERS), chemin)


def exporter_factures(store: DataStore, chemin: Path) -> Path:
    return _sauver(_classeur("Factures", lignes_factures(store)), chemin)


def exporter_locations(store: DataStore, chemin: Path) -> Path:
    return _sauver(_classeur("Locations", lignes_locations(store)), chemin)


def exporter_tranches(facture: Facture, chemin: Optional[Path] = None) -> Path:
    chemin = chemin or Path(f"echeancier_{facture.id}.xlsx")
    return _sauver(_classeur("Échéancier", lignes_tranches(facture)), chemin)


def generer_modele(chemin: Path) -> Path:
    """Classeur modele pour l'import de dossiers (une ligne d'exemple)."""
    return _sauver(_classeur("Template", [dict(LIGNE_MODELE)], LARGEURS_MODELE), chemin)


def rapport_complet(store: DataStore, chemin: Path) -> Path:
    """Rapport multi-feuilles : Dossiers, Factures, Locations (si presentes), Resume."""
    dossiers = store.dossiers.lister()
    factures = store.factures.lister()
    locations = store.locations.lister()

    wb = Workbook()
    ws = wb.active
    ws.title = "Dossiers"
    _remplir_feuille(ws, [
        {
            "Numéro CH": d.numero_ch,
            "Référence Véhicule": d.reference_vehicule,
            "Client": formater_libelle_client(affichage_client(store, d)),
            "Statut": libelle_statut_dossier(d.statut),
            "Date": formater_date(d.date_creation),
        }
        for d in dossiers
    ])

    _remplir_feuille(wb.create_sheet("Factures"), [
        {
            "N° Facture": f.id,
            "Client": formater_libelle_client(affichage_client(store, f)),
            "Prix de vente": f.prix_total_ttc,
            "Prix achat": f.prix_achat or 0,
            "Dédouanement": f.dedouanement or 0,
            "Bénéfice": benefice_facture(f),
            "Payé": f.montant_paye,
            "Restant": f.montant_restant,
            "Statut": libelle_statut_facture(f.statut),
        }
        for f in factures
    ])

    if locations:
        _remplir_feuille(wb.create_sheet("Locations"), [
            {
                "Référence": l.reference_camion,
                "Client": formater_libelle_client(affichage_client(store, l)),
                "Montant": l.montant_total,
                "Statut": libelle_statut_location(l.statut),
            }
            for l in locations
        ])

    total_ventes = sum(f.prix_total_ttc for f in factures)
    total_encaisse = sum(f.montant_paye for f in factures)
    _remplir_feuille(wb.create_sheet("Résumé"), [
        {"Indicateur": "Total dossiers", "Valeur": len(dossiers)},
        {"Indicateur": "Total factures", "Valeur": len(factures)},
        {"Indicateur": "Total locations", "Valeur": len(locations)},
        {"Indicateur": "Total ventes (FCFA)", "Valeur": total_ventes},
        {"Indicateur": "Total encaissé (FCFA)", "Valeur": total_encaisse},
        {"Indicateur": "Total restant (FCFA)", "Valeur": total_ventes - total_encaisse},
        {"Indicateur": "Total bénéfice (FCFA)", "Valeur": sum(benefice_facture(f) for f in factures)},
    ], [28, 18])

    return _sauver(wb, chemin)
