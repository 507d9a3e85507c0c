"""Generation du PDF d'une facture (reportlab)."""

import io
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from douanapp.config.constants import (
    libelle_mode_paiement, libelle_statut_facture, libelle_statut_tranche,
)
from douanapp.models.entities import Facture
from douanapp.services.clients import affichage_client, formater_libelle_client
from douanapp.services.facturation import benefice_facture, total_depenses
from douanapp.services.integrite import libelle_type_vehicule
from douanapp.storage.repositories import DataStore
from douanapp.utils.date_utils import formater_date
from douanapp.utils.number_utils import formater_montant

logger = logging.getLogger("douanapp.pdf")

BLEU_ENTETE = colors.Color(37 / 255, 99 / 255, 235 / 255)


def lignes_montants(facture: Facture) -> list[tuple[str, float]]:
    """Lignes du tableau des montants ; couts d'achat affiches seulement si non nuls."""
    lignes = [
        ("Prix de vente", facture.prix_total_ttc),
        ("Montant Payé", facture.montant_paye),
        ("Montant Restant", facture.montant_restant),
    ]
    if facture.prix_achat:
        lignes.append(("Prix d'achat", facture.prix_achat))
    if facture.dedouanement:
        lignes.append(("Dédouanement", facture.dedouanement))
    depenses = total_depenses(facture)
    if depenses:
        lignes.append(("Dépenses diverses", depenses))
    lignes.append(("Bénéfice", benefice_facture(facture)))
    return lignes


def generer_facture_pdf(store: DataStore, facture: Facture,
                        chemin: Optional[Path] = None) -> bytes:
    """Rend la facture en PDF A4 et retourne les octets (ecrits aussi dans ``chemin``)."""
    entreprise = store.entreprise.get()
    client = affichage_client(store, facture)

    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=A4)
    pdf.setTitle(facture.id)
    width, height = A4
    margin = 14 * mm
    milieu = width / 2 + 10 * mm

    def ensure_space(y_position: float, needed: float) -> float:
        if y_position <= margin + needed:
            pdf.showPage()
            return height - margin
        return y_position

    def draw_table(y_position: float, entetes: list[str], lignes: list[list[str]],
                   positions: list[float], droite: set[int], taille: int) -> float:
        """Tableau simple : bandeau d'en-tete colore, une ligne de texte par rang."""
        hauteur = taille + 8
        pdf.setFillColor(BLEU_ENTETE)
        pdf.rect(margin, y_position - hauteur + taille, width - 2 * margin, hauteur, stroke=0, fill=1)
        pdf.setFillColor(colors.white)
        pdf.setFont("Helvetica-Bold", taille)

        def draw_row(y_row, valeurs):
            for i, valeur in enumerate(valeurs):
                if i in droite:
                    pdf.drawRightString(positions[i], y_row, valeur)
                else:
                    pdf.drawString(positions[i], y_row, valeur)

        draw_row(y_position - 2, entetes)
        pdf.setFillColor(colors.black)
        pdf.setFont("Helvetica", taille)
        y_position -= hauteur + 4
        for valeurs in lignes:
            y_position = ensure_space(y_position, hauteur)
            draw_row(y_position, valeurs)
            pdf.setStrokeColor(colors.lightgrey)
            pdf.line(margin, y_position - 4, width - margin, y_position - 4)
            y_position -= hauteur
        return y_position

    # En-tete
    pdf.setFont("Helvetica-Bold", 22)
    pdf.drawCentredString(width / 2, height - 25 * mm, "FACTURE")

    y = height - 40 * mm
    pdf.setFont("Helvetica-Bold", 10)
    pdf.drawString(margin, y, entreprise.nom or "Entreprise")
    pdf.setFont("Helvetica", 10)
    for texte in (entreprise.adresse,
                  entreprise.telephone and f"Tél: {entreprise.telephone}",
                  entreprise.email and f"Email: {entreprise.email}"):
        if texte:
            y -= 5 * mm
            pdf.drawString(margin, y, texte)

    pdf.setFont("Helvetica-Bold", 10)
    pdf.drawRightString(width - margin, height - 40 * mm, facture.id)
    pdf.setFont("Helvetica", 10)
    pdf.drawRightString(width - margin, height - 46 * mm, f"Date: {formater_date(facture.date_facture)}")
    pdf.drawRightString(width - margin, height - 52 * mm,
                        f"Statut: {libelle_statut_facture(facture.statut)}")

    sep_y = min(y - 10 * mm, height - 62 * mm)
    pdf.setStrokeColor(colors.Color(0.78, 0.78, 0.78))
    pdf.line(margin, sep_y, width - margin, sep_y)

    # Blocs client et vehicule
    client_y = sep_y - 8 * mm
    pdf.setFont("Helvetica-Bold", 11)
    pdf.drawString(margin, client_y, "Client")
    pdf.setFont("Helvetica", 10)
    client_y -= 6 * mm
    pdf.drawString(margin, client_y, formater_libelle_client(client))
    for texte in (client.telephone and f"Tél: {client.telephone}",
                  client.email and f"Email: {client.email}",
                  client.adresse and f"Adresse: {client.adresse}"):
        if texte:
            client_y -= 5 * mm
            pdf.drawString(margin, client_y, texte)

    veh_y = sep_y - 8 * mm
    pdf.setFont("Helvetica-Bold", 11)
    pdf.drawString(milieu, veh_y, "Véhicule")
    pdf.setFont("Helvetica", 10)
    veh_y -= 6 * mm
    pdf.drawString(milieu, veh_y, f"Référence: {facture.reference_vehicule}")
    type_vehicule = libelle_type_vehicule(store, facture)
    for texte in (type_vehicule and f"Type: {type_vehicule}",
                  facture.vin and f"VIN: {facture.vin}",
                  facture.pays_destination and f"Destination: {facture.pays_destination}"):
        if texte:
            veh_y -= 5 * mm
            pdf.drawString(milieu, veh_y, texte)

    # Montants
    y = min(client_y, veh_y) - 12 * mm
    y = draw_table(
        y,
        ["Description", "Montant"],
        [[libelle, formater_montant(montant)] for libelle, montant in lignes_montants(facture)],
        [margin + 4, width - margin - 4],
        {1},
        10,
    )

    y = ensure_space(y - 4 * mm, 12)
    pdf.setFont("Helvetica", 10)
    pdf.drawString(margin, y, f"Mode de paiement: {libelle_mode_paiement(facture.mode_paiement)}")

    if facture.tranches:
        y = ensure_space(y - 12 * mm, 40)
        pdf.setFont("Helvetica-Bold", 12)
        pdf.drawString(margin, y, "Échéancier des tranches")
        y -= 8 * mm
        y = draw_table(
            y,
            ["ID", "Tranche", "Montant", "Échéance", "Paiement", "Statut", "Mode"],
            [
                [
                    t.id,
                    f"Tranche {t.numero_tranche}",
                    formater_montant(t.montant),
                    formater_date(t.date_echeance),
                    formater_date(t.date_paiement),
                    libelle_statut_tranche(t.statut),
                    libelle_mode_paiement(t.mode_paiement),
                ]
                for t in facture.tranches
            ],
            [margin + x * mm for x in (1, 58, 102, 106, 128, 150, 166)],
            {2},
            8,
        )

    # Pied de page
    pdf.setFont("Helvetica", 8)
    pdf.setFillColor(colors.grey)
    pdf.drawCentredString(
        width / 2, 10 * mm,
        f"Document généré le {formater_date(datetime.now().isoformat())} - {facture.id}",
    )

    pdf.showPage()
    pdf.save()
    contenu = buffer.getvalue()

    if chemin is not None:
        chemin = Path(chemin)
        chemin.parent.mkdir(parents=True, exist_ok=True)
        chemin.write_bytes(contenu)
        logger.info("PDF facture ecrit : %s", chemin)
    return contenu
