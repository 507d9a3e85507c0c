"""Moteur financier des factures.

Regles :
- montant paye = somme des paiements, montant restant = prix TTC - montant paye,
  statut derive de ces deux montants ; ``recalculer`` est le seul a les ecrire
- une tranche ne se paie qu'une fois toutes les tranches de rang inferieur payees
- une tranche en attente dont l'echeance est depassee passe en retard au
  chargement de la facture
- benefice = prix TTC - prix d'achat - dedouanement - depenses diverses
"""

import logging
from datetime import date
from typing import Iterable, Optional, Union

from douanapp.config.constants import (
    ModePaiement, StatutFacture, StatutTranche,
)
from douanapp.config.settings import FacturationConfig
from douanapp.core.exceptions import (
    NotFoundError, TrancheOrderError, ValidationError,
)
from douanapp.models.entities import (
    Facture, LigneDepense, Paiement, Tranche,
    generer_facture_id, generer_tranche_id, horodatage,
)
from douanapp.services.validation import (
    client_obligatoire, champ_obligatoire, nombre_optionnel_non_negatif,
    nombre_positif,
)
from douanapp.storage.repositories import DataStore
from douanapp.utils.date_utils import parser_date
from douanapp.utils.number_utils import formater_montant, parser_montant

logger = logging.getLogger("douanapp.facturation")


# ============================
# CALCULS PURS
# ============================

def statut_pour(montant_paye: float, prix_total_ttc: float) -> StatutFacture:
    if montant_paye >= prix_total_ttc:
        return StatutFacture.SOLDEE
    if montant_paye > 0:
        return StatutFacture.PARTIELLEMENT_PAYEE
    return StatutFacture.EN_ATTENTE


def recalculer(facture: Facture) -> Facture:
    """Recalcule montant paye, montant restant et statut depuis les paiements."""
    total_paye = round(sum(p.montant for p in facture.paiements), 2)
    facture.montant_paye = total_paye
    facture.montant_restant = round(facture.prix_total_ttc - total_paye, 2)
    facture.statut = statut_pour(total_paye, facture.prix_total_ttc)
    return facture


def peut_payer_tranche(facture: Facture, tranche: Tranche) -> bool:
    if tranche.statut == StatutTranche.PAYEE:
        return False
    return all(
        t.statut == StatutTranche.PAYEE
        for t in facture.tranches
        if t.numero_tranche < tranche.numero_tranche
    )


def marquer_tranches_en_retard(facture: Facture, aujourd_hui: Optional[date] = None) -> bool:
    """Passe en retard les tranches en attente echues. Vrai si changement."""
    aujourd_hui = aujourd_hui or date.today()
    modifie = False
    for t in facture.tranches:
        if t.statut != StatutTranche.EN_ATTENTE:
            continue
        echeance = parser_date(t.date_echeance)
        if echeance is not None and echeance < aujourd_hui:
            t.statut = StatutTranche.EN_RETARD
            modifie = True
    return modifie


def total_depenses(record) -> float:
    """Depenses diverses : les lignes detaillees priment sur le champ scalaire."""
    if record.depenses_lignes:
        return sum(l.montant or 0 for l in record.depenses_lignes)
    return record.depenses or 0


def calculer_benefice(prix_total_ttc: float, prix_achat: float = 0,
                      dedouanement: float = 0, depenses: float = 0) -> float:
    return prix_total_ttc - prix_achat - dedouanement - depenses


def benefice_facture(facture: Facture) -> float:
    return calculer_benefice(
        facture.prix_total_ttc,
        facture.prix_achat or 0,
        facture.dedouanement or 0,
        total_depenses(facture),
    )


def benefice_location(location) -> float:
    return location.montant_total - total_depenses(location)


def progression_paiement(facture: Facture) -> int:
    """Pourcentage paye, borne entre 0 et 100."""
    if facture.prix_total_ttc <= 0:
        return 0
    return max(0, min(100, round(facture.montant_paye / facture.prix_total_ttc * 100)))


def nettoyer_lignes(lignes: Iterable[Union[LigneDepense, dict]]) -> list[LigneDepense]:
    """Normalise les lignes saisies ; ignore celles sans libelle ni montant."""
    resultat = []
    for ligne in lignes or []:
        if isinstance(ligne, dict):
            ligne = LigneDepense(
                **{k: v for k, v in ligne.items() if k in ("id", "libelle", "montant")}
            )
        libelle = (ligne.libelle or "").strip()
        montant = parser_montant(ligne.montant) or 0.0
        if not libelle and montant <= 0:
            continue
        resultat.append(LigneDepense(id=ligne.id, libelle=libelle, montant=montant))
    return resultat


def _mode_paiement(valeur) -> ModePaiement:
    try:
        return ModePaiement(valeur)
    except ValueError:
        raise ValidationError({"mode_paiement": "Mode de paiement invalide"}) from None


# ============================
# OPERATIONS PERSISTEES
# ============================

class MoteurFacturation:
    """Creation des factures, paiements et couts, persistes via le DataStore."""

    def __init__(self, store: DataStore, config: FacturationConfig | None = None):
        self.store = store
        self.config = config or FacturationConfig()

    def _get(self, facture_id: str) -> Facture:
        facture = self.store.factures.get_par_id(facture_id)
        if facture is None:
            raise NotFoundError(f"Facture introuvable : {facture_id}")
        return facture

    def creer_facture(
        self,
        dossier_id: str,
        prix_total_ttc,
        *,
        client_id: Optional[str] = None,
        prix_achat=None,
        dedouanement=None,
        mode_paiement=None,
        pays_destination: str = "",
        tranches: Optional[list] = None,
    ) -> Facture:
        """Cree une facture pour un dossier, avec echeancier optionnel.

        Args:
            tranches: Liste de couples (montant, date d'echeance) ou de dicts
                {"montant", "date_echeance"}. Leur somme doit egaler le prix TTC.
        """
        dossier = self.store.dossiers.get_par_id(dossier_id) if dossier_id else None
        if client_id is None and dossier is not None:
            client_id = dossier.client_id

        erreurs = {}
        regles = {
            "dossier_id": (champ_obligatoire("Le dossier"), dossier_id),
            "client_id": (client_obligatoire(), client_id),
            "prix_total_ttc": (nombre_positif("Le montant"), prix_total_ttc),
            "prix_achat": (nombre_optionnel_non_negatif("Le prix d'achat"), prix_achat),
            "dedouanement": (nombre_optionnel_non_negatif("Le dédouanement"), dedouanement),
        }
        for champ, (regle, valeur) in regles.items():
            message = regle(valeur)
            if message:
                erreurs[champ] = message
        if dossier_id and dossier is None:
            erreurs["dossier_id"] = "Dossier introuvable"

        prix = parser_montant(prix_total_ttc)
        lignes_tranches = self._valider_tranches(tranches or [], prix, erreurs)
        if erreurs:
            raise ValidationError(erreurs)

        mode = _mode_paiement(mode_paiement or self.config.mode_paiement_defaut)
        facture_id = generer_facture_id()
        facture = Facture(
            id=facture_id,
            dossier_id=dossier.id,
            client_id=client_id,
            reference_vehicule=dossier.reference_vehicule,
            type_vehicule=dossier.type_vehicule,
            type_vehicule_id=dossier.type_vehicule_id,
            vin=dossier.chassis_ch or "",
            date_facture=horodatage(),
            prix_total_ttc=prix,
            prix_achat=parser_montant(prix_achat) or 0.0,
            dedouanement=parser_montant(dedouanement) or 0.0,
            mode_paiement=mode,
            pays_destination=pays_destination,
            tranches=[
                Tranche(
                    id=generer_tranche_id(facture_id, i),
                    facture_id=facture_id,
                    numero_tranche=i,
                    montant=montant,
                    date_echeance=echeance,
                )
                for i, (montant, echeance) in enumerate(lignes_tranches, start=1)
            ],
        )
        recalculer(facture)
        facture = self.store.factures.enregistrer(facture)
        logger.info(
            "Facture %s creee (%s, %d tranche(s))",
            facture.id, formater_montant(prix), len(facture.tranches),
        )
        return facture

    def _valider_tranches(self, tranches: list, prix: Optional[float], erreurs: dict) -> list:
        lignes = []
        total = 0.0
        for i, t in enumerate(tranches):
            if isinstance(t, dict):
                montant_brut, echeance_brute = t.get("montant"), t.get("date_echeance")
            else:
                montant_brut, echeance_brute = t
            montant = parser_montant(montant_brut)
            if montant is None or montant <= 0:
                erreurs[f"tranche_{i}_montant"] = "Montant invalide"
            else:
                total += montant
            echeance = parser_date(echeance_brute)
            if echeance is None:
                erreurs[f"tranche_{i}_date"] = "Date obligatoire"
            lignes.append((montant, echeance.isoformat() if echeance else ""))
        if lignes and prix is not None and abs(total - prix) > self.config.tolerance_montant:
            erreurs["tranches"] = (
                f"Somme des tranches ({formater_montant(total)}) "
                f"≠ prix total ({formater_montant(prix)})"
            )
        return lignes

    def charger_facture(self, facture_id: str, aujourd_hui: Optional[date] = None) -> Facture:
        """Charge une facture et persiste le passage en retard des tranches echues."""
        facture = self._get(facture_id)
        if marquer_tranches_en_retard(facture, aujourd_hui):
            facture = self.store.factures.enregistrer(facture)
            logger.info("Facture %s : tranche(s) passee(s) en retard", facture_id)
        return facture

    def enregistrer_paiement(
        self,
        facture_id: str,
        montant,
        *,
        date_paiement: Optional[str] = None,
        mode_paiement=ModePaiement.ESPECES,
        tranche_id: Optional[str] = None,
        aujourd_hui: Optional[date] = None,
    ) -> Facture:
        """Enregistre un paiement, eventuellement affecte a une tranche.

        Rien n'est ecrit si le montant est invalide ou si la tranche visee
        n'est pas la prochaine a payer.
        """
        valeur = parser_montant(montant)
        if valeur is None or valeur <= 0:
            raise ValidationError({"montant": "Montant invalide"})
        mode = _mode_paiement(mode_paiement)

        facture = self._get(facture_id)
        aujourd_hui = aujourd_hui or date.today()
        marquer_tranches_en_retard(facture, aujourd_hui)

        tranche = None
        if tranche_id:
            tranche = next((t for t in facture.tranches if t.id == tranche_id), None)
            if tranche is None:
                raise NotFoundError(f"Tranche introuvable : {tranche_id}")
            if tranche.statut == StatutTranche.PAYEE:
                raise ValidationError({"tranche_id": "Cette tranche est déjà payée"})
            if not peut_payer_tranche(facture, tranche):
                raise TrancheOrderError(
                    {"tranche_id": "Les tranches précédentes doivent être payées dans l'ordre chronologique."}
                )

        date_effective = date_paiement or aujourd_hui.isoformat()
        facture.paiements.append(Paiement(
            facture_id=facture.id,
            tranche_id=tranche_id or None,
            montant=valeur,
            date=date_effective,
            mode_paiement=mode,
            date_creation=horodatage(),
        ))
        if tranche is not None:
            tranche.date_paiement = date_effective
            tranche.statut = StatutTranche.PAYEE
            tranche.mode_paiement = mode

        recalculer(facture)
        facture = self.store.factures.enregistrer(facture)
        logger.info(
            "Paiement de %s sur %s (reste %s)",
            formater_montant(valeur), facture.id, formater_montant(facture.montant_restant),
        )
        return facture

    def modifier_couts(
        self,
        facture_id: str,
        *,
        prix_achat=None,
        dedouanement=None,
        lignes: Optional[list] = None,
    ) -> Facture:
        """Met a jour prix d'achat, dedouanement et depenses diverses.

        Les montants derives des paiements ne sont pas touches.
        """
        erreurs = {}
        for champ, libelle, valeur in (
            ("prix_achat", "Le prix d'achat", prix_achat),
            ("dedouanement", "Le dédouanement", dedouanement),
        ):
            message = nombre_optionnel_non_negatif(libelle)(valeur)
            if message:
                erreurs[champ] = message
        if erreurs:
            raise ValidationError(erreurs)

        facture = self._get(facture_id)
        if prix_achat is not None:
            facture.prix_achat = parser_montant(prix_achat) or 0.0
        if dedouanement is not None:
            facture.dedouanement = parser_montant(dedouanement) or 0.0
        if lignes is not None:
            facture.depenses_lignes = nettoyer_lignes(lignes)
            facture.depenses = sum(l.montant for l in facture.depenses_lignes)
        return self.store.factures.enregistrer(facture)

    def supprimer_facture(self, facture_id: str) -> None:
        """Supprime la facture avec ses tranches et paiements."""
        if not self.store.factures.supprimer(facture_id):
            raise NotFoundError(f"Facture introuvable : {facture_id}")
        logger.info("Facture %s supprimee", facture_id)
