"""Point d'entree CLI pour DouanApp.

Usage :
    douanapp importer dossiers.xlsx [--remplacer]
    douanapp exporter rapport [-o rapport.xlsx]
    douanapp facture-pdf Facture_INV-20260120-ab12cd34 [-o facture.pdf]
    douanapp stats
    douanapp effacer --confirmer
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from douanapp.config.constants import SUPPORTED_EXTENSIONS, libelle_statut_dossier
from douanapp.config.settings import AppConfig
from douanapp.core.exceptions import DouanAppError
from douanapp.parsers.import_dossiers import importer_fichier
from douanapp.reporting import export_excel
from douanapp.reporting.facture_pdf import generer_facture_pdf
from douanapp.services.facturation import MoteurFacturation
from douanapp.storage.backends import FichierStorage
from douanapp.storage.repositories import DataStore
from douanapp.utils.number_utils import formater_montant

EXPORTS = {
    "clients": ("clients.xlsx", export_excel.exporter_clients),
    "dossiers": ("dossiers.xlsx", export_excel.exporter_dossiers),
    "factures": ("factures.xlsx", export_excel.exporter_factures),
    "locations": ("locations.xlsx", export_excel.exporter_locations),
    "rapport": ("rapport_complet.xlsx", export_excel.rapport_complet),
}


def configurer_logging(verbose: bool = False) -> None:
    """Configure le logging de l'application."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)-7s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def creer_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="douanapp",
        description="Dossiers de dedouanement, factures a tranches et locations de camions.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"Formats d'import supportes : {', '.join(SUPPORTED_EXTENSIONS.keys())}",
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help="Repertoire des donnees (defaut: $DOUANAPP_DATA_DIR ou ./data)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Mode verbeux (debug)",
    )
    sub = parser.add_subparsers(dest="commande", required=True)

    p_import = sub.add_parser("importer", help="Importer des dossiers (Excel ou CSV)")
    p_import.add_argument("fichier", type=Path, help="Fichier a importer")
    p_import.add_argument(
        "--remplacer",
        action="store_true",
        help="Remplacer tous les dossiers existants au lieu d'ajouter",
    )

    p_export = sub.add_parser("exporter", help="Exporter une collection en Excel")
    p_export.add_argument("quoi", choices=[*EXPORTS.keys(), "modele"])
    p_export.add_argument("--output", "-o", type=Path, default=None)

    p_pdf = sub.add_parser("facture-pdf", help="Generer le PDF d'une facture")
    p_pdf.add_argument("facture_id")
    p_pdf.add_argument("--output", "-o", type=Path, default=None)

    sub.add_parser("stats", help="Afficher les indicateurs du tableau de bord")

    p_effacer = sub.add_parser("effacer", help="Supprimer definitivement toutes les donnees")
    p_effacer.add_argument(
        "--confirmer",
        action="store_true",
        help="Confirmation obligatoire (operation irreversible)",
    )
    return parser


def _cmd_importer(store: DataStore, args) -> int:
    dossiers = importer_fichier(args.fichier)
    ajoutes = store.dossiers.importer(dossiers, remplacer=args.remplacer)
    print(f"{ajoutes} dossier(s) importe(s) sur {len(dossiers)} ligne(s) lue(s).")
    return 0


def _cmd_exporter(store: DataStore, config: AppConfig, args) -> int:
    if args.quoi == "modele":
        chemin = export_excel.generer_modele(args.output or config.exports_dir / "template_dossiers.xlsx")
    else:
        nom_defaut, exporter = EXPORTS[args.quoi]
        chemin = exporter(store, args.output or config.exports_dir / nom_defaut)
    print(f"Export : {chemin}")
    return 0


def _cmd_facture_pdf(store: DataStore, config: AppConfig, args) -> int:
    facture = MoteurFacturation(store, config.facturation).charger_facture(args.facture_id)
    chemin = args.output or config.exports_dir / f"{facture.id}.pdf"
    generer_facture_pdf(store, facture, chemin)
    print(f"PDF : {chemin}")
    return 0


def _cmd_stats(store: DataStore, config: AppConfig) -> int:
    stats = store.statistiques()
    devise = config.facturation.devise
    print(f"\n{'='*60}")
    print(f"  Dossiers  : {stats['total_dossiers']}")
    for statut, nombre in stats["par_statut"].items():
        print(f"    {libelle_statut_dossier(statut):<28} {nombre}")
    print(f"  Factures  : {stats['total_factures']}")
    print(f"  Locations : {stats['total_locations']}")
    print(f"  Ventes    : {formater_montant(stats['total_ventes'], devise)}")
    print(f"  Encaisse  : {formater_montant(stats['total_encaisse'], devise)}")
    print(f"  Restant   : {formater_montant(stats['total_restant'], devise)}")
    print(f"{'='*60}\n")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Point d'entree principal."""
    parser = creer_argument_parser()
    args = parser.parse_args(argv)

    configurer_logging(args.verbose)
    logger = logging.getLogger("douanapp")

    try:
        config = AppConfig(data_dir=args.data_dir) if args.data_dir else AppConfig()
        store = DataStore(FichierStorage(config.data_dir, config.prefixe_cles))

        if args.commande == "importer":
            return _cmd_importer(store, args)
        if args.commande == "exporter":
            return _cmd_exporter(store, config, args)
        if args.commande == "facture-pdf":
            return _cmd_facture_pdf(store, config, args)
        if args.commande == "stats":
            return _cmd_stats(store, config)
        if args.commande == "effacer":
            if not args.confirmer:
                logger.error("Operation irreversible : relancer avec --confirmer")
                return 1
            store.effacer_tout()
            print("Toutes les donnees ont ete supprimees.")
            return 0
        return 1

    except DouanAppError as e:
        logger.error("Erreur : %s", e)
        return 1
    except Exception as e:
        logger.exception("Erreur inattendue : %s", e)
        return 2


if __name__ == "__main__":
    sys.exit(main())
