"""Tests de l'import de dossiers (colonnes, CSV, Excel)."""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

import openpyxl
import pytest

from douanapp.config.constants import StatutDossier
from douanapp.core.exceptions import ParseError, UnsupportedFormatError
from douanapp.parsers.colonnes import mapper_colonnes, mapper_statut, normaliser, trouver_colonne
from douanapp.parsers.csv_parser import CSVParser
from douanapp.parsers.excel_parser import ExcelParser
from douanapp.parsers.import_dossiers import construire_dossiers, importer_fichier
from douanapp.parsers.parser_factory import ParserFactory

FIXTURES = Path(__file__).parent.parent / "fixtures"


class TestColonnes:

    def test_normaliser(self):
        assert normaliser("N° Châssis") == "nchassis"
        assert normaliser("Numéro_CH") == "numeroch"
        assert normaliser(None) == ""

    def test_trouver_colonne_exacte_avant_inclusion(self):
        entetes = ["Chassis CH", "CH"]
        assert trouver_colonne(entetes, ["ch"]) == 1

    def test_trouver_colonne_exclusion(self):
        assert trouver_colonne(["Chassis CH"], ["ch"], exclues={0}) is None

    def test_mapper_colonnes_entetes_courants(self):
        mapping = mapper_colonnes(["N° CH", "Châssis CH", "Année", "Réf. véhicule", "Prénom", "Nom", "Tél."])
        assert mapping == {
            "numero_ch": 0,
            "chassis_ch": 1,
            "annee": 2,
            "reference_vehicule": 3,
            "prenom_client": 4,
            "nom_client": 5,
            "telephone_client": 6,
        }

    def test_prenom_pas_confondu_avec_nom(self):
        mapping = mapper_colonnes(["Prénom Client", "Nom Client"])
        assert mapping["prenom_client"] == 0
        assert mapping["nom_client"] == 1

    def test_colonnes_inconnues(self):
        assert mapper_colonnes(["Couleur", "Poids"]) == {}

    @pytest.mark.parametrize("texte,attendu", [
        ("Lancé", StatutDossier.LANCE),
        ("PROVISOIRE ENTRÉE", StatutDossier.PROVISOIRE_ENTREE),
        ("Provisoire_Sortie", StatutDossier.PROVISOIRE_SORTIE),
        ("Carte grise (Entrée)", StatutDossier.CARTE_GRISE_ENTREE),
        ("CarteGrise_Sortie", StatutDossier.CARTE_GRISE_SORTIE),
        ("en douane", StatutDossier.LANCE),
        ("", StatutDossier.LANCE),
    ])
    def test_mapper_statut(self, texte, attendu):
        assert mapper_statut(texte) == attendu


class TestParserFactory:

    def setup_method(self):
        self.factory = ParserFactory()

    def test_csv_selection(self):
        assert isinstance(self.factory.get_parser(FIXTURES / "sample_dossiers.csv"), CSVParser)

    def test_excel_selection(self):
        assert isinstance(self.factory.get_parser(Path("dossiers.XLSX")), ExcelParser)

    def test_format_non_supporte(self):
        with pytest.raises(UnsupportedFormatError):
            self.factory.get_parser(Path("dossiers.pdf"))


class TestCSVParser:

    def setup_method(self):
        self.parser = CSVParser()

    def test_lecture_fixture(self):
        entetes, lignes = self.parser.lire_lignes(FIXTURES / "sample_dossiers.csv")
        assert entetes[0] == "N° CH"
        assert len(lignes) == 4

    def test_separateur_virgule_latin1(self, tmp_path):
        chemin = tmp_path / "latin.csv"
        chemin.write_bytes("Numéro CH,Référence\nCH-9,Réf 9\n".encode("latin-1"))
        entetes, lignes = self.parser.lire_lignes(chemin)
        assert entetes == ["Numéro CH", "Référence"]
        assert lignes == [["CH-9", "Réf 9"]]

    def test_fichier_vide(self, tmp_path):
        chemin = tmp_path / "vide.csv"
        chemin.write_text("")
        assert self.parser.lire_lignes(chemin) == ([], [])


class TestImportDossiers:

    def test_import_csv(self):
        dossiers = importer_fichier(FIXTURES / "sample_dossiers.csv")
        assert [d.numero_ch for d in dossiers] == ["CH-001", "CH-002", "CH-003", "CH-001"]
        premier = dossiers[0]
        assert premier.chassis_ch == "VF1RFB00123456789"
        assert premier.annee == "2019"
        assert premier.reference_vehicule == "REF-001"
        assert premier.type_vehicule == "Berline"
        assert (premier.prenom_client, premier.nom_client) == ("Amadou", "Diallo")
        assert premier.telephone_client == "+223 70 00 00 00"
        assert premier.notes == "Premier dossier"
        assert premier.client_id is None
        assert [d.statut for d in dossiers] == [
            StatutDossier.LANCE, StatutDossier.PROVISOIRE_ENTREE,
            StatutDossier.CARTE_GRISE_SORTIE, StatutDossier.LANCE,
        ]

    def test_identifiants_neufs_et_date_import(self):
        dossiers = importer_fichier(FIXTURES / "sample_dossiers.csv")
        assert len({d.id for d in dossiers}) == 4
        assert all(d.date_creation for d in dossiers)

    def test_champs_non_reconnus_vides(self):
        dossiers = construire_dossiers(["CH", "Couleur"], [["CH-1", "Rouge"]])
        assert dossiers[0].numero_ch == "CH-1"
        assert dossiers[0].reference_vehicule == ""
        assert dossiers[0].notes == ""

    def test_import_excel(self, tmp_path):
        chemin = tmp_path / "dossiers.xlsx"
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.append([])
        ws.append(["Numero CH", "Chassis", "Year", "Ref", "Etat"])
        ws.append(["CH-10", "VIN10", 2024, "R10", "provisoire sortie"])
        ws.append([None, None, None, None, None])
        ws.append(["CH-11", None, 2020.0, "R11", None])
        wb.create_sheet("Ignoree").append(["CH", "CH-99"])
        wb.save(chemin)

        dossiers = importer_fichier(chemin)
        assert [d.numero_ch for d in dossiers] == ["CH-10", "CH-11"]
        assert dossiers[0].annee == "2024"
        assert dossiers[1].annee == "2020"
        assert dossiers[1].chassis_ch == ""
        assert dossiers[0].statut == StatutDossier.PROVISOIRE_SORTIE
        assert dossiers[1].statut == StatutDossier.LANCE

    def test_fichier_sans_donnees(self, tmp_path):
        chemin = tmp_path / "entetes.csv"
        chemin.write_text("Numero CH;Reference\n", encoding="utf-8")
        with pytest.raises(ParseError):
            importer_fichier(chemin)

    def test_fichier_illisible(self, tmp_path):
        chemin = tmp_path / "faux.xlsx"
        chemin.write_bytes(b"ceci n'est pas un classeur")
        with pytest.raises(ParseError):
            importer_fichier(chemin)

    def test_fichier_absent(self, tmp_path):
        with pytest.raises(ParseError):
            importer_fichier(tmp_path / "absent.csv")

    def test_extension_non_supportee(self, tmp_path):
        chemin = tmp_path / "dossiers.pdf"
        chemin.write_bytes(b"%PDF")
        with pytest.raises(UnsupportedFormatError):
            importer_fichier(chemin)
