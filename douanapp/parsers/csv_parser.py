"""Parseur pour les fichiers CSV d'import de dossiers."""

import csv
import io
from pathlib import Path
from typing import Any

from douanapp.core.exceptions import ParseError
from douanapp.parsers.base_parser import BaseParser


class CSVParser(BaseParser):
    """Parse un CSV ; separateur detecte (virgule, point-virgule, tabulation)."""

    def peut_traiter(self, chemin: Path) -> bool:
        return chemin.suffix.lower() == ".csv"

    def lire_lignes(self, chemin: Path) -> tuple[list[str], list[list[Any]]]:
        try:
            try:
                contenu = chemin.read_text(encoding="utf-8-sig")
            except UnicodeDecodeError:
                contenu = chemin.read_text(encoding="latin-1")
        except OSError as e:
            raise ParseError(f"Impossible de lire le fichier CSV {chemin}: {e}") from e

        if not contenu.strip():
            return [], []

        try:
            separateur = csv.Sniffer().sniff(contenu[:4096], delimiters=",;\t").delimiter
        except csv.Error:
            # Detecter manuellement le separateur
            first_line = contenu.split("\n", 1)[0]
            if ";" in first_line:
                separateur = ";"
            elif "\t" in first_line:
                separateur = "\t"
            else:
                separateur = ","

        reader = csv.reader(io.StringIO(contenu), delimiter=separateur)
        header = next(reader, [])
        if not any(h.strip() for h in header):
            raise ParseError(f"Impossible de detecter les colonnes du CSV: {chemin}")

        lignes = [row for row in reader if any(c.strip() for c in row)]
        return [h.strip() for h in header], lignes
