"""Parseur pour les classeurs Excel d'import de dossiers (premiere feuille)."""

from pathlib import Path
from typing import Any

import openpyxl

from douanapp.core.exceptions import ParseError
from douanapp.parsers.base_parser import BaseParser


class ExcelParser(BaseParser):
    """Parse les fichiers Excel (.xlsx)."""

    def peut_traiter(self, chemin: Path) -> bool:
        return chemin.suffix.lower() in (".xlsx", ".xls")

    def lire_lignes(self, chemin: Path) -> tuple[list[str], list[list[Any]]]:
        try:
            wb = openpyxl.load_workbook(chemin, read_only=True, data_only=True)
        except Exception as e:
            raise ParseError(f"Impossible de lire le fichier Excel {chemin}: {e}") from e

        try:
            ws = wb.worksheets[0]
            rows = [list(r) for r in ws.iter_rows(values_only=True)]
        finally:
            wb.close()

        # Ignorer les lignes vides en tete de feuille
        while rows and all(c is None or str(c).strip() == "" for c in rows[0]):
            rows.pop(0)
        if not rows:
            return [], []

        header = ["" if c is None else str(c).strip() for c in rows[0]]
        lignes = [
            ["" if c is None else c for c in row]
            for row in rows[1:]
            if any(c is not None and str(c).strip() != "" for c in row)
        ]
        return header, lignes
