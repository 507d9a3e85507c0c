"""Factory pour selectionner automatiquement le bon parseur."""

from pathlib import Path

from douanapp.config.constants import SUPPORTED_EXTENSIONS
from douanapp.core.exceptions import UnsupportedFormatError
from douanapp.parsers.base_parser import BaseParser
from douanapp.parsers.csv_parser import CSVParser
from douanapp.parsers.excel_parser import ExcelParser


class ParserFactory:
    """Selectionne et instancie le parseur adapte au type de fichier."""

    def __init__(self):
        self._parsers: list[BaseParser] = [
            CSVParser(),
            ExcelParser(),
        ]

    def get_parser(self, chemin: Path) -> BaseParser:
        """Retourne le parseur adapte au fichier donne."""
        ext = chemin.suffix.lower()
        if ext not in SUPPORTED_EXTENSIONS:
            raise UnsupportedFormatError(
                f"Format '{ext}' non supporté. "
                f"Utilisez {', '.join(SUPPORTED_EXTENSIONS.keys())}"
            )

        for parser in self._parsers:
            if parser.peut_traiter(chemin):
                return parser

        raise UnsupportedFormatError(
            f"Aucun parseur disponible pour le fichier {chemin.name}"
        )
