"""Classe de base abstraite pour les parseurs de fichiers d'import."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any


class BaseParser(ABC):
    """Interface commune : un fichier tabulaire -> en-tetes + lignes."""

    @abstractmethod
    def peut_traiter(self, chemin: Path) -> bool:
        """Verifie si ce parseur peut traiter le fichier donne."""

    @abstractmethod
    def lire_lignes(self, chemin: Path) -> tuple[list[str], list[list[Any]]]:
        """Retourne les en-tetes et les lignes de donnees (premiere feuille)."""
