"""
Stockage cle-valeur des collections.

Chaque collection est un texte JSON range sous une cle. Deux implementations :
- FichierStorage : un fichier JSON par cle, ecriture atomique
- MemoireStorage : dictionnaire en memoire (tests, essais a blanc)
"""

import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from douanapp.core.exceptions import StorageError

logger = logging.getLogger("douanapp.storage")


class StorageBackend(ABC):
    """Interface commune des stockages cle-valeur."""

    def __init__(self, prefixe: str = "douanapp"):
        self.prefixe = prefixe

    def cle_complete(self, cle: str) -> str:
        return f"{self.prefixe}_{cle}" if self.prefixe else cle

    @abstractmethod
    def lire(self, cle: str) -> Optional[str]:
        """Retourne le texte stocke sous la cle, ou None si absent."""

    @abstractmethod
    def ecrire(self, cle: str, texte: str) -> None:
        """Remplace le texte stocke sous la cle."""

    @abstractmethod
    def supprimer(self, cle: str) -> None:
        """Supprime la cle (sans erreur si absente)."""


class MemoireStorage(StorageBackend):

    def __init__(self, prefixe: str = "douanapp"):
        super().__init__(prefixe)
        self._donnees: dict[str, str] = {}

    def lire(self, cle: str) -> Optional[str]:
        return self._donnees.get(self.cle_complete(cle))

    def ecrire(self, cle: str, texte: str) -> None:
        self._donnees[self.cle_complete(cle)] = texte

    def supprimer(self, cle: str) -> None:
        self._donnees.pop(self.cle_complete(cle), None)

    def cles(self) -> list[str]:
        return sorted(self._donnees)


class FichierStorage(StorageBackend):
    """Un fichier <prefixe>_<cle>.json par collection dans data_dir."""

    def __init__(self, data_dir: Path, prefixe: str = "douanapp"):
        super().__init__(prefixe)
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def _chemin(self, cle: str) -> Path:
        return self.data_dir / f"{self.cle_complete(cle)}.json"

    def lire(self, cle: str) -> Optional[str]:
        chemin = self._chemin(cle)
        try:
            return chemin.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Lecture impossible de %s : %s", chemin, e)
            return None

    def ecrire(self, cle: str, texte: str) -> None:
        """Ecriture atomique (fichier temporaire puis remplacement)."""
        chemin = self._chemin(cle)
        tmp_path = chemin.with_suffix(".tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                f.write(texte)
            os.replace(str(tmp_path), str(chemin))
        except OSError as e:
            raise StorageError(f"Ecriture impossible de {chemin}: {e}") from e
        logger.debug("Collection %s ecrite (%d octets)", cle, len(texte))

    def supprimer(self, cle: str) -> None:
        self._chemin(cle).unlink(missing_ok=True)
