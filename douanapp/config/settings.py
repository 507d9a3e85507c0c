"""Configuration globale de l'application."""

import os
from pathlib import Path
from dataclasses import dataclass, field


@dataclass
class FacturationConfig:
    """Configuration facturation."""
    tolerance_montant: float = 0.01
    devise: str = "FCFA"
    mode_paiement_defaut: str = "Especes"


@dataclass
class AppConfig:
    """Configuration principale de l'application."""
    base_dir: Path = field(default_factory=lambda: Path(__file__).parent.parent.parent)
    data_dir: Path = field(default=None)
    exports_dir: Path = field(default=None)
    prefixe_cles: str = "douanapp"

    facturation: FacturationConfig = field(default_factory=FacturationConfig)

    def __post_init__(self):
        if self.data_dir is None:
            env_dir = os.getenv("DOUANAPP_DATA_DIR")
            self.data_dir = Path(env_dir) if env_dir else self.base_dir / "data"
        if self.exports_dir is None:
            self.exports_dir = self.data_dir / "exports"

        # Creer les repertoires si necessaire
        for d in [self.data_dir, self.exports_dir]:
            d.mkdir(parents=True, exist_ok=True)
