"""Exceptions personnalisees pour DouanApp."""


class DouanAppError(Exception):
    """Exception de base."""


class ValidationError(DouanAppError):
    """Saisie invalide. Les messages sont indexes par champ."""

    def __init__(self, erreurs: dict[str, str] | str):
        if isinstance(erreurs, str):
            erreurs = {"global": erreurs}
        self.erreurs = dict(erreurs)
        super().__init__("; ".join(f"{k}: {v}" for k, v in self.erreurs.items()))


class TrancheOrderError(ValidationError):
    """Paiement d'une tranche avant les tranches precedentes."""


class IntegrityViolationError(DouanAppError):
    """Suppression d'une entite encore referencee ailleurs."""


class NotFoundError(DouanAppError):
    """Enregistrement introuvable."""


class StorageError(DouanAppError):
    """Erreur d'ecriture dans le stockage."""


class ParseError(DouanAppError):
    """Erreur lors de la lecture d'un fichier d'import."""


class UnsupportedFormatError(ParseError):
    """Format de fichier non supporte."""
