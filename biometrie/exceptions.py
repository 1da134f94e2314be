"""
Exceptions du service biométrique

Les erreurs métier (doublon, modalité inconnue, échantillon invalide,
gabarit introuvable) sont remontées telles quelles à l'appelant.
Les erreurs d'infrastructure sont journalisées puis converties en
BiometricInternalError, dont le message ne divulgue aucun détail interne.
"""
from typing import Any, Dict, Optional


class BiometricError(Exception):
    """Classe de base de toutes les erreurs du service biométrique"""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class DuplicateEnrollment(BiometricError):
    """Un gabarit actif existe déjà pour (utilisateur, modalité)"""

    def __init__(self, user_id: str, biometric_type: str) -> None:
        super().__init__(
            f"User already has an active {biometric_type} template",
            {"user_id": user_id, "type": biometric_type},
        )


class UnsupportedModality(BiometricError):
    """Modalité biométrique inconnue"""

    def __init__(self, biometric_type: Any) -> None:
        super().__init__(
            f"Unsupported biometric type: {biometric_type}",
            {"type": str(biometric_type)},
        )


class InvalidBiometricSample(BiometricError):
    """Échantillon brut vide ou de type non exploitable"""


class NotFoundOrForbidden(BiometricError):
    """Gabarit absent ou n'appartenant pas au demandeur (volontairement indistinguables)"""

    def __init__(self) -> None:
        super().__init__("Biometric template not found or access denied")


class DecryptionError(BiometricError):
    """Gabarit chiffré mal formé ou clé incorrecte"""


class BiometricInternalError(BiometricError):
    """Erreur interne générique renvoyée à l'appelant"""
