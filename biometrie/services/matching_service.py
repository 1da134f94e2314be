"""
Moteur de comparaison de gabarits
"""
from typing import Dict, Optional

from biometrie.models.biometric import BiometricType
from biometrie.services.modality_service import parse_biometric_type


MAX_CONFIDENCE = 100.0
MIN_CONFIDENCE = 0.0

# Pondération appliquée à la similarité brute selon la modalité
DEFAULT_MODALITY_WEIGHTS: Dict[BiometricType, float] = {
    BiometricType.FINGERPRINT: 1.0,
    BiometricType.FACE: 0.9,
    BiometricType.VOICE: 0.8,
    BiometricType.IRIS: 1.1,
}


class MatchingEngine:
    """
    Calcule une confiance entre 0 et 100 pour deux gabarits déchiffrés.

    La similarité actuelle (accord caractère par caractère) est un substitut
    à un vrai comparateur biométrique. Tout remplaçant doit conserver le
    contrat numérique: score borné à [0, 100], 100 pour deux gabarits identiques.
    """

    def __init__(self, modality_weights: Optional[Dict[BiometricType, float]] = None):
        self.modality_weights = dict(modality_weights or DEFAULT_MODALITY_WEIGHTS)

    @staticmethod
    def similarity(candidate: str, stored: str) -> float:
        """Pourcentage de positions identiques sur la longueur de la plus courte chaîne"""
        length = min(len(candidate), len(stored))
        if length == 0:
            return 0.0
        agreement = sum(1 for a, b in zip(candidate, stored) if a == b)
        return agreement / length * 100

    def score(self, candidate: str, stored: str, biometric_type) -> float:
        """
        Comparer le gabarit candidat au gabarit stocké
        Args:
            candidate: Gabarit issu de l'échantillon à vérifier
            stored: Gabarit enregistré (déchiffré)
            biometric_type: Modalité des deux gabarits
        Returns:
            Confiance dans [0, 100]
        """
        modality = parse_biometric_type(biometric_type)

        # Correspondance parfaite
        if candidate == stored:
            return MAX_CONFIDENCE

        weighted = self.similarity(candidate, stored) * self.modality_weights.get(modality, 1.0)
        return max(MIN_CONFIDENCE, min(MAX_CONFIDENCE, weighted))
