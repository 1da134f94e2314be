"""
Modalités biométriques supportées
"""
import enum


class BiometricType(str, enum.Enum):
    """Modalités biométriques supportées"""
    FINGERPRINT = "fingerprint"
    FACE = "face"
    VOICE = "voice"
    IRIS = "iris"
