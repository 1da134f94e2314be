"""
Configuration de l'application
"""
from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Annotated, Dict

from biometrie.modalities import BiometricType

# Seuil d'admission: un seuil nul accepterait un échantillon totalement divergent
Threshold = Annotated[float, Field(gt=0, le=100)]


def _check_modality_keys(value: Dict[str, float]) -> Dict[str, float]:
    """Chaque clé doit nommer une modalité supportée (valeur exacte de l'enum)"""
    for key in value:
        try:
            BiometricType(key)
        except ValueError:
            supported = ", ".join(t.value for t in BiometricType)
            raise ValueError(f"Modalité inconnue dans les seuils: {key!r} (attendu: {supported})")
    return value


class Settings(BaseSettings):
    """Paramètres de configuration"""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)

    # Application
    APP_NAME: str = "Biométrie Gabarits"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Base de données
    DATABASE_URL: str = "sqlite+aiosqlite:///./biometrie.db"

    # Chiffrement des gabarits - obligatoire, pas de clé par défaut
    BIOMETRIC_ENCRYPTION_KEY: SecretStr

    # Seuil d'admission global (0 exclu à 100)
    MIN_CONFIDENCE_THRESHOLD: Threshold = 85.0
    # Seuils par modalité, ex: {"voice": 80}. Une modalité absente utilise le seuil global.
    MODALITY_THRESHOLDS: Dict[str, Threshold] = {}

    @field_validator("BIOMETRIC_ENCRYPTION_KEY")
    @classmethod
    def _check_encryption_key(cls, value: SecretStr) -> SecretStr:
        if len(value.get_secret_value().strip()) < 16:
            raise ValueError("BIOMETRIC_ENCRYPTION_KEY doit contenir au moins 16 caractères")
        return value

    @field_validator("MODALITY_THRESHOLDS")
    @classmethod
    def _check_modality_thresholds(cls, value: Dict[str, float]) -> Dict[str, float]:
        return _check_modality_keys(value)


class BiometricConfig(BaseModel):
    """
    Configuration explicite du service biométrique.
    Construite une fois au démarrage puis passée aux constructeurs; immuable.
    """
    model_config = ConfigDict(frozen=True)

    encryption_key: SecretStr
    min_confidence_threshold: Threshold = 85.0
    modality_thresholds: Dict[str, Threshold] = {}

    @field_validator("modality_thresholds")
    @classmethod
    def _check_modality_thresholds(cls, value: Dict[str, float]) -> Dict[str, float]:
        return _check_modality_keys(value)

    def threshold_for(self, biometric_type: str) -> float:
        """Seuil applicable à une modalité (valeur de l'enum ou chaîne)"""
        key = getattr(biometric_type, "value", biometric_type)
        return self.modality_thresholds.get(key, self.min_confidence_threshold)

    @classmethod
    def from_settings(cls, settings: Settings) -> "BiometricConfig":
        return cls(
            encryption_key=settings.BIOMETRIC_ENCRYPTION_KEY,
            min_confidence_threshold=settings.MIN_CONFIDENCE_THRESHOLD,
            modality_thresholds=dict(settings.MODALITY_THRESHOLDS),
        )


# Échoue au démarrage si BIOMETRIC_ENCRYPTION_KEY est absente
settings = Settings()
