"""
Traitement des échantillons biométriques par modalité

Chaque processeur transforme un échantillon brut en gabarit normalisé
et en score de qualité. Les implémentations actuelles dérivent un
pseudo-gabarit d'une empreinte cryptographique de l'échantillon: un
extracteur de caractéristiques réel (minuties, embedding facial, MFCC...)
peut les remplacer tant que le contrat process() et les plages de
qualité sont respectés.
"""
from abc import ABC, abstractmethod
from typing import Dict, Iterable, NamedTuple, Optional, Tuple, Union
import hashlib
import logging

from biometrie.exceptions import InvalidBiometricSample, UnsupportedModality
from biometrie.models.biometric import BiometricType

logger = logging.getLogger(__name__)

RawSample = Union[str, bytes]


class ProcessedSample(NamedTuple):
    """Résultat du traitement d'un échantillon"""
    template: str
    quality: int


def parse_biometric_type(value) -> BiometricType:
    """Convertir une chaîne en modalité, UnsupportedModality sinon"""
    if isinstance(value, BiometricType):
        return value
    try:
        return BiometricType(value)
    except ValueError:
        raise UnsupportedModality(value) from None


class ModalityProcessor(ABC):
    """Contrat commun: process(échantillon) -> (gabarit, qualité)"""

    biometric_type: BiometricType
    # Plage de qualité (bornes incluses) propre à la modalité
    quality_range: Tuple[int, int]

    def process(self, raw_sample: RawSample) -> ProcessedSample:
        """
        Normaliser un échantillon brut
        Déterministe: un même échantillon donne toujours le même gabarit
        """
        data = self.decode_sample(raw_sample)
        template = self.extract_features(data)
        quality = self.assess_quality(data)
        logger.debug(f"Échantillon {self.biometric_type.value} traité (qualité: {quality})")
        return ProcessedSample(template=template, quality=quality)

    @staticmethod
    def decode_sample(raw_sample: RawSample) -> bytes:
        """Convertir l'échantillon en bytes, en retirant un éventuel préfixe data:"""
        if isinstance(raw_sample, str):
            if raw_sample.startswith("data:") and "," in raw_sample:
                raw_sample = raw_sample.split(",", 1)[1]
            data = raw_sample.encode("utf-8")
        elif isinstance(raw_sample, (bytes, bytearray)):
            data = bytes(raw_sample)
        else:
            raise InvalidBiometricSample(
                f"Unsupported biometric sample format: {type(raw_sample).__name__}"
            )

        if not data:
            raise InvalidBiometricSample("Empty biometric sample")
        return data

    @abstractmethod
    def extract_features(self, data: bytes) -> str:
        """Produire le gabarit normalisé"""

    def assess_quality(self, data: bytes) -> int:
        """Score de qualité déterministe, toujours dans quality_range"""
        low, high = self.quality_range
        seed = int.from_bytes(hashlib.sha256(data).digest()[:4], "big")
        return low + seed % (high - low + 1)


class FingerprintProcessor(ModalityProcessor):
    biometric_type = BiometricType.FINGERPRINT
    quality_range = (70, 100)

    def extract_features(self, data: bytes) -> str:
        return hashlib.sha256(data).hexdigest()


class FaceProcessor(ModalityProcessor):
    biometric_type = BiometricType.FACE
    quality_range = (75, 100)

    def extract_features(self, data: bytes) -> str:
        return hashlib.sha384(data).hexdigest()


class VoiceProcessor(ModalityProcessor):
    biometric_type = BiometricType.VOICE
    quality_range = (80, 100)

    def extract_features(self, data: bytes) -> str:
        return hashlib.blake2b(data, digest_size=32).hexdigest()


class IrisProcessor(ModalityProcessor):
    biometric_type = BiometricType.IRIS
    quality_range = (85, 100)

    def extract_features(self, data: bytes) -> str:
        return hashlib.sha512(data).hexdigest()


def build_registry(processors: Iterable[ModalityProcessor]) -> Dict[BiometricType, ModalityProcessor]:
    """Indexer des processeurs par modalité"""
    return {processor.biometric_type: processor for processor in processors}


def default_processors() -> Dict[BiometricType, ModalityProcessor]:
    return build_registry(
        [FingerprintProcessor(), FaceProcessor(), VoiceProcessor(), IrisProcessor()]
    )


def get_processor(
    biometric_type,
    processors: Optional[Dict[BiometricType, ModalityProcessor]] = None
) -> ModalityProcessor:
    """
    Sélectionner le processeur d'une modalité
    Raises:
        UnsupportedModality: modalité inconnue ou sans processeur enregistré
    """
    registry = processors if processors is not None else PROCESSORS
    modality = parse_biometric_type(biometric_type)
    try:
        return registry[modality]
    except KeyError:
        raise UnsupportedModality(modality.value) from None


# Registre global
PROCESSORS = default_processors()
