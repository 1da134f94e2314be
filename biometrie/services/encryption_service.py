"""
Service de chiffrement AES-256-CBC pour les gabarits biométriques
Format de stockage: "<iv hex>:<chiffré hex>", un IV aléatoire par chiffrement
"""
from cryptography.hazmat.primitives import hashes, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
import os
import logging

from biometrie.exceptions import DecryptionError

logger = logging.getLogger(__name__)


class TemplateCipher:
    """
    Chiffrement/déchiffrement des gabarits au repos
    Le déchiffrement n'a besoin que du blob stocké et de la clé du service
    """

    IV_SIZE = 16
    SEPARATOR = ":"

    def __init__(self, encryption_key: str):
        """
        Initialise le chiffreur avec la clé de configuration

        Args:
            encryption_key: Secret du service. La clé AES de 32 bytes en est dérivée.
        """
        if not encryption_key:
            raise ValueError("Une clé de chiffrement est requise")
        self._key = self._derive_key(encryption_key)

    @staticmethod
    def _derive_key(secret: str) -> bytes:
        """
        Dérive une clé AES-256 à partir de la clé string
        Utilise PBKDF2 pour dériver une clé de 32 bytes
        """
        # Sel fixe: la même clé de configuration doit toujours donner la même clé AES
        salt = b'biometrie_gabarits_salt_v1'

        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=32,
            salt=salt,
            iterations=100000,
        )
        return kdf.derive(secret.encode())

    def encrypt(self, plaintext: str) -> str:
        """
        Chiffre un gabarit normalisé

        Args:
            plaintext: Gabarit en clair

        Returns:
            Blob "<iv hex>:<chiffré hex>"
        """
        iv = os.urandom(self.IV_SIZE)

        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()

        encryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).encryptor()
        encrypted = encryptor.update(padded) + encryptor.finalize()

        logger.debug(f"Gabarit chiffré: {len(padded)} bytes -> {len(encrypted)} bytes")
        return f"{iv.hex()}{self.SEPARATOR}{encrypted.hex()}"

    def decrypt(self, blob: str) -> str:
        """
        Déchiffre un blob produit par encrypt()

        Raises:
            DecryptionError: blob mal formé, clé incorrecte ou données corrompues
        """
        try:
            iv_hex, encrypted_hex = blob.split(self.SEPARATOR)
            iv = bytes.fromhex(iv_hex)
            encrypted = bytes.fromhex(encrypted_hex)
            if len(iv) != self.IV_SIZE:
                raise ValueError("taille d'IV invalide")
            if not encrypted or len(encrypted) % self.IV_SIZE:
                raise ValueError("taille de bloc invalide")

            decryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).decryptor()
            padded = decryptor.update(encrypted) + decryptor.finalize()

            unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
            plaintext = unpadder.update(padded) + unpadder.finalize()
            return plaintext.decode("utf-8")
        except (ValueError, TypeError, AttributeError) as e:
            # UnicodeDecodeError est une sous-classe de ValueError
            raise DecryptionError(
                "Impossible de déchiffrer le gabarit biométrique. Clé incorrecte ou données corrompues."
            ) from e
