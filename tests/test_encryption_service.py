"""
Tests du chiffrement des gabarits
"""
import pytest

from biometrie.exceptions import DecryptionError
from biometrie.services.encryption_service import TemplateCipher


class TestTemplateCipher:
    """Chiffrement AES-CBC au format <iv hex>:<chiffré hex>"""

    @pytest.mark.parametrize("plaintext", ["", "a", "0123456789abcdef", "é" * 40, "f" * 128])
    def test_round_trip(self, cipher, plaintext):
        assert cipher.decrypt(cipher.encrypt(plaintext)) == plaintext

    def test_random_iv_per_encryption(self, cipher):
        first = cipher.encrypt("gabarit")
        second = cipher.encrypt("gabarit")

        assert first != second
        assert cipher.decrypt(first) == cipher.decrypt(second) == "gabarit"

    def test_wire_format(self, cipher):
        blob = cipher.encrypt("gabarit")
        iv_hex, encrypted_hex = blob.split(":")

        assert len(bytes.fromhex(iv_hex)) == TemplateCipher.IV_SIZE
        assert len(bytes.fromhex(encrypted_hex)) % 16 == 0
        assert "gabarit" not in blob

    def test_same_key_decrypts_across_instances(self, cipher):
        other = TemplateCipher("cle-de-test-biometrie-0123456789")
        assert other.decrypt(cipher.encrypt("gabarit")) == "gabarit"

    @pytest.mark.parametrize("blob", [
        "",
        "sans-separateur",
        "zz:zz",
        "00:00",
        "00112233445566778899aabbccddeeff:",
        "00112233445566778899aabbccddeeff:0011",
        "a:b:c",
    ])
    def test_malformed_blob_raises_decryption_error(self, cipher, blob):
        with pytest.raises(DecryptionError):
            cipher.decrypt(blob)

    def test_non_string_blob_raises_decryption_error(self, cipher):
        with pytest.raises(DecryptionError):
            cipher.decrypt(None)

    def test_key_is_required(self):
        with pytest.raises(ValueError):
            TemplateCipher("")
