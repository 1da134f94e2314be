"""
Tests du moteur de comparaison
"""
import pytest

from biometrie.exceptions import UnsupportedModality
from biometrie.models.biometric import BiometricType
from biometrie.services.matching_service import MatchingEngine


@pytest.fixture
def engine():
    return MatchingEngine()


class TestScore:
    """Confiance bornée à [0, 100]"""

    @pytest.mark.parametrize("modality", list(BiometricType))
    @pytest.mark.parametrize("template", ["", "a", "0123456789abcdef" * 4])
    def test_exact_match_is_100(self, engine, modality, template):
        assert engine.score(template, template, modality) == 100

    def test_accepts_string_modality(self, engine):
        assert engine.score("abcd", "abcd", "voice") == 100

    def test_unknown_modality(self, engine):
        with pytest.raises(UnsupportedModality):
            engine.score("abcd", "abce", "palm")

    def test_fully_divergent(self, engine):
        assert engine.score("aaaa", "bbbb", BiometricType.FINGERPRINT) == 0

    def test_empty_against_non_empty(self, engine):
        assert engine.score("", "abcd", BiometricType.FINGERPRINT) == 0

    def test_compares_over_shorter_length(self, engine):
        assert engine.score("abc", "abcdef", BiometricType.FINGERPRINT) == 100
        assert engine.score("abcdef", "abX", BiometricType.FINGERPRINT) == pytest.approx(200 / 3)

    @pytest.mark.parametrize("modality, expected", [
        (BiometricType.FINGERPRINT, 50.0),
        (BiometricType.FACE, 45.0),
        (BiometricType.VOICE, 40.0),
        (BiometricType.IRIS, 55.0),
    ])
    def test_modality_weights(self, engine, modality, expected):
        assert engine.score("abcd", "abXY", modality) == pytest.approx(expected)

    def test_clamped_to_100(self, engine):
        stored = "a" * 20
        candidate = "a" * 19 + "b"
        assert engine.score(candidate, stored, BiometricType.IRIS) == 100

    def test_custom_weights(self):
        engine = MatchingEngine({BiometricType.FACE: 5.0})
        assert engine.score("abcd", "abXY", BiometricType.FACE) == 100
        # Modalité sans poids: pondération neutre
        assert engine.score("abcd", "abXY", BiometricType.VOICE) == pytest.approx(50.0)

    @pytest.mark.parametrize("modality", list(BiometricType))
    def test_monotonic_with_divergence(self, engine, modality):
        stored = "0123456789abcdef"
        previous = engine.score(stored, stored, modality)
        for changed in range(1, len(stored) + 1):
            candidate = "#" * changed + stored[changed:]
            confidence = engine.score(candidate, stored, modality)
            assert 0 <= confidence <= previous
            previous = confidence
        assert previous == 0
