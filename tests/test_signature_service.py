# tests/test_signature_service.py
"""Unit tests for HMAC signing."""

import pytest
from fuelguard.services.signature_service import SignatureService


def flip_bit(hex_signature: str, bit: int) -> str:
    raw = bytearray(bytes.fromhex(hex_signature))
    raw[bit // 8] ^= 1 << (bit % 8)
    return raw.hex()


class TestSignatureService:
    def test_round_trip(self, signer):
        sig = signer.sign("vehicle:abc:12345-116-31")
        assert len(sig) == 64
        assert signer.verify("vehicle:abc:12345-116-31", sig) is True

    def test_deterministic(self, signer):
        assert signer.sign("data") == signer.sign("data")

    def test_different_secret_fails(self, signer):
        other = SignatureService("another-secret")
        assert other.verify("data", signer.sign("data")) is False

    def test_different_data_fails(self, signer):
        assert signer.verify("data2", signer.sign("data")) is False

    @pytest.mark.parametrize("bit", [0, 7, 100, 255])
    def test_single_bit_flip_fails(self, signer, bit):
        sig = signer.sign("household:xyz")
        assert signer.verify("household:xyz", flip_bit(sig, bit)) is False

    @pytest.mark.parametrize("bad", ["", "zz", "abc", None, 12345, "00" * 31, "00" * 33, "g" * 64])
    def test_malformed_signature_is_false_not_error(self, signer, bad):
        assert signer.verify("data", bad) is False

    @pytest.mark.parametrize("mangle", [
        lambda s: " " + s,
        lambda s: s + "\n",
        lambda s: s[:32] + " " + s[32:],
        lambda s: " ".join(s[i:i + 2] for i in range(0, len(s), 2)),
    ])
    def test_whitespace_in_signature_is_rejected(self, signer, mangle):
        sig = signer.sign("data")
        assert signer.verify("data", mangle(sig)) is False

    def test_uppercase_hex_still_verifies(self, signer):
        assert signer.verify("data", signer.sign("data").upper()) is True

    def test_unencodable_data_is_false_not_error(self, signer):
        assert signer.verify("\ud800", "00" * 32) is False

    def test_secret_exposed_for_nonce_derivation(self, signer):
        assert signer.secret == "test-secret"
