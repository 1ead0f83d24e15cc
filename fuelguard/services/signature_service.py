# fuelguard/services/signature_service.py
"""
HMAC-SHA256 signing of arbitrary strings with a shared secret.
Used by the QR registry (payload signatures, registry keys, hashed national IDs).
"""

import hashlib
import hmac
from functools import lru_cache

from fuelguard.config import settings

SIGNATURE_LENGTH = 64            # hex chars of an HMAC-SHA256 digest
HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


class SignatureService:
    def __init__(self, secret: str):
        self._secret = secret.encode("utf-8")

    @property
    def secret(self) -> str:
        return self._secret.decode("utf-8")

    def sign(self, data: str) -> str:
        return hmac.new(self._secret, data.encode("utf-8"), hashlib.sha256).hexdigest()

    def verify(self, data: str, signature) -> bool:
        """Constant-time check. Malformed signatures or unsignable data verify False, never raise."""
        if not isinstance(signature, str) or len(signature) != SIGNATURE_LENGTH:
            return False
        if any(c not in HEX_DIGITS for c in signature):
            return False
        try:
            expected = self.sign(data)
        except UnicodeEncodeError:
            return False
        return hmac.compare_digest(bytes.fromhex(signature), bytes.fromhex(expected))


@lru_cache()
def get_signature_service() -> SignatureService:
    """Process-wide signer built from settings.QR_SECRET."""
    return SignatureService(settings.QR_SECRET)
