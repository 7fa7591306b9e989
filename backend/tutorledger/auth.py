"""
TutorLedger Backend: Admin Credential Check
============================================

What:  FastAPI dependency gating admin-only routes.
How:   The presented credential (X-Admin-Password header, or the
       admin_password query parameter for download links) is passed to a
       CredentialVerifier. The default verifier compares it in constant time
       with Settings.admin_password.

Routes depend on `require_admin`; the verifier itself comes from
`get_credential_verifier`, which tests and future per-user auth override
through app.dependency_overrides.
"""

import hmac
import logging
from typing import Optional, Protocol

from fastapi import Depends, Header, Query

from tutorledger.config import settings
from tutorledger.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


class CredentialVerifier(Protocol):
    def verify(self, credential: Optional[str]) -> bool: ...


class SharedSecretVerifier:
    """Single shared secret, no accounts, no expiry."""

    def __init__(self, secret: str):
        self._secret = secret.encode("utf-8")

    def verify(self, credential: Optional[str]) -> bool:
        if not credential:
            return False
        return hmac.compare_digest(credential.encode("utf-8"), self._secret)


def get_credential_verifier() -> CredentialVerifier:
    return SharedSecretVerifier(settings.admin_password)


async def require_admin(
    x_admin_password: Optional[str] = Header(default=None),
    admin_password: Optional[str] = Query(default=None, include_in_schema=False),
    verifier: CredentialVerifier = Depends(get_credential_verifier),
) -> None:
    if not verifier.verify(x_admin_password or admin_password):
        logger.warning("Rejected admin request with missing or wrong credential")
        raise AuthenticationError()
