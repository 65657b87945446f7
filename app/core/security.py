"""Bearer-token identity verification for state-mutating routes.

Every mutating route declares :func:`require_principal` as a dependency.
The token is read from the ``Authorization: Bearer`` header and handed to
the deployment's :class:`IdentityVerifier`. The default verifier checks
Google-issued OpenID Connect ID tokens against Google's public certs.
"""
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Protocol

import requests
from cachecontrol import CacheControl
from fastapi import Depends, Request
from google.auth import exceptions as google_exceptions
from google.auth.transport.requests import Request as GoogleRequest
from google.oauth2 import id_token

from app.core.config import settings
from app.core.errors import Unauthenticated

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VerifiedPrincipal:
    """Identity proven by a credential."""

    email: str
    subject: str | None = None


class IdentityVerifier(Protocol):
    """Turns a raw bearer token into a principal or raises Unauthenticated."""

    def verify(self, token: str) -> VerifiedPrincipal: ...


class GoogleIdentityVerifier:
    """Verify Google ID tokens (signature, expiry, issuer, audience)."""

    def __init__(self, audience: str | None = None):
        # An empty audience disables the audience check in google-auth.
        self.audience = audience or None
        # Google's certs are fetched through a session that honours their
        # Cache-Control headers instead of downloading them per request.
        self._request = GoogleRequest(session=CacheControl(requests.session()))

    def verify(self, token: str) -> VerifiedPrincipal:
        try:
            claims = id_token.verify_oauth2_token(
                token, self._request, audience=self.audience
            )
        except (ValueError, google_exceptions.GoogleAuthError) as e:
            logger.warning(f"Rejected ID token: {e}")
            raise Unauthenticated("Invalid or expired credential") from e

        email = claims.get("email")
        if not email or claims.get("email_verified") is False:
            logger.warning("Rejected ID token without a verified email claim")
            raise Unauthenticated("Credential has no verified email")

        return VerifiedPrincipal(email=email, subject=claims.get("sub"))


def get_bearer_token(request: Request) -> str:
    """Extract the bearer token, failing before any verification call."""
    auth_header = request.headers.get("authorization") or ""
    scheme, _, token = auth_header.partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise Unauthenticated("Missing bearer token")
    return token


@lru_cache
def get_identity_verifier() -> IdentityVerifier:
    """Dependency returning the process-wide verifier."""
    if not settings.google_client_id:
        logger.warning("GOOGLE_CLIENT_ID not set; ID token audience is not checked")
    return GoogleIdentityVerifier(settings.google_client_id)


def require_principal(
    token: str = Depends(get_bearer_token),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
) -> VerifiedPrincipal:
    """Authorization gate shared by every state-mutating route."""
    return verifier.verify(token)
