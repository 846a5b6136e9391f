from __future__ import annotations

import logging

from google.auth.exceptions import GoogleAuthError
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token

from pct_web.domain.errors import AuthError
from pct_web.domain.models import UserInfo
from pct_web.ports.identity import IdentityVerifier

log = logging.getLogger(__name__)


class GoogleIdentityVerifier(IdentityVerifier):
    """Verifies Google Sign-In ID tokens against our OAuth client id."""

    def __init__(self, client_id: str):
        self.client_id = client_id
        self._request = google_requests.Request()

    def verify(self, credential: str) -> UserInfo:
        if not self.client_id:
            raise AuthError("Google sign-in is not configured.", status_code=500)
        try:
            payload = id_token.verify_oauth2_token(credential, self._request, self.client_id)
        except ValueError as e:
            log.info("Rejected Google ID token: %s", e)
            raise AuthError("Invalid token", status_code=401) from e
        except GoogleAuthError as e:
            log.exception("Google token verification failed")
            raise AuthError("Authentication failed", status_code=500) from e

        if not payload or not payload.get("sub"):
            raise AuthError("Invalid token", status_code=401)

        return UserInfo(
            id=str(payload["sub"]),
            email=str(payload.get("email") or ""),
            name=str(payload.get("name") or ""),
            picture=str(payload.get("picture") or ""),
        )
