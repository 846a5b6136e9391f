from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, MutableMapping, Optional

from pct_web.domain.errors import AuthError
from pct_web.domain.models import UserInfo
from pct_web.ports.identity import IdentityVerifier

USER_KEY = "user_info"
EXPIRES_KEY = "session_expires_at"
DRAFT_KEY = "draft"

SESSION_EXPIRED_MESSAGE = "Your session has expired. Please sign in again."


@dataclass
class SessionGate:
    """
    Cookie-session access check. `session` is any mutable mapping; in the app it
    is Flask's signed session, in tests a plain dict.
    """
    verifier: IdentityVerifier
    session_minutes: int = 10
    clock: Callable[[], float] = time.time

    def login(self, session: MutableMapping, credential: str) -> UserInfo:
        credential = (credential or "").strip()
        if not credential:
            raise AuthError("No credential provided", status_code=400)

        user = self.verifier.verify(credential)

        session[USER_KEY] = user.to_dict()
        session[EXPIRES_KEY] = self.clock() + self.session_minutes * 60
        return user

    def current_user(self, session: MutableMapping) -> Optional[UserInfo]:
        raw = session.get(USER_KEY)
        expires_at = session.get(EXPIRES_KEY) or 0
        if not isinstance(raw, dict) or not raw.get("id"):
            return None
        if self.clock() >= float(expires_at):
            self.logout(session)
            return None
        return UserInfo.from_dict(raw)

    def logout(self, session: MutableMapping) -> None:
        for key in (USER_KEY, EXPIRES_KEY, DRAFT_KEY):
            session.pop(key, None)
