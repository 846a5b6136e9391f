from pct_web.domain.models import UserInfo


class IdentityVerifier:
    """Strategy interface: turn a sign-in credential into verified user claims."""
    def verify(self, credential: str) -> UserInfo:
        raise NotImplementedError
