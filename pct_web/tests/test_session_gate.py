import pytest

from pct_web.domain.errors import AuthError
from pct_web.domain.models import UserInfo
from pct_web.services.session_gate import DRAFT_KEY, EXPIRES_KEY, USER_KEY, SessionGate


class FakeVerifier:
    def __init__(self, user=None, error=None):
        self.user = user or UserInfo(id="u-1", email="ann@example.com", name="Ann")
        self.error = error
        self.calls = []

    def verify(self, credential):
        self.calls.append(credential)
        if self.error:
            raise self.error
        return self.user


class FakeClock:
    def __init__(self, now=1_000.0):
        self.now = now

    def __call__(self):
        return self.now


def make_gate(verifier=None, minutes=10):
    clock = FakeClock()
    return SessionGate(verifier=verifier or FakeVerifier(), session_minutes=minutes, clock=clock), clock


def test_login_stores_user_and_expiry():
    gate, clock = make_gate()
    session = {}

    user = gate.login(session, "  token  ")

    assert user.id == "u-1"
    assert session[USER_KEY]["email"] == "ann@example.com"
    assert session[EXPIRES_KEY] == clock.now + 600
    assert gate.verifier.calls == ["token"]


def test_login_without_credential_is_bad_request():
    gate, _ = make_gate()
    with pytest.raises(AuthError) as exc:
        gate.login({}, "   ")
    assert exc.value.status_code == 400


def test_verifier_error_propagates_and_session_untouched():
    gate, _ = make_gate(FakeVerifier(error=AuthError("Invalid token", 401)))
    session = {}
    with pytest.raises(AuthError):
        gate.login(session, "bad")
    assert session == {}


def test_current_user_until_expiry():
    gate, clock = make_gate(minutes=1)
    session = {}
    gate.login(session, "token")
    session[DRAFT_KEY] = {"productA": {"name": "Notion"}}

    clock.now += 59
    assert gate.current_user(session) == UserInfo(id="u-1", email="ann@example.com", name="Ann")

    clock.now += 1
    assert gate.current_user(session) is None
    # expiry clears the whole sign-in state, draft included
    assert session == {}


def test_current_user_ignores_malformed_session():
    gate, _ = make_gate()
    assert gate.current_user({}) is None
    assert gate.current_user({USER_KEY: "nope", EXPIRES_KEY: 10**12}) is None
    assert gate.current_user({USER_KEY: {"id": ""}, EXPIRES_KEY: 10**12}) is None


def test_logout_is_idempotent():
    gate, _ = make_gate()
    session = {"other": 1}
    gate.login(session, "token")
    gate.logout(session)
    gate.logout(session)
    assert session == {"other": 1}
