from __future__ import annotations

import re
from dataclasses import replace

import pytest

from pct_web.app_factory import create_app
from pct_web.config.ini_config import AppSettings
from pct_web.domain.errors import AuthError, CompareError
from pct_web.domain.models import ComparisonSettings, Product, UserInfo
from pct_web.services.form_validation import MISSING_NAMES_MESSAGE


# -----------------------------
# Test doubles
# -----------------------------
class FakeVerifier:
    """The credential is the user id; "bad" is rejected."""

    def verify(self, credential):
        if credential == "bad":
            raise AuthError("Invalid token", status_code=401)
        return UserInfo(id=credential, email=f"{credential}@example.com", name=credential.upper())


class FakeLlm:
    def __init__(self):
        self.error = None
        self.prompts = []

    def complete(self, prompt):
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return "Notion is more flexible; Evernote is simpler."


class FakePreset:
    preset_id = 7
    display_label = "Acme - Notes apps"
    product_a = Product(name="Bear", url="https://bear.app")
    product_b = Product(name="Obsidian")
    settings = ComparisonSettings(tone="concise", sections=("Pricing & Plans",))


class FakePresetRepo:
    def get_active_presets(self):
        return [FakePreset()]

    def get_preset(self, preset_id):
        return FakePreset() if preset_id == 7 else None


SETTINGS = AppSettings(
    flask_host="127.0.0.1",
    flask_port=5000,
    flask_debug=False,
    secret_key="test-secret",
    google_client_id="client-1",
    session_minutes=10,
    session_check_seconds=60,
    llm_endpoint="https://llm.invalid/v1/chat/completions",
    llm_model="test-model",
    llm_max_tokens=100,
    llm_temperature=0.1,
    llm_timeout_seconds=5,
    llm_api_key="k",
    default_scheme="https",
    guess_com_if_no_dot=True,
    no_guess_hosts=frozenset({"localhost"}),
    prompt_verbosity="full",
    max_records=50,
    log_level="WARNING",
)

FORM = {
    "product_a_name": "Notion",
    "product_a_url": "notion.so",
    "product_b_name": "Evernote",
    "tone": "neutral",
    "format": "markdown",
    "layout": "side-by-side",
    "sections": ["Pricing & Plans", "Customer Support"],
    "custom_sections": "Roadmap",
}

COMPOSE_BODY = {
    "productA": {"name": "Notion", "url": "https://www.notion.so"},
    "productB": {"name": "Evernote"},
    "settings": {"customSections": "Ecosystem, , Roadmap"},
}


@pytest.fixture
def llm():
    return FakeLlm()


@pytest.fixture
def app(llm):
    app = create_app(SETTINGS, llm_client=llm, identity_verifier=FakeVerifier())
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


def login(client, user_id="u-1"):
    r = client.post("/api/auth/google", json={"credential": user_id})
    assert r.status_code == 200
    return r


# -----------------------------
# Auth
# -----------------------------
def test_anonymous_sees_login_page(client):
    r = client.get("/")
    assert r.status_code == 200
    assert b"Sign in" in r.data
    assert b'data-client_id="client-1"' in r.data


def test_login_session_and_logout(client):
    r = login(client)
    assert r.get_json()["user"]["email"] == "u-1@example.com"

    assert client.get("/api/auth/session").get_json()["isAuthenticated"] is True

    client.post("/api/auth/logout")
    state = client.get("/api/auth/session").get_json()
    assert state["isAuthenticated"] is False
    assert "expired" in state["message"]


@pytest.mark.parametrize("body, status", [({"credential": "bad"}, 401), ({}, 400)])
def test_login_rejected(client, body, status):
    r = client.post("/api/auth/google", json=body)
    assert r.status_code == status
    assert r.get_json()["success"] is False


def test_pages_and_api_require_login(client):
    assert client.post("/generate", data=FORM).status_code == 302
    assert client.get("/download/x/txt").status_code == 302
    r = client.post("/api/compose", json=COMPOSE_BODY)
    assert r.status_code == 401
    assert r.get_json() == {"error": "Authentication required."}


# -----------------------------
# HTML form flow
# -----------------------------
def test_form_page_lists_options(client):
    login(client)
    r = client.get("/")
    assert r.status_code == 200
    assert b"Comparison Sections" in r.data
    assert b'value="side-by-side"' in r.data
    assert b"Load a saved preset" not in r.data


def test_generate_renders_prompt_and_preview(client):
    login(client)
    r = client.post("/generate", data=FORM)

    assert r.status_code == 200
    html = r.get_data(as_text=True)
    assert "**Product A:** Notion (https://notion.so)" in html
    assert "3 sections" in html
    assert "| Category | Notion | Evernote |" in html
    assert re.search(r"/download/\d{8}_\d{6}_[0-9a-f]{8}/pdf", html)


def test_generate_with_missing_names_is_400(client):
    login(client)
    r = client.post("/generate", data={**FORM, "product_a_name": "", "product_b_name": ""})
    assert r.status_code == 400
    assert MISSING_NAMES_MESSAGE in r.get_data(as_text=True)


def test_generate_with_bad_url_is_400(client):
    login(client)
    r = client.post("/generate", data={**FORM, "product_b_url": "ftp://evernote.com"})
    assert r.status_code == 400
    assert "Product B URL must be a valid absolute URL" in r.get_data(as_text=True)


def test_run_shows_result(client, llm):
    login(client)
    r = client.post("/run", data=FORM)

    assert r.status_code == 200
    assert "Notion is more flexible" in r.get_data(as_text=True)
    assert llm.prompts and llm.prompts[0].startswith("You are a professional product comparison analyst.")


def test_run_failure_is_500_with_message(client, llm):
    llm.error = CompareError("The comparison request timed out.")
    login(client)
    r = client.post("/run", data=FORM)

    assert r.status_code == 500
    assert "The comparison request timed out." in r.get_data(as_text=True)


def test_draft_restored_and_reset(client):
    login(client)
    r = client.put("/api/draft", json={"productA": {"name": "Linear"}, "productB": {"name": "Jira"}})
    assert r.get_json() == {"saved": True}

    assert b'value="Linear"' in client.get("/").data

    assert client.post("/reset").status_code == 302
    assert b'value="Linear"' not in client.get("/").data


def test_logout_clears_draft(client):
    login(client)
    client.put("/api/draft", json={"productA": {"name": "Linear"}})
    client.post("/api/auth/logout")
    login(client)
    assert b'value="Linear"' not in client.get("/").data


# -----------------------------
# JSON API
# -----------------------------
def test_api_compose(client):
    login(client)
    r = client.post("/api/compose", json=COMPOSE_BODY)

    assert r.status_code == 200
    data = r.get_json()
    assert data["sectionCount"] == 12
    assert "11. Ecosystem\n12. Roadmap" in data["prompt"]
    assert data["preview"].startswith("# Notion vs Evernote Comparison")


def test_api_compose_validation_errors(client):
    login(client)
    r = client.post("/api/compose", json={"productA": {"name": "Notion"}, "settings": {"sections": []}})
    assert r.status_code == 400
    assert set(r.get_json()["errors"]) == {"product_b_name", "sections"}


def test_api_compare(client, llm):
    login(client)
    assert client.post("/api/compare", json={"prompt": "  "}).status_code == 400

    r = client.post("/api/compare", json={"prompt": "Compare A and B"})
    assert r.get_json() == {"result": "Notion is more flexible; Evernote is simpler."}

    llm.error = CompareError("Invalid model")
    r = client.post("/api/compare", json={"prompt": "Compare A and B"})
    assert r.status_code == 500
    assert r.get_json() == {"error": "Invalid model"}


# -----------------------------
# Downloads
# -----------------------------
@pytest.mark.parametrize(
    "fmt, filename, magic",
    [
        ("txt", "Notion-vs-Evernote-comparison-prompt.txt", b"You are a professional"),
        ("md", "Notion-vs-Evernote-comparison.md", b"# Notion vs Evernote"),
        ("pdf", "Notion-vs-Evernote-comparison.pdf", b"%PDF"),
    ],
)
def test_download_formats(client, fmt, filename, magic):
    login(client)
    run_id = client.post("/api/compose", json=COMPOSE_BODY).get_json()["runId"]

    r = client.get(f"/download/{run_id}/{fmt}")

    assert r.status_code == 200
    assert r.data.startswith(magic)
    assert filename in r.headers["Content-Disposition"]


def test_download_is_private_and_format_checked(app):
    owner, other = app.test_client(), app.test_client()
    login(owner, "u-1")
    login(other, "u-2")
    run_id = owner.post("/api/compose", json=COMPOSE_BODY).get_json()["runId"]

    assert other.get(f"/download/{run_id}/txt").status_code == 404
    assert owner.get(f"/download/{run_id}/docx").status_code == 404
    assert owner.get("/download/unknown/txt").status_code == 404


# -----------------------------
# Presets
# -----------------------------
@pytest.fixture
def preset_client(llm):
    app = create_app(
        replace(SETTINGS, prompt_verbosity="compact"),
        llm_client=llm,
        identity_verifier=FakeVerifier(),
        preset_repo=FakePresetRepo(),
    )
    return app.test_client()


def test_presets_listed_and_prefill(preset_client):
    login(preset_client)

    listing = preset_client.get("/").get_data(as_text=True)
    assert "Acme - Notes apps" in listing

    page = preset_client.get("/?preset_id=7").get_data(as_text=True)
    assert 'value="Bear"' in page
    assert 'value="concise" selected' in page
    assert 'value="compact" selected' in page


def test_unknown_preset_reports_error(preset_client):
    login(preset_client)
    page = preset_client.get("/?preset_id=99").get_data(as_text=True)
    assert "Preset id 99 not found or inactive." in page


# -----------------------------
# Input edge cases
# -----------------------------
@pytest.mark.parametrize("raw", ["%C2%B2", "-1", "7.0", "abc"])
def test_malformed_preset_id_is_ignored(client, raw):
    login(client)
    assert client.get(f"/?preset_id={raw}").status_code == 200


def test_malformed_preset_id_with_presets_enabled(preset_client):
    login(preset_client)
    page = preset_client.get("/?preset_id=%C2%B2").get_data(as_text=True)
    assert "Acme - Notes apps" in page
    assert "not found" not in page


def test_generate_rejects_text_that_is_not_a_url(client):
    login(client)
    r = client.post("/generate", data={**FORM, "product_a_url": "not a url"})
    assert r.status_code == 400
    assert "Product A URL must be a valid absolute URL" in r.get_data(as_text=True)


def test_long_draft_is_clipped_to_fit_the_cookie(client, caplog):
    login(client)
    body = {
        "productA": {"name": "Notion", "description": "ü" * 5000},
        "productB": {"name": "Evernote", "description": "é" * 5000},
        "settings": {"customSections": ", ".join(f"Section {i}" for i in range(500))},
    }

    with caplog.at_level("WARNING"):
        r = client.put("/api/draft", json=body)

    assert r.status_code == 200
    cookies = [c for c in r.headers.getlist("Set-Cookie") if c.startswith("session=")]
    assert cookies and len(cookies[0]) < 4093
    assert "clipped" in caplog.text
    assert b'value="Notion"' in client.get("/").data
