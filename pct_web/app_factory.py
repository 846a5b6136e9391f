from __future__ import annotations

from datetime import timedelta
from typing import Optional

from flask import Flask

from pct_web.adapters.google_identity import GoogleIdentityVerifier
from pct_web.adapters.llm_mistral import MistralChatClient
from pct_web.config.ini_config import AppSettings, IniConfig
from pct_web.logging_setup import setup_logging
from pct_web.ports.identity import IdentityVerifier
from pct_web.ports.llm import LlmClient
from pct_web.repositories.result_repository import ResultRepository
from pct_web.services.comparison_service import ComparisonService
from pct_web.services.session_gate import SessionGate
from pct_web.services.url_normalization import GuessComUrlNormalizer
from pct_web.web.routes import create_blueprint


def _make_preset_repo(settings: AppSettings):
    if settings.sqlserver is None:
        return None
    # pyodbc needs the unixODBC runtime; only import it when presets are configured
    from pct_web.adapters.sqlserver_presets import SqlServerPresetRepository
    return SqlServerPresetRepository(settings.sqlserver)


def create_app(
    settings: Optional[AppSettings] = None,
    *,
    llm_client: Optional[LlmClient] = None,
    identity_verifier: Optional[IdentityVerifier] = None,
    preset_repo=None,
) -> Flask:
    """
    Composition root. With no arguments everything comes from the INI file;
    tests pass settings and fakes for the external collaborators.
    """
    if settings is None:
        settings = IniConfig.from_env_or_default().load_settings()

    setup_logging(settings.log_level)

    url_norm = GuessComUrlNormalizer(
        default_scheme=settings.default_scheme,
        guess_com_if_no_dot=settings.guess_com_if_no_dot,
        no_guess_hosts=settings.no_guess_hosts,
    )

    if llm_client is None:
        llm_client = MistralChatClient(
            api_key=settings.llm_api_key,
            endpoint=settings.llm_endpoint,
            model=settings.llm_model,
            max_tokens=settings.llm_max_tokens,
            temperature=settings.llm_temperature,
            timeout_seconds=settings.llm_timeout_seconds,
        )
    if identity_verifier is None:
        identity_verifier = GoogleIdentityVerifier(settings.google_client_id)
    if preset_repo is None:
        preset_repo = _make_preset_repo(settings)

    comparison_service = ComparisonService(
        llm_client=llm_client,
        result_repo=ResultRepository(max_records=settings.max_records),
    )
    session_gate = SessionGate(verifier=identity_verifier, session_minutes=settings.session_minutes)

    app = Flask(__name__)
    app.register_blueprint(create_blueprint(comparison_service, session_gate, url_norm, settings, preset_repo))

    app.config["SECRET_KEY"] = settings.secret_key
    app.config["PERMANENT_SESSION_LIFETIME"] = timedelta(minutes=settings.session_minutes)
    app.config["SESSION_COOKIE_HTTPONLY"] = True
    app.config["SESSION_COOKIE_SAMESITE"] = "Lax"

    app.config["HOST"] = settings.flask_host
    app.config["PORT"] = settings.flask_port
    app.config["DEBUG"] = settings.flask_debug

    app.logger.info(
        "App configured: model=%s presets=%s verbosity=%s",
        settings.llm_model,
        "on" if preset_repo is not None else "off",
        settings.prompt_verbosity,
    )
    if not settings.llm_api_key:
        app.logger.warning("No LLM API key configured; comparisons will fail until one is set")
    return app
