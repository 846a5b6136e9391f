########## ini_config.py

import logging
import os
import secrets
from configparser import ConfigParser
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from pct_web.adapters.llm_mistral import DEFAULT_ENDPOINT, DEFAULT_MODEL
from pct_web.domain.models import PromptVerbosity

INI_DEFAULT_NAME = "ProductComparison.ini"

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SqlServerSettings:
    driver: str
    server: str
    database: str
    username: str
    password: str
    trust_cert: bool
    table: str


@dataclass(frozen=True)
class AppSettings:
    flask_host: str
    flask_port: int
    flask_debug: bool
    secret_key: str

    google_client_id: str
    session_minutes: int
    session_check_seconds: int

    llm_endpoint: str
    llm_model: str
    llm_max_tokens: int
    llm_temperature: float
    llm_timeout_seconds: int
    llm_api_key: str

    default_scheme: str
    guess_com_if_no_dot: bool
    no_guess_hosts: frozenset

    prompt_verbosity: str
    max_records: int
    log_level: str

    # None when the INI has no [sqlserver] section (presets disabled)
    sqlserver: Optional[SqlServerSettings] = None


class IniConfig:
    """
    Adapter around ConfigParser and environment overrides.
    Keeps INI handling out of your app/service code.
    """

    def __init__(self, ini_path: Path):
        self._ini_path = ini_path
        self._cfg = ConfigParser()
        read_ok = self._cfg.read(str(ini_path), encoding="utf-8-sig")
        if not read_ok:
            raise FileNotFoundError(f"INI file not found or unreadable: {ini_path}")

    @property
    def ini_path(self) -> Path:
        return self._ini_path

    @staticmethod
    def from_env_or_default() -> "IniConfig":
        ini_raw = (os.getenv("APP_INI") or "").strip()
        # If APP_INI is not set, default to repo-root-relative ini location
        ini_path = Path(ini_raw) if ini_raw else (Path(__file__).resolve().parents[2] / INI_DEFAULT_NAME)
        return IniConfig(ini_path)

    def _str(self, section: str, key: str, fallback: str = "") -> str:
        return (self._cfg.get(section, key, fallback=fallback) or "").strip() or fallback

    def _load_sqlserver(self) -> Optional[SqlServerSettings]:
        if not self._cfg.has_section("sqlserver"):
            return None
        trust_raw = self._str("sqlserver", "trust_cert", "yes").lower()
        return SqlServerSettings(
            driver=self._str("sqlserver", "driver", "ODBC Driver 17 for SQL Server"),
            server=self._str("sqlserver", "server", "localhost"),
            database=self._str("sqlserver", "database"),
            username=self._str("sqlserver", "username"),
            password=(self._cfg.get("sqlserver", "password", fallback="") or "").strip(),
            trust_cert=trust_raw in ("yes", "true", "1"),
            table=self._str("sqlserver", "table", "dbo.ComparisonPresets"),
        )

    def load_settings(self) -> AppSettings:
        # Flask
        flask_host = self._str("flask", "host", "127.0.0.1")
        flask_port = self._cfg.getint("flask", "port", fallback=5000)
        flask_debug = self._cfg.getboolean("flask", "debug", fallback=False)
        secret_key = (os.getenv("FLASK_SECRET_KEY") or "").strip() or self._str("flask", "secret_key")
        if not secret_key:
            # sessions will not survive a restart
            log.warning("No secret_key configured; generating a throwaway key")
            secret_key = secrets.token_hex(32)

        # Auth
        google_client_id = (os.getenv("GOOGLE_CLIENT_ID") or "").strip() or self._str("auth", "google_client_id")
        session_minutes = self._cfg.getint("auth", "session_minutes", fallback=10)
        session_check_seconds = self._cfg.getint("auth", "session_check_seconds", fallback=60)

        # LLM
        api_key_env = self._str("llm", "api_key_env", "MISTRAL_API_KEY")
        llm_api_key = (os.getenv(api_key_env) or "").strip()

        # URL normalization
        default_scheme = self._str("url_normalization", "default_scheme", "https")
        guess_com_if_no_dot = self._cfg.getboolean("url_normalization", "guess_com_if_no_dot", fallback=True)
        no_guess_hosts = frozenset(
            h.strip().lower()
            for h in (self._cfg.get("url_normalization", "no_guess_hosts", fallback="localhost") or "").split(",")
            if h.strip()
        )

        # Prompt
        prompt_verbosity = self._str("prompt", "verbosity", PromptVerbosity.FULL.value).lower()
        if prompt_verbosity not in {v.value for v in PromptVerbosity}:
            raise ValueError(f"Invalid [prompt] verbosity: {prompt_verbosity!r}")

        # Validate
        if session_minutes <= 0:
            raise ValueError("[auth] session_minutes must be positive")
        if session_check_seconds <= 0:
            raise ValueError("[auth] session_check_seconds must be positive")

        max_records = self._cfg.getint("results", "max_records", fallback=200)
        if max_records <= 0:
            raise ValueError("[results] max_records must be positive")

        return AppSettings(
            flask_host=flask_host,
            flask_port=flask_port,
            flask_debug=flask_debug,
            secret_key=secret_key,
            google_client_id=google_client_id,
            session_minutes=session_minutes,
            session_check_seconds=session_check_seconds,
            llm_endpoint=self._str("llm", "endpoint", DEFAULT_ENDPOINT),
            llm_model=self._str("llm", "model", DEFAULT_MODEL),
            llm_max_tokens=self._cfg.getint("llm", "max_tokens", fallback=1200),
            llm_temperature=self._cfg.getfloat("llm", "temperature", fallback=0.7),
            llm_timeout_seconds=self._cfg.getint("llm", "timeout_seconds", fallback=120),
            llm_api_key=llm_api_key,
            default_scheme=default_scheme,
            guess_com_if_no_dot=guess_com_if_no_dot,
            no_guess_hosts=no_guess_hosts,
            prompt_verbosity=prompt_verbosity,
            max_records=max_records,
            log_level=self._str("logging", "level", "INFO").upper(),
            sqlserver=self._load_sqlserver(),
        )
