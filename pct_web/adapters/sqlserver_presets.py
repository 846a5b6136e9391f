"""
Saved comparison presets stored in SQL Server.

Each row holds both products and the analysis settings, so picking a preset
pre-fills the whole form. Expected columns:

    preset_id, companyname, preset_display_name,
    product_a_name, product_a_url, product_a_description,
    product_b_name, product_b_url, product_b_description,
    tone, output_format, layout, sections, custom_sections, is_active

`sections` is a "|"-joined list of default section names; blank means all of them.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional

import pyodbc

from pct_web.config.ini_config import SqlServerSettings
from pct_web.domain.models import DEFAULT_SECTIONS, ComparisonSettings, Product

log = logging.getLogger(__name__)

SECTIONS_DELIMITER = "|"

PRESET_COLUMNS = (
    "preset_id",
    "companyname",
    "preset_display_name",
    "product_a_name",
    "product_a_url",
    "product_a_description",
    "product_b_name",
    "product_b_url",
    "product_b_description",
    "tone",
    "output_format",
    "layout",
    "sections",
    "custom_sections",
    "is_active",
)


@dataclass(frozen=True)
class ComparisonPreset:
    preset_id: int
    company: str
    title: str
    product_a: Product
    product_b: Product
    settings: ComparisonSettings
    is_active: bool = True

    @property
    def display_label(self) -> str:
        parts = [p for p in (self.company, self.title) if p]
        return " - ".join(parts) if parts else f"Preset {self.preset_id}"


def parse_sections_column(raw: str) -> tuple[str, ...]:
    """Blank column means "all defaults"; unknown names are dropped."""
    raw = (raw or "").strip()
    if not raw:
        return DEFAULT_SECTIONS
    wanted = {s.strip() for s in raw.split(SECTIONS_DELIMITER) if s.strip()}
    return tuple(s for s in DEFAULT_SECTIONS if s in wanted)


def connection_string(s: SqlServerSettings) -> str:
    fields = [("DRIVER", f"{{{s.driver}}}"), ("SERVER", s.server), ("DATABASE", s.database)]
    if s.username:
        fields += [("UID", s.username), ("PWD", s.password)]
    else:
        fields.append(("Trusted_Connection", "yes"))
    if s.trust_cert:
        fields.append(("TrustServerCertificate", "yes"))
    return "".join(f"{k}={v};" for k, v in fields)


def row_to_preset(row: Any) -> ComparisonPreset:
    def text(column: str) -> str:
        return str(getattr(row, column, "") or "").strip()

    def product(tag: str) -> Product:
        return Product(
            name=text(f"product_{tag}_name"),
            url=text(f"product_{tag}_url"),
            description=text(f"product_{tag}_description"),
        )

    defaults = ComparisonSettings()
    return ComparisonPreset(
        preset_id=int(getattr(row, "preset_id", 0) or 0),
        company=text("companyname"),
        title=text("preset_display_name"),
        product_a=product("a"),
        product_b=product("b"),
        settings=ComparisonSettings(
            tone=text("tone") or defaults.tone,
            format=text("output_format") or defaults.format,
            layout=text("layout") or defaults.layout,
            sections=parse_sections_column(text("sections")),
            custom_sections=text("custom_sections"),
        ),
        is_active=bool(getattr(row, "is_active", True)),
    )


class SqlServerPresetRepository:
    """Read-only access to the active presets table."""

    def __init__(self, settings: SqlServerSettings):
        if not settings.database:
            raise ValueError("[sqlserver] database is empty in INI")
        self._settings = settings
        self.table_name = settings.table

    def _select(self, where: str) -> str:
        return f"SELECT {', '.join(PRESET_COLUMNS)} FROM {self.table_name} WHERE {where}"

    def _query(self, sql: str, *params):
        with pyodbc.connect(connection_string(self._settings)) as conn:
            return conn.cursor().execute(sql, *params).fetchall()

    def get_active_presets(self) -> List[ComparisonPreset]:
        rows = self._query(self._select("is_active = 1 ORDER BY companyname, preset_display_name"))
        log.debug("Loaded %d comparison presets from %s", len(rows), self.table_name)
        return [row_to_preset(r) for r in rows]

    def get_preset(self, preset_id: int) -> Optional[ComparisonPreset]:
        rows = self._query(self._select("preset_id = ? AND is_active = 1"), preset_id)
        return row_to_preset(rows[0]) if rows else None
