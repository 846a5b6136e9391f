"""
Request -> domain conversion for the comparison form and its JSON twin.

HTML form fields:  product_a_name, product_a_url, product_a_description (same for b),
                   tone, format, layout, sections (checkbox, repeated), custom_sections, verbosity
JSON body:         {"productA": {...}, "productB": {...},
                    "settings": {"tone", "format", "layout", "sections", "customSections", "verbosity"}}
"""
from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional

from pct_web.domain.models import DEFAULT_SECTIONS, ComparisonSettings, Product
from pct_web.services.url_normalization import UrlNormalizer


def _text(raw: Any) -> str:
    return str(raw or "").strip()


def clean_sections(values: Iterable[Any]) -> tuple[str, ...]:
    """Known default sections only, first occurrence wins, input order kept."""
    seen: set[str] = set()
    out: list[str] = []
    for v in values:
        name = _text(v)
        if name in DEFAULT_SECTIONS and name not in seen:
            seen.add(name)
            out.append(name)
    return tuple(out)


def _product(name: Any, url: Any, description: Any, normalizer: UrlNormalizer) -> Product:
    return Product(name=_text(name), url=normalizer.normalize(_text(url)), description=_text(description))


def products_from_form(form, normalizer: UrlNormalizer) -> tuple[Product, Product]:
    return (
        _product(form.get("product_a_name"), form.get("product_a_url"), form.get("product_a_description"), normalizer),
        _product(form.get("product_b_name"), form.get("product_b_url"), form.get("product_b_description"), normalizer),
    )


def settings_from_form(form, default_verbosity: str) -> ComparisonSettings:
    defaults = ComparisonSettings()
    return ComparisonSettings(
        tone=_text(form.get("tone")) or defaults.tone,
        format=_text(form.get("format")) or defaults.format,
        layout=_text(form.get("layout")) or defaults.layout,
        sections=clean_sections(form.getlist("sections")),
        custom_sections=_text(form.get("custom_sections")),
        verbosity=_text(form.get("verbosity")) or default_verbosity,
    )


def inputs_from_json(
    payload: Optional[Mapping[str, Any]],
    normalizer: UrlNormalizer,
    default_verbosity: str,
) -> tuple[Product, Product, ComparisonSettings]:
    payload = payload if isinstance(payload, Mapping) else {}

    def product(key: str) -> Product:
        raw = payload.get(key)
        raw = raw if isinstance(raw, Mapping) else {}
        return _product(raw.get("name"), raw.get("url"), raw.get("description"), normalizer)

    raw_settings = payload.get("settings")
    raw_settings = raw_settings if isinstance(raw_settings, Mapping) else {}
    defaults = ComparisonSettings()

    sections_raw = raw_settings.get("sections")
    if sections_raw is None:
        sections = defaults.sections
    elif isinstance(sections_raw, (list, tuple)):
        sections = clean_sections(sections_raw)
    else:
        sections = ()

    settings = ComparisonSettings(
        tone=_text(raw_settings.get("tone")) or defaults.tone,
        format=_text(raw_settings.get("format")) or defaults.format,
        layout=_text(raw_settings.get("layout")) or defaults.layout,
        sections=sections,
        custom_sections=_text(raw_settings.get("customSections")),
        verbosity=_text(raw_settings.get("verbosity")) or default_verbosity,
    )
    return product("productA"), product("productB"), settings


# The draft shares the signed session cookie with the sign-in state; browsers
# drop cookies over ~4 KB, so free-text fields are capped.
DRAFT_LIMITS = {"name": 120, "url": 300, "description": 500, "customSections": 300}


def to_draft(product_a: Product, product_b: Product, settings: ComparisonSettings) -> tuple[dict, bool]:
    """
    JSON-safe snapshot of the form inputs (never generated output) for the session cookie.
    Returns (draft, clipped); clipped is True when any field was cut to its limit.
    """
    clipped = False

    def clip(value: str, key: str) -> str:
        nonlocal clipped
        limit = DRAFT_LIMITS[key]
        if len(value) > limit:
            clipped = True
            return value[:limit]
        return value

    def product(p: Product) -> dict:
        return {
            "name": clip(p.name, "name"),
            "url": clip(p.url, "url"),
            "description": clip(p.description, "description"),
        }

    draft = {
        "productA": product(product_a),
        "productB": product(product_b),
        "settings": {
            "tone": settings.tone,
            "format": settings.format,
            "layout": settings.layout,
            "sections": list(settings.sections),
            "customSections": clip(settings.custom_sections, "customSections"),
            "verbosity": settings.verbosity,
        },
    }
    return draft, clipped
