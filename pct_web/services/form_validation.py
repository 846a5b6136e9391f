from __future__ import annotations

from pct_web.domain.errors import ValidationError
from pct_web.domain.models import ComparisonSettings, Layout, OutputFormat, Product, PromptVerbosity, Tone
from pct_web.services.prompt_builder import merge_sections
from pct_web.services.url_normalization import is_absolute_http_url

MISSING_NAMES_MESSAGE = "Please provide names for both products."
NO_SECTIONS_MESSAGE = "Select at least one comparison section or add a custom section."


def _is_member(enum_cls, raw) -> bool:
    try:
        enum_cls(raw)
    except ValueError:
        return False
    return True


def validate_comparison(product_a: Product, product_b: Product, settings: ComparisonSettings) -> dict[str, str]:
    """
    Returns field -> message for everything wrong with the form; empty dict when valid.
    Field keys match the form input names so templates can highlight them.
    """
    errors: dict[str, str] = {}

    a_missing = not (product_a.name or "").strip()
    b_missing = not (product_b.name or "").strip()
    if a_missing and b_missing:
        errors["names"] = MISSING_NAMES_MESSAGE
    if a_missing:
        errors["product_a_name"] = "Product A name is required."
    if b_missing:
        errors["product_b_name"] = "Product B name is required."

    for key, label, product in (("product_a_url", "Product A", product_a), ("product_b_url", "Product B", product_b)):
        if product.url and not is_absolute_http_url(product.url):
            errors[key] = f"{label} URL must be a valid absolute URL (example: https://www.notion.so)."

    if not _is_member(Tone, settings.tone):
        errors["tone"] = f"Unknown tone: {settings.tone!r}."
    if not _is_member(OutputFormat, settings.format):
        errors["format"] = f"Unknown format: {settings.format!r}."
    if not _is_member(Layout, settings.layout):
        errors["layout"] = f"Unknown layout: {settings.layout!r}."
    if not _is_member(PromptVerbosity, settings.verbosity):
        errors["verbosity"] = f"Unknown prompt verbosity: {settings.verbosity!r}."

    if not merge_sections(settings):
        errors["sections"] = NO_SECTIONS_MESSAGE

    return errors


def ensure_valid(product_a: Product, product_b: Product, settings: ComparisonSettings) -> None:
    errors = validate_comparison(product_a, product_b, settings)
    if errors:
        raise ValidationError(errors)
