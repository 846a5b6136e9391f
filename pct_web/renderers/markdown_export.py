from __future__ import annotations

from datetime import datetime

from pct_web.domain.models import ComparisonRecord, Product
from pct_web.services.prompt_builder import describe_settings, merge_sections


def _product_lines(tag: str, product: Product) -> list[str]:
    lines = [f"### Product {tag}: {product.name}", ""]
    if product.url:
        lines.append(f"- URL: <{product.url}>")
    if product.description:
        lines.append(f"- Description: {product.description}")
    if not product.url and not product.description:
        lines.append("- No additional details provided.")
    lines.append("")
    return lines


def _fence_for(text: str) -> str:
    """Backtick fence longer than any backtick run inside `text`."""
    longest = run = 0
    for ch in text:
        run = run + 1 if ch == "`" else 0
        longest = max(longest, run)
    return "`" * max(3, longest + 1)


def render_markdown(record: ComparisonRecord, generated_at: datetime) -> str:
    a, b = record.product_a, record.product_b
    tone_label, format_label, layout_label = describe_settings(record.settings)
    sections = merge_sections(record.settings)

    lines = [
        f"# {a.name} vs {b.name}",
        "",
        f"_Generated on: {generated_at:%Y-%m-%d %H:%M}_",
        "",
        "## Analysis Settings",
        "",
        f"- **Tone:** {tone_label}",
        f"- **Format:** {format_label}",
        f"- **Layout:** {layout_label}",
        f"- **Sections:** {len(sections)} categories",
        "",
        "## Product Details",
        "",
        *_product_lines("A", a),
        *_product_lines("B", b),
    ]

    if record.composed.preview:
        lines += ["## Comparison Preview", "", record.composed.preview, ""]

    result = record.result
    if result is not None and result.status == "ok" and result.content:
        lines += ["## Comparison Result", "", result.content.rstrip(), ""]

    fence = _fence_for(record.composed.prompt)
    lines += ["## Generated AI Prompt", "", f"{fence}text", record.composed.prompt, fence, ""]

    return "\n".join(lines)
