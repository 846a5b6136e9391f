from __future__ import annotations

import html
import io
from datetime import datetime
from typing import Iterable

import fitz  # PyMuPDF

from pct_web.domain.models import ComparisonRecord, Product
from pct_web.services.prompt_builder import describe_settings, merge_sections

PAGE = fitz.paper_rect("a4")
MARGIN = 56          # ~20 mm
TOP = 72

# MuPDF's HTML layout falls back to its bundled Noto fonts for glyphs the
# base font lacks (check marks, stars, non-Latin names).
PDF_CSS = """
body { font-family: sans-serif; font-size: 10pt; line-height: 1.4; }
h1 { font-size: 20pt; margin: 0 0 4pt 0; }
h2 { font-size: 14pt; margin: 0 0 6pt 0; }
h3 { font-size: 11pt; margin: 10pt 0 2pt 0; }
p { margin: 0 0 3pt 0; }
.small { font-size: 9pt; }
.prompt { font-size: 8pt; }
"""


def _text(s: str) -> str:
    """Escaped text with line breaks kept."""
    return "<br>".join(html.escape(line) for line in (s or "").splitlines())


def _lines(items: Iterable[str], css_class: str = "") -> str:
    cls = f' class="{css_class}"' if css_class else ""
    return "".join(f"<p{cls}>{html.escape(item)}</p>" for item in items)


def _product_html(tag: str, product: Product) -> str:
    parts = [f"<h3>Product {tag}: {html.escape(product.name)}</h3>"]
    if product.url:
        parts.append(f'<p class="small">URL: {html.escape(product.url)}</p>')
    if product.description:
        parts.append(f'<p class="small">{_text(product.description)}</p>')
    return "".join(parts)


def _details_html(record: ComparisonRecord, generated_at: datetime) -> str:
    a, b = record.product_a, record.product_b
    tone_label, format_label, layout_label = describe_settings(record.settings)
    return "".join([
        f"<h1>{html.escape(a.name)} vs {html.escape(b.name)}</h1>",
        "<p>Product Comparison Analysis Prompt</p>",
        f"<p>Generated on: {generated_at:%Y-%m-%d}</p>",
        "<h2>Analysis Settings:</h2>",
        _lines([
            f"- Tone: {tone_label}",
            f"- Format: {format_label}",
            f"- Layout: {layout_label}",
            f"- Sections: {len(merge_sections(record.settings))} categories",
        ]),
        "<h2>Product Details:</h2>",
        _product_html("A", a),
        _product_html("B", b),
    ])


def _flow(writer: fitz.DocumentWriter, body: str) -> None:
    """Lay out one HTML fragment starting on a fresh page, adding pages as needed."""
    story = fitz.Story(html=f"<body>{body}</body>", user_css=PDF_CSS)
    where = PAGE + (MARGIN, TOP, -MARGIN, -MARGIN)
    more = True
    while more:
        device = writer.begin_page(PAGE)
        more, _ = story.place(where)
        story.draw(device)
        writer.end_page()


def render_pdf(record: ComparisonRecord, generated_at: datetime) -> bytes:
    sections = [
        _details_html(record, generated_at),
        f'<h2>Generated AI Prompt:</h2><p class="prompt">{_text(record.composed.prompt)}</p>',
    ]

    result = record.result
    if result is not None and result.status == "ok" and result.content:
        sections.append(f"<h2>Comparison Result:</h2><p>{_text(result.content)}</p>")

    buf = io.BytesIO()
    writer = fitz.DocumentWriter(buf)
    try:
        for body in sections:
            _flow(writer, body)
    finally:
        writer.close()
    return buf.getvalue()
