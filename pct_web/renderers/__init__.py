from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from werkzeug.utils import secure_filename

from pct_web.domain.errors import ExportError
from pct_web.domain.models import ComparisonRecord

from .markdown_export import render_markdown
from .pdf_export import render_pdf
from .text_export import render_text

EXPORT_FORMATS = ("txt", "md", "pdf")


@dataclass(frozen=True)
class ExportFile:
    data: bytes
    mimetype: str
    filename: str


def export_basename(record: ComparisonRecord) -> str:
    base = secure_filename(f"{record.product_a.name}-vs-{record.product_b.name}")
    return base or "comparison"


def export(record: ComparisonRecord, fmt: str, generated_at: Optional[datetime] = None) -> ExportFile:
    generated_at = generated_at or datetime.now()
    base = export_basename(record)

    if fmt == "txt":
        return ExportFile(render_text(record).encode("utf-8"), "text/plain; charset=utf-8",
                          f"{base}-comparison-prompt.txt")
    if fmt == "md":
        return ExportFile(render_markdown(record, generated_at).encode("utf-8"), "text/markdown; charset=utf-8",
                          f"{base}-comparison.md")
    if fmt == "pdf":
        try:
            data = render_pdf(record, generated_at)
        except RuntimeError as e:
            # PyMuPDF reports layout/encoding failures as RuntimeError
            raise ExportError("Unable to export PDF. Please try again.") from e
        return ExportFile(data, "application/pdf", f"{base}-comparison.pdf")

    raise ValueError(f"Unsupported export format: {fmt!r}")


__all__ = [
    "EXPORT_FORMATS",
    "ExportFile",
    "export",
    "export_basename",
    "render_markdown",
    "render_pdf",
    "render_text",
]
