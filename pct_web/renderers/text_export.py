from __future__ import annotations

from pct_web.domain.models import ComparisonRecord


def render_text(record: ComparisonRecord) -> str:
    # the download is the prompt itself, ready to paste into any chat model
    return record.composed.prompt
