from __future__ import annotations

import logging
import threading
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime

from pct_web.domain.errors import CompareError, ComparisonBusyError
from pct_web.domain.models import ComparisonRecord, ComparisonResult, ComparisonSettings, Product
from pct_web.ports.llm import LlmClient
from pct_web.repositories.result_repository import ResultRepository
from pct_web.services import prompt_builder

log = logging.getLogger(__name__)


def new_run_id(now: datetime | None = None) -> str:
    now = now or datetime.now()
    return f"{now:%Y%m%d_%H%M%S}_{uuid.uuid4().hex[:8]}"


@dataclass
class ComparisonService:
    """
    Service layer: compose prompts, call the model, keep results downloadable.
    Keeps controllers/routes thin.
    """
    llm_client: LlmClient
    result_repo: ResultRepository
    _busy: set = field(default_factory=set, init=False, repr=False)
    _busy_lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def compose(
        self,
        owner: str,
        product_a: Product,
        product_b: Product,
        settings: ComparisonSettings,
    ) -> ComparisonRecord:
        record = ComparisonRecord(
            run_id=new_run_id(),
            owner=owner,
            product_a=product_a,
            product_b=product_b,
            settings=settings,
            composed=prompt_builder.compose(product_a, product_b, settings),
        )
        self.result_repo.add(record)
        return record

    def run(self, owner: str, record: ComparisonRecord) -> ComparisonResult:
        result = self._complete(owner, record.run_id, record.composed.prompt)
        self.result_repo.attach_result(record.run_id, result)
        return result

    def submit_prompt(self, owner: str, prompt: str) -> ComparisonResult:
        if not (prompt or "").strip():
            raise ValueError("Prompt is required.")
        return self._complete(owner, new_run_id(), prompt)

    @contextmanager
    def _in_flight(self, owner: str):
        with self._busy_lock:
            if owner in self._busy:
                raise ComparisonBusyError("A comparison is already running. Please wait for it to finish.")
            self._busy.add(owner)
        try:
            yield
        finally:
            with self._busy_lock:
                self._busy.discard(owner)

    def _complete(self, owner: str, run_id: str, prompt: str) -> ComparisonResult:
        with self._in_flight(owner):
            started = datetime.now()
            try:
                content = self.llm_client.complete(prompt)
                status, error = "ok", ""
            except CompareError as e:
                log.warning("Comparison %s failed: %s", run_id, e)
                content, status, error = "", "failed", str(e)
            finished = datetime.now()

        return ComparisonResult(
            status=status,
            run_id=run_id,
            content=content,
            error=error,
            generated_at=finished.strftime("%Y-%m-%d %H:%M:%S"),
            duration_seconds=int((finished - started).total_seconds()),
        )
