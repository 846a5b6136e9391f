from __future__ import annotations

import logging
from dataclasses import dataclass

import requests

from pct_web.domain.errors import CompareError
from pct_web.ports.llm import LlmClient

log = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "https://api.mistral.ai/v1/chat/completions"
DEFAULT_MODEL = "mistral-large-latest"


@dataclass
class MistralChatClient(LlmClient):
    """
    Adapter for the Mistral chat-completions endpoint (OpenAI-compatible body).
    One user message per call; no retry.
    """
    api_key: str
    endpoint: str = DEFAULT_ENDPOINT
    model: str = DEFAULT_MODEL
    max_tokens: int = 1200
    temperature: float = 0.7
    timeout_seconds: int = 120

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def complete(self, prompt: str) -> str:
        if not (self.api_key or "").strip():
            raise CompareError("Mistral API key not configured.")

        body = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }

        log.info("POST %s model=%s prompt_chars=%d", self.endpoint, self.model, len(prompt))
        try:
            r = requests.post(self.endpoint, headers=self._headers(), json=body, timeout=self.timeout_seconds)
        except requests.Timeout as e:
            raise CompareError("The comparison request timed out.") from e
        except requests.RequestException as e:
            raise CompareError(f"Could not reach the comparison service: {e}") from e

        if not r.ok:
            message = _error_message(r)
            log.warning("Mistral API returned %s: %s", r.status_code, message)
            raise CompareError(message)

        try:
            data = r.json()
        except ValueError as e:
            raise CompareError("Mistral API returned an unreadable response.") from e

        choices = data.get("choices") or [{}]
        return ((choices[0] or {}).get("message") or {}).get("content") or ""


def _error_message(r: requests.Response) -> str:
    try:
        payload = r.json()
    except ValueError:
        return "Mistral API error."
    err = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(err, dict) and err.get("message"):
        return str(err["message"])
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    return "Mistral API error."
