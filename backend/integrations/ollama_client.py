"""
Ollama REST API client.
Wraps POST /api/chat for text completion with a per-call deadline and
bounded retry.
"""
import logging
import time
from typing import Optional
import httpx

from config import settings

logger = logging.getLogger(__name__)


class OllamaError(RuntimeError):
    """Ollama was unreachable, timed out, or returned an unusable payload."""


class OllamaClient:
    """Thin client for the Ollama local LLM server."""

    def __init__(self, host: Optional[str] = None, model: Optional[str] = None,
                 timeout: Optional[float] = None, max_retries: Optional[int] = None):
        self.host = (host or settings.OLLAMA_HOST).rstrip("/")
        self.model = model or settings.OLLAMA_MODEL
        self.timeout = timeout if timeout is not None else settings.OLLAMA_TIMEOUT_SECONDS
        self.max_retries = max(1, max_retries if max_retries is not None else settings.OLLAMA_MAX_RETRIES)

    def is_healthy(self) -> tuple[bool, Optional[str]]:
        """Returns (True, model_name) if Ollama is reachable, (False, error) otherwise."""
        try:
            resp = httpx.get(f"{self.host}/api/version", timeout=5)
            resp.raise_for_status()
            return True, self.model
        except httpx.HTTPError as e:
            return False, str(e)

    def chat(self, messages: list[dict], temperature: float = 0.0, json_mode: bool = False) -> str:
        """
        Call Ollama /api/chat with a list of {role, content} messages.
        Returns the assistant's reply as a string. With json_mode the model
        is constrained to emit a single JSON object.
        """
        payload = {
            "model": self.model,
            "messages": messages,
            "stream": False,
            "options": {"num_ctx": 4096, "temperature": temperature},
        }
        if json_mode:
            payload["format"] = "json"

        last_err: Optional[Exception] = None
        for attempt in range(1, self.max_retries + 1):
            try:
                logger.debug("Ollama chat attempt %d", attempt)
                resp = httpx.post(
                    f"{self.host}/api/chat",
                    json=payload,
                    timeout=self.timeout,
                )
                resp.raise_for_status()
                text = resp.json()["message"]["content"].strip()
                logger.debug("Ollama response length: %d chars", len(text))
                return text
            except (httpx.HTTPError, KeyError, TypeError, ValueError) as e:
                last_err = e
                logger.warning("Ollama chat attempt %d/%d failed: %s", attempt, self.max_retries, e)
                if attempt < self.max_retries:
                    time.sleep(2 ** attempt)  # exponential back-off: 2s, 4s
        raise OllamaError(f"Ollama chat failed after {self.max_retries} attempts: {last_err}")
