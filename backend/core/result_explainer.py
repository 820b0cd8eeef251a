"""
Result explainer — asks Ollama for a natural-language answer and a chart type.
"""
import json
import logging
from typing import Any, Optional

from pydantic import ValidationError

from config import settings
from core.errors import ExplanationError
from integrations.ollama_client import OllamaClient, OllamaError
from models.query import Explanation
from prompts.query_prompts import EXPLAIN_SYSTEM_PROMPT, explain_user_prompt

logger = logging.getLogger(__name__)

_CHART_TYPES = {"bar", "line", "pie"}


def serialize_rows(rows: list[dict[str, Any]], max_rows: int) -> tuple[str, str]:
    """Return (JSON text of at most max_rows rows, truncation note for the prompt)."""
    shown = rows[:max_rows]
    note = f" (first {len(shown)} of {len(rows)} rows)" if len(rows) > len(shown) else ""
    return json.dumps(shown, indent=2, default=str), note


def parse_explanation(raw: str) -> Explanation:
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ExplanationError(f"Explainer returned non-JSON output: {e}") from e
    if not isinstance(payload, dict):
        raise ExplanationError("Explainer returned JSON that is not an object")

    chart_type = str(payload.get("chartType") or "").strip().lower()
    if chart_type not in _CHART_TYPES:
        chart_type = "bar"
    answer = payload.get("answer")
    if not isinstance(answer, str):
        raise ExplanationError("Explainer reply has no textual 'answer'")
    try:
        return Explanation(answer=answer.strip(), chartType=chart_type)
    except ValidationError as e:
        raise ExplanationError(f"Explainer reply is malformed: {e}") from e


class ResultExplainer:
    def __init__(self, ollama: OllamaClient, temperature: Optional[float] = None,
                 max_rows: Optional[int] = None):
        self.ollama = ollama
        self.temperature = settings.EXPLAIN_TEMPERATURE if temperature is None else temperature
        self.max_rows = settings.EXPLAIN_MAX_ROWS if max_rows is None else max_rows

    def explain(self, question: str, sql: str, rows: list[dict[str, Any]]) -> Explanation:
        results, note = serialize_rows(rows, self.max_rows)
        messages = [
            {"role": "system", "content": EXPLAIN_SYSTEM_PROMPT},
            {"role": "user",   "content": explain_user_prompt.format(
                question=question, sql=sql, results=results, truncation_note=note)},
        ]
        try:
            raw = self.ollama.chat(messages, temperature=self.temperature, json_mode=True)
        except OllamaError as e:
            logger.error("Error explaining results: %s", e)
            raise ExplanationError("Failed to explain query results") from e
        return parse_explanation(raw)
