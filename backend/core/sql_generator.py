"""
SQL generator — turns a question plus schema context into raw SQL via Ollama.
"""
import logging
import re
from typing import Optional

from config import settings
from core.errors import GenerationError
from integrations.ollama_client import OllamaClient, OllamaError
from prompts.query_prompts import sql_regeneration_prompt, sql_system_prompt, sql_user_prompt

logger = logging.getLogger(__name__)

_FENCE = re.compile(r"```(?:sql)?\s*([\s\S]*?)```", re.IGNORECASE)


def extract_sql(text: str) -> str:
    """Strip markdown fences and surrounding whitespace from a model reply."""
    text = text.strip()
    match = _FENCE.search(text)
    if match:
        return match.group(1).strip()
    # Unterminated fence
    for fence in ("```sql", "```SQL", "```"):
        if text.startswith(fence):
            text = text[len(fence):]
    return text.strip("`").strip()


class SQLGenerator:
    """Deterministic (zero-temperature) SQL generation through the chat endpoint."""

    def __init__(self, ollama: OllamaClient, temperature: Optional[float] = None):
        self.ollama = ollama
        self.temperature = settings.SQL_TEMPERATURE if temperature is None else temperature

    def generate(self, question: str, schema_context: str) -> str:
        messages = [
            {"role": "system", "content": sql_system_prompt.format(schema=schema_context)},
            {"role": "user",   "content": sql_user_prompt.format(question=question)},
        ]
        return self._complete(messages)

    def regenerate(self, question: str, schema_context: str, failed_sql: str, error_message: str) -> str:
        enriched = sql_regeneration_prompt.format(
            schema=schema_context,
            question=question,
            failed_sql=failed_sql,
            error=error_message,
        )
        return self.generate(question, enriched)

    def _complete(self, messages: list[dict]) -> str:
        try:
            reply = self.ollama.chat(messages, temperature=self.temperature)
        except OllamaError as e:
            logger.error("Error generating SQL: %s", e)
            raise GenerationError("Failed to generate SQL query") from e

        sql = extract_sql(reply)
        if not sql:
            raise GenerationError("SQL generator returned an empty reply")
        return sql
