import json
from unittest.mock import MagicMock, patch

import httpx
import pytest

from core.errors import ExplanationError, GenerationError
from core.result_explainer import ResultExplainer, parse_explanation, serialize_rows
from core.sql_generator import SQLGenerator, extract_sql
from integrations.ollama_client import OllamaClient, OllamaError


def fake_ollama(reply=None, error=None):
    ollama = MagicMock(spec=OllamaClient)
    if error:
        ollama.chat.side_effect = error
    else:
        ollama.chat.return_value = reply
    return ollama


# ── SQL generation ────────────────────────────────────────────────────────────

@pytest.mark.parametrize("reply", [
    "```sql\nSELECT 1\n```",
    "Here you go:\n```\nSELECT 1\n```\nEnjoy",
    "  SELECT 1  ",
    "```sql\nSELECT 1",
])
def test_extract_sql_strips_fences(reply):
    assert extract_sql(reply) == "SELECT 1"


def test_generate_uses_zero_temperature_and_schema():
    ollama = fake_ollama("SELECT 1")
    sql = SQLGenerator(ollama, temperature=0.0).generate("how many orders?", 'TABLE "Order" (...)')

    assert sql == "SELECT 1"
    messages = ollama.chat.call_args.args[0]
    assert 'TABLE "Order" (...)' in messages[0]["content"]
    assert "how many orders?" in messages[1]["content"]
    assert ollama.chat.call_args.kwargs["temperature"] == 0.0


def test_regenerate_includes_failed_sql_and_error():
    ollama = fake_ollama("SELECT 2")
    sql = SQLGenerator(ollama).regenerate("q", "SCHEMA", "SELECT bad", 'column "bad" does not exist')

    assert sql == "SELECT 2"
    system = ollama.chat.call_args.args[0][0]["content"]
    assert "SELECT bad" in system
    assert 'column "bad" does not exist' in system
    assert "SCHEMA" in system


def test_generate_transport_failure_is_generation_error():
    ollama = fake_ollama(error=OllamaError("timeout"))
    with pytest.raises(GenerationError):
        SQLGenerator(ollama).generate("q", "schema")


def test_generate_empty_reply_is_generation_error():
    with pytest.raises(GenerationError):
        SQLGenerator(fake_ollama("```sql\n```")).generate("q", "schema")


# ── Explanation ───────────────────────────────────────────────────────────────

def test_serialize_rows_is_bounded():
    rows = [{"n": i} for i in range(10)]
    text, note = serialize_rows(rows, 3)
    assert json.loads(text) == rows[:3]
    assert note == " (first 3 of 10 rows)"
    assert serialize_rows(rows[:2], 3)[1] == ""


def test_parse_explanation_normalises_chart_type():
    assert parse_explanation('{"answer": "Up.", "chartType": "LINE"}').chart_type == "line"
    assert parse_explanation('{"answer": "Up.", "chartType": "scatter"}').chart_type == "bar"
    assert parse_explanation('{"answer": "Up."}').chart_type == "bar"


@pytest.mark.parametrize("raw", ["not json", "[1, 2]", '{"chartType": "bar"}', '{"answer": "  "}'])
def test_parse_explanation_rejects_malformed(raw):
    with pytest.raises(ExplanationError):
        parse_explanation(raw)


def test_explain_uses_json_mode():
    ollama = fake_ollama('{"answer": "Electronics leads.", "chartType": "pie"}')
    explanation = ResultExplainer(ollama, temperature=0.2, max_rows=5).explain(
        "share by category", "SELECT 1", [{"category": "A", "total": 1}],
    )
    assert explanation.answer == "Electronics leads."
    assert explanation.chart_type == "pie"
    kwargs = ollama.chat.call_args.kwargs
    assert kwargs["json_mode"] is True
    assert kwargs["temperature"] == 0.2


def test_explain_transport_failure_is_explanation_error():
    with pytest.raises(ExplanationError):
        ResultExplainer(fake_ollama(error=OllamaError("down"))).explain("q", "SELECT 1", [])


# ── Ollama client ─────────────────────────────────────────────────────────────

def test_ollama_chat_posts_payload():
    response = MagicMock()
    response.json.return_value = {"message": {"content": " SELECT 1 "}}
    with patch("integrations.ollama_client.httpx.post", return_value=response) as mock_post:
        client = OllamaClient(host="http://ollama:11434/", model="m", timeout=7, max_retries=1)
        assert client.chat([{"role": "user", "content": "hi"}], temperature=0.0, json_mode=True) == "SELECT 1"

    url = mock_post.call_args.args[0]
    kwargs = mock_post.call_args.kwargs
    assert url == "http://ollama:11434/api/chat"
    assert kwargs["timeout"] == 7
    assert kwargs["json"]["format"] == "json"
    assert kwargs["json"]["options"]["temperature"] == 0.0


def test_ollama_timeout_raises_ollama_error():
    with patch("integrations.ollama_client.httpx.post", side_effect=httpx.ReadTimeout("slow")):
        client = OllamaClient(host="http://ollama:11434", model="m", timeout=1, max_retries=1)
        with pytest.raises(OllamaError):
            client.chat([{"role": "user", "content": "hi"}])
