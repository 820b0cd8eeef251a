import os
import sys

# Add the parent directory (backend) to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
import sqlite3
import tempfile
from fastapi.testclient import TestClient

from core.errors import ExecutionError
from core.schema_context import build_schema_context
from main import app


@pytest.fixture(scope="session")
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture(scope="session")
def schema_context():
    return build_schema_context()


@pytest.fixture
def temp_sqlite_db():
    fd, path = tempfile.mkstemp(suffix=".db")
    try:
        conn = sqlite3.connect(path)
        cur = conn.cursor()
        cur.execute('CREATE TABLE "Category" (id INTEGER PRIMARY KEY, name TEXT UNIQUE);')
        cur.execute('CREATE TABLE "Campaign" (id INTEGER PRIMARY KEY, name TEXT, "startDate" TEXT, spend REAL);')
        cur.executemany('INSERT INTO "Category" (name) VALUES (?);', [("Electronics",), ("Clothing",)])
        cur.executemany(
            'INSERT INTO "Campaign" (name, "startDate", spend) VALUES (?, ?, ?);',
            [("Spring", "2024-03-01", 1200.5), ("Summer", "2024-06-01", 800.0)],
        )
        conn.commit()
        conn.close()
        yield path
    finally:
        os.close(fd)
        os.remove(path)


class StubGenerator:
    """Returns queued SQL strings (or raises queued exceptions) in call order."""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.calls = []

    def _next(self):
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    def generate(self, question, schema_context):
        self.calls.append(("generate", question, schema_context))
        return self._next()

    def regenerate(self, question, schema_context, failed_sql, error_message):
        self.calls.append(("regenerate", question, failed_sql, error_message))
        return self._next()


class StubExecutor:
    """Maps SQL text to rows; unknown SQL fails like a rejected statement."""

    def __init__(self, results):
        self.results = results
        self.executed = []

    def execute(self, sql):
        self.executed.append(sql)
        outcome = self.results.get(sql)
        if outcome is None:
            raise ExecutionError(f'relation for "{sql[:20]}" does not exist')
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class StubExplainer:
    def __init__(self, answer="Electronics leads revenue.", chart_type="bar", error=None):
        self.answer = answer
        self.chart_type = chart_type
        self.error = error
        self.calls = []

    def explain(self, question, sql, rows):
        from models.query import Explanation
        self.calls.append((question, sql, rows))
        if self.error:
            raise self.error
        return Explanation(answer=self.answer, chartType=self.chart_type)
