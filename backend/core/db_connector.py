"""
Database connector — SQLAlchemy engine factory and raw SQL execution.
Supports PostgreSQL (the analytics store) and SQLite.
"""
import logging
import time
from datetime import date, datetime
from datetime import time as dt_time
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from config import settings
from core.errors import ExecutionError

logger = logging.getLogger(__name__)


def create_engine_from_url(url: Optional[str] = None, statement_timeout_ms: Optional[int] = None) -> Engine:
    """Build the shared engine; PostgreSQL sessions get a statement deadline."""
    url = url or settings.DATABASE_URL
    timeout_ms = settings.SQL_STATEMENT_TIMEOUT_MS if statement_timeout_ms is None else statement_timeout_ms
    connect_args: dict[str, Any] = {}
    if url.startswith("postgresql"):
        connect_args["options"] = f"-c statement_timeout={int(timeout_ms)}"
    elif url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(url, pool_pre_ping=True, connect_args=connect_args)


def _widen(v: Any) -> Any:
    # Numeric/temporal driver types → JSON-friendly scalars
    if isinstance(v, Decimal):
        return float(v)
    if isinstance(v, (datetime, date, dt_time)):
        return v.isoformat()
    return v


class QueryExecutor:
    """Runs generated SQL and returns rows as plain dicts."""

    def __init__(self, engine: Engine):
        self.engine = engine

    def is_healthy(self) -> tuple[bool, Optional[str]]:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True, None
        except SQLAlchemyError as e:
            return False, str(e)

    def execute(self, sql: str) -> list[dict[str, Any]]:
        t0 = time.monotonic()
        try:
            with self.engine.connect() as conn:
                result = conn.execute(text(sql))
                if not result.returns_rows:
                    return []
                cols = list(result.keys())
                rows = [{c: _widen(v) for c, v in zip(cols, r)} for r in result.fetchall()]
        except SQLAlchemyError as e:
            message = str(getattr(e, "orig", None) or e).strip()
            logger.error("Database query error: %s", message)
            raise ExecutionError(message) from e
        logger.info("Query returned %d rows in %dms", len(rows), round((time.monotonic() - t0) * 1000))
        return rows
