"""
Query pipeline — question → SQL → rows → explanation + chart data.

Flow: GENERATE → EXECUTE → EXPLAIN → DONE. An ExecutionError on the first
attempt triggers exactly one regeneration with the failing SQL and the
store's error in the prompt; any failure during that recovery ends in
the synthetic-data fallback. Other failures propagate to the caller.
"""
import logging
from typing import Optional

from core.errors import ExecutionError
from core.fallback import FALLBACK_SQL_MARKER, synthesize_fallback
from core.result_shaper import shape_rows
from core.schema_context import SchemaContext
from core.sql_corrector import SQLCorrector
from models.query import GeneratedQuery, QueryResponse

logger = logging.getLogger(__name__)


class QueryPipeline:
    """
    Drives one question through the generator, corrector, executor and
    explainer. Collaborators are injected; the only shared state is the
    immutable schema context.
    """

    def __init__(self, schema: SchemaContext, generator, executor, explainer,
                 corrector: Optional[SQLCorrector] = None):
        self.schema = schema
        self.generator = generator
        self.executor = executor
        self.explainer = explainer
        self.corrector = corrector or SQLCorrector(schema.date_column_corrections)

    def accept_question(self, question: str) -> QueryResponse:
        question = (question or "").strip()
        if not question:
            raise ValueError("question must not be empty")

        raw_sql = self.generator.generate(question, self.schema.annotated_schema)
        query = GeneratedQuery(sql=self.corrector.correct(raw_sql), provenance="initial")
        logger.info("Generated SQL: %s", query.sql)

        try:
            rows = self.executor.execute(query.sql)
        except ExecutionError as e:
            return self._recover(question, query, e)

        return self._respond(question, query, rows)

    def _respond(self, question: str, query: GeneratedQuery, rows: list[dict]) -> QueryResponse:
        explanation = self.explainer.explain(question, query.sql, rows)
        return QueryResponse(
            question=question,
            sql=query.sql,
            data=shape_rows(rows),
            answer=explanation.answer,
            chartType=explanation.chart_type,
        )

    def _recover(self, question: str, failed: GeneratedQuery, error: ExecutionError) -> QueryResponse:
        logger.warning("Attempting to recover from SQL error: %s", error.message)
        try:
            raw_sql = self.generator.regenerate(
                question, self.schema.annotated_schema, failed.sql, error.message,
            )
            query = GeneratedQuery(sql=self.corrector.correct(raw_sql), provenance="regenerated")
            logger.info("Regenerated SQL after error: %s", query.sql)
            rows = self.executor.execute(query.sql)
            return self._respond(question, query, rows)
        except Exception:
            logger.exception("Recovery attempt failed")

        rows, answer, chart_type = synthesize_fallback(question, error.message)
        return QueryResponse(
            question=question,
            sql=FALLBACK_SQL_MARKER,
            data=shape_rows(rows),
            answer=answer,
            chartType=chart_type,
        )
