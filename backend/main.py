"""
Analytics Q&A service — FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import health, query
from config import settings
from core.db_connector import QueryExecutor, create_engine_from_url
from core.query_pipeline import QueryPipeline
from core.result_explainer import ResultExplainer
from core.schema_context import build_schema_context
from core.sql_corrector import SQLCorrector
from core.sql_generator import SQLGenerator
from integrations.ollama_client import OllamaClient

# ── Logging ──────────────────────────────────────────────────────────────────
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
)
logger = logging.getLogger("insight")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Insight starting up…")
    schema = build_schema_context()
    engine = create_engine_from_url()
    ollama = OllamaClient()
    executor = QueryExecutor(engine)

    app.state.ollama = ollama
    app.state.executor = executor
    app.state.pipeline = QueryPipeline(
        schema=schema,
        generator=SQLGenerator(ollama),
        executor=executor,
        explainer=ResultExplainer(ollama),
        corrector=SQLCorrector(schema.date_column_corrections, settings.DATE_ALIAS_EXCEPTION),
    )
    yield
    engine.dispose()
    logger.info("Insight shutting down.")


# ── App ───────────────────────────────────────────────────────────────────────
app = FastAPI(
    title="Insight — Analytics Question Answering",
    description="Ask business questions in plain language; get SQL, an explanation and chart data.",
    version="1.0.0",
    lifespan=lifespan,
)

# ── CORS ──────────────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routers ───────────────────────────────────────────────────────────────────
app.include_router(health.router, prefix="/api")
app.include_router(query.router,  prefix="/api")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host=settings.API_HOST, port=settings.API_PORT)
