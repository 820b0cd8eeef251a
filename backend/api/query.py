"""POST /api/query — answer a natural-language business question."""
import logging
from fastapi import APIRouter, Depends, HTTPException, Request

from core.query_pipeline import QueryPipeline
from models.query import QueryRequest, QueryResponse

router = APIRouter()
logger = logging.getLogger(__name__)


def get_pipeline(request: Request) -> QueryPipeline:
    return request.app.state.pipeline


@router.post("/query", response_model=QueryResponse)
def query(req: QueryRequest, pipeline: QueryPipeline = Depends(get_pipeline)):
    try:
        return pipeline.accept_question(req.question)
    except Exception:
        logger.exception("Error processing query: %s", req.question[:80])
        raise HTTPException(status_code=500, detail="Failed to process query")
