"""GET /api/health — system dependency check."""
import logging
from fastapi import APIRouter, Request

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
def health_check(request: Request):
    ollama_status = _check_ollama(request)
    db_status     = _check_database(request)
    overall = "ok" if ollama_status["status"] == "up" and db_status["status"] == "up" else "degraded"
    return {
        "status": overall,
        "services": {
            "ollama":   ollama_status,
            "database": db_status,
        },
    }


def _check_ollama(request: Request) -> dict:
    ok, detail = request.app.state.ollama.is_healthy()
    if ok:
        return {"status": "up", "model": detail}
    return {"status": "down", "error": detail}


def _check_database(request: Request) -> dict:
    ok, error = request.app.state.executor.is_healthy()
    if ok:
        return {"status": "up"}
    return {"status": "down", "error": error}
