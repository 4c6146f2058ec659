"""Routes for the natural-language business query assistant."""

from __future__ import annotations

import asyncio
import time
from datetime import datetime
from typing import Any

import structlog
from fastapi import APIRouter, HTTPException, status

from app.backend.src.agents.answer_model import compose_answer
from app.backend.src.core.exceptions import AnswerUnavailable, DataUnavailable
from app.backend.src.schemas.assistant import QUERY_RESULT_ADAPTER, AssistantQueryRequest
from app.backend.src.services.query_assistant import process_query
from app.backend.src.services.query_store import AssistantStore, SqlAlchemyAssistantStore

LOGGER = structlog.get_logger(__name__)

router = APIRouter(prefix="/ai", tags=["assistant"])

_STORE: AssistantStore | None = None


def get_store() -> AssistantStore:
    """Return the process-wide store; tests monkeypatch this."""

    global _STORE
    if _STORE is None:
        _STORE = SqlAlchemyAssistantStore()
    return _STORE


def current_time() -> datetime:
    """Reference time for aggregation windows."""

    return datetime.now().astimezone()


@router.post("/query")
async def run_query(payload: AssistantQueryRequest) -> dict[str, Any]:
    """Classify the question, aggregate its data and phrase an answer."""

    query = (payload.query or "").strip()
    if not query:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Câu hỏi không hợp lệ",
        )

    started = time.monotonic()
    try:
        result = await process_query(query, current_time(), store=get_store())
        answer = await asyncio.to_thread(compose_answer, query, result)
    except DataUnavailable as exc:
        LOGGER.warning(
            "assistant_data_unavailable", operation=exc.operation, error=str(exc)
        )
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Không thể xử lý câu hỏi. Vui lòng thử lại.",
        ) from exc
    except AnswerUnavailable as exc:
        LOGGER.warning("assistant_answer_unavailable", error=str(exc))
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Lỗi kết nối AI. Vui lòng thử lại.",
        ) from exc

    LOGGER.info(
        "latency",
        stage="assistant_query",
        intent=result.intent.value,
        duration_ms=(time.monotonic() - started) * 1000,
    )
    serialized = QUERY_RESULT_ADAPTER.dump_python(result, mode="json")
    return {
        "success": True,
        "data": {
            "intent": serialized["intent"],
            "result": serialized["data"],
            "response": answer,
        },
    }


__all__ = ["router", "run_query"]
