"""Phrase assistant results as a short Vietnamese answer with an LLM."""

from __future__ import annotations

import json
from typing import Any

import openai
import structlog
from openai import OpenAI

from app.backend.src.core.config import Settings, get_settings
from app.backend.src.core.exceptions import AnswerUnavailable
from app.backend.src.schemas.assistant import QUERY_RESULT_ADAPTER, QueryResult
from app.backend.src.services import metrics

LOGGER = structlog.get_logger(__name__)

_OPENAI_CLIENT: OpenAI | None = None
_OPENAI_API_KEY: str | None = None

SYSTEM_PROMPT = """Bạn là trợ lý AI cho Công ty TNHH Phúc Lợi - công ty phân phối xi măng rời tại Hải Phòng, Việt Nam.

## Thông tin công ty:
- Ngành nghề: Phân phối xi măng rời (bulk cement) cho các trạm trộn bê tông
- Địa bàn: Miền Bắc Việt Nam, chủ yếu Hải Phòng và các tỉnh lân cận

## Vai trò của bạn:
Bạn giúp chủ doanh nghiệp và nhân viên tra cứu thông tin kinh doanh nhanh chóng bằng tiếng Việt tự nhiên.
Dữ liệu đã được hệ thống tổng hợp sẵn và gửi kèm câu hỏi; chỉ dùng dữ liệu đó, không tự bịa số liệu.

## Quy tắc trả lời:
1. LUÔN trả lời bằng tiếng Việt
2. TRẢ LỜI NGẮN GỌN - tối đa 3-5 câu, chỉ nêu thông tin quan trọng nhất
3. Format số tiền: 1.234.567.890 đ (dấu chấm ngăn cách hàng nghìn)
4. Format số lượng kèm đơn vị "tấn"
5. Không giải thích dài dòng, đi thẳng vào vấn đề
6. Liệt kê dạng bullet points nếu có nhiều mục"""


def build_data_context(result: QueryResult) -> str:
    """Render the intent data block appended to the user's question."""

    payload = QUERY_RESULT_ADAPTER.dump_python(result, mode="json")
    data = json.dumps(payload.get("data", {}), ensure_ascii=False, indent=2)
    return f"\nDữ liệu:\n{data}\n\nTrả lời ngắn gọn (3-5 câu)."


def _get_openai_client(settings: Settings) -> OpenAI:
    """Return a cached OpenAI client configured with the API key."""

    global _OPENAI_CLIENT, _OPENAI_API_KEY
    api_key = settings.openai_api_key
    if not api_key:
        raise AnswerUnavailable("OPENAI_API_KEY is not configured.")
    if _OPENAI_CLIENT is None or api_key != _OPENAI_API_KEY:
        _OPENAI_CLIENT = OpenAI(api_key=api_key)
        _OPENAI_API_KEY = api_key
    return _OPENAI_CLIENT


def compose_answer(
    query: str,
    result: QueryResult,
    *,
    settings: Settings | None = None,
    client: OpenAI | None = None,
) -> str | None:
    """Return a short answer for ``query`` or ``None`` when answers are disabled.

    Raises:
        AnswerUnavailable: the model call failed.
    """

    settings = settings or get_settings()
    if client is None:
        if not settings.answers_enabled:
            LOGGER.info("assistant_answer_skipped", reason="no_api_key")
            return None
        client = _get_openai_client(settings)

    messages: list[dict[str, Any]] = [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": f"{query}\n{build_data_context(result)}"},
    ]

    try:
        response = client.chat.completions.create(
            model=settings.openai_model,
            messages=messages,
            max_tokens=settings.answer_max_tokens,
        )
    except openai.OpenAIError as exc:
        metrics.assistant_answers_total.labels(outcome="error").inc()
        LOGGER.warning("assistant_answer_failed", error=str(exc))
        raise AnswerUnavailable("Language model request failed.") from exc

    content = response.choices[0].message.content if response.choices else None
    metrics.assistant_answers_total.labels(outcome="ok").inc()
    return (content or "").strip()


__all__ = ["SYSTEM_PROMPT", "build_data_context", "compose_answer"]
