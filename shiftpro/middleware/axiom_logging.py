"""Axiom API 로깅 미들웨어.

Axiom API logging middleware.
Sends one structured event per scheduling/pay request to Axiom. Request
bodies here can hold hundreds of shifts, so the event carries a compact
summary of the body (shift count, pattern kind, period bounds, ruleset
name) instead of the raw payload. Owner identifiers are masked.
"""

import json
import logging
import re
import time
from typing import Any

from axiom_py import Client as AxiomClient
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from shiftpro.config import settings

logger = logging.getLogger(__name__)

# 마스킹 대상 필드: 근무자 식별 정보 (Worker-identifying fields)
_MASKED_KEYS = re.compile(r"(owner_id|owner|employee|token)", re.IGNORECASE)

# 로깅 제외 경로: Paths excluded from logging
_SKIP_PATHS = {"/health", "/docs", "/redoc", "/openapi.json"}

_MAX_DETAIL = 500


def _mask(data: Any, depth: int = 0) -> Any:
    """식별 필드 재귀 마스킹 (Recursively mask worker-identifying fields)."""
    if depth > 4:
        return "..."
    if isinstance(data, dict):
        return {key: "***" if _MASKED_KEYS.search(key) else _mask(value, depth + 1) for key, value in data.items()}
    if isinstance(data, list):
        return [_mask(item, depth + 1) for item in data[:5]]
    return data


def summarize_body(body: Any) -> dict[str, Any]:
    """요청 본문 요약: 근무 목록은 건수만, 정의/기간/규칙은 핵심 필드만.

    Reduce a request body to the fields useful when reading logs: shift
    counts, pattern kind and window, period bounds, ruleset name and base
    rate. Other keys are kept as-is with identifiers masked.
    """
    if not isinstance(body, dict):
        return {"body": "(non-object body)"}

    summary: dict[str, Any] = {}
    for key, value in body.items():
        if key == "shifts" and isinstance(value, list):
            summary["shift_count"] = len(value)
        elif key == "definition" and isinstance(value, dict):
            summary["pattern_kind"] = value.get("kind")
            summary["pattern_time_zone"] = value.get("time_zone")
            if isinstance(value.get("rotation_days"), list):
                summary["cycle_length"] = len(value["rotation_days"])
        elif key == "period" and isinstance(value, dict):
            summary["period"] = f"{value.get('start_date')}..{value.get('end_date')}"
        elif key == "ruleset" and isinstance(value, dict):
            summary["ruleset"] = value.get("name")
            summary["base_rate_cents"] = value.get("base_rate_cents")
            if isinstance(value.get("rules"), list):
                summary["rule_count"] = len(value["rules"])
        else:
            summary[key] = _mask({key: value})[key]
    return summary


def _error_detail(payload: bytes) -> str:
    """에러 응답에서 사유 추출 (Pull the `detail` field out of an error response)."""
    try:
        data = json.loads(payload)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return payload.decode("utf-8", errors="replace")[:_MAX_DETAIL]
    detail = data.get("detail", data) if isinstance(data, dict) else data
    text = detail if isinstance(detail, str) else json.dumps(detail, default=str)
    return text[:_MAX_DETAIL]


class AxiomLoggingMiddleware(BaseHTTPMiddleware):
    """API 요청을 Axiom에 요약 이벤트로 기록하는 미들웨어.

    Logs every API request to Axiom as a summarized event: method, path,
    status code, duration, body summary, and the error detail for 4xx/5xx.
    Passes requests straight through when Axiom is not configured.
    """

    def __init__(self, app: Any) -> None:
        super().__init__(app)
        self._client: AxiomClient | None = None
        self._dataset: str = settings.AXIOM_DATASET

        if settings.AXIOM_API_TOKEN and settings.AXIOM_DATASET:
            self._client = AxiomClient(token=settings.AXIOM_API_TOKEN)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path in _SKIP_PATHS or self._client is None:
            return await call_next(request)

        started = time.perf_counter()
        event: dict[str, Any] = {"method": request.method, "path": request.url.path}
        if request.query_params:
            event["query_params"] = _mask(dict(request.query_params))

        if request.method == "POST":
            raw = await request.body()
            if raw:
                try:
                    event["request"] = summarize_body(json.loads(raw))
                except (json.JSONDecodeError, UnicodeDecodeError):
                    event["request"] = {"body": "(non-json body)"}

        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code

            if status_code >= 400:
                payload = b""
                async for chunk in response.body_iterator:
                    payload += chunk if isinstance(chunk, bytes) else chunk.encode("utf-8")
                event["error"] = _error_detail(payload)
                # 소비한 body로 응답 재구성: Rebuild the response from the consumed body
                response = Response(
                    content=payload,
                    status_code=status_code,
                    headers=dict(response.headers),
                    media_type=response.media_type,
                )
        except Exception as exc:
            event["error"] = f"{type(exc).__name__}: {str(exc)[:300]}"
            raise
        finally:
            event["status_code"] = status_code
            event["duration_ms"] = round((time.perf_counter() - started) * 1000, 2)
            self._ingest(event)

        return response

    def _ingest(self, event: dict[str, Any]) -> None:
        # 로깅 실패는 요청 처리에 영향 없음: Ingest failures never fail the request
        try:
            self._client.ingest_events(self._dataset, [event])
        except Exception:
            logger.warning("Axiom ingest failed for %s %s", event["method"], event["path"], exc_info=True)
