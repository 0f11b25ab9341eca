import logging
import time

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from datetime import datetime, timezone

from schemas.common import ErrorDetail, ErrorResponse
from services.errors import GradingError, ValidationError
from services.grade_scale import MARK_COMPONENTS

logger = logging.getLogger(__name__)


def _now_iso():
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _latency_ms(request: Request) -> int:
    # TimingMiddleware 가 기록한 시작 시각 기준
    started = getattr(request.state, "started_at", None)
    return int((time.time() - started) * 1000) if started else 0


def error_payload(code: str, message: str, errors=None, latency_ms: int = 0) -> dict:
    body = ErrorResponse(
        error=ErrorDetail(code=code, message=message, errors=errors),
        latency_ms=latency_ms,
    ).model_dump(mode="json", exclude_none=True)
    body["generated_at"] = _now_iso()
    return body


MARK_LABELS = {c.key: c.label for c in MARK_COMPONENTS}


def request_error_messages(errors) -> list:
    """FastAPI 요청 검증 오류 → 점수 검증과 같은 형식의 메시지 목록"""
    messages = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        field = loc[-1] if loc else ""
        if field in MARK_LABELS and err.get("type", "").startswith("float"):
            messages.append(f"{MARK_LABELS[field]} must be a number")
        else:
            messages.append(f"{'.'.join(loc) or 'request'}: {err.get('msg')}")
    return messages


def add_error_handlers(app: FastAPI):
    @app.exception_handler(GradingError)
    async def grading_exception_handler(request: Request, exc: GradingError):
        # 단건 요청은 첫 번째 오류만 메시지로, 전체 목록은 errors 에
        errors = exc.errors if isinstance(exc, ValidationError) and len(exc.errors) > 1 else None
        return JSONResponse(
            status_code=exc.status_code,
            content=error_payload(exc.code, exc.message, errors, _latency_ms(request)),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        messages = request_error_messages(exc.errors())
        return JSONResponse(
            status_code=ValidationError.status_code,
            content=error_payload(
                ValidationError.code,
                messages[0] if messages else "Invalid request",
                messages if len(messages) > 1 else None,
                _latency_ms(request),
            ),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=500,
            content=error_payload("INTERNAL_ERROR", str(exc), latency_ms=_latency_ms(request)),
        )
