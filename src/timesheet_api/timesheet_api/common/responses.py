"""JSON response envelope shared by every API route.

Every body looks like ``{success, code, status, message, data?, error?, meta?}``.
Keys whose value is None are left out.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from http import HTTPStatus
from typing import Any, Optional

from flask import g, jsonify


@dataclass(frozen=True)
class ErrorDetail:
    type: str
    field: str
    message: str


def validation_detail(field: str, message: str) -> ErrorDetail:
    return ErrorDetail(type="validation_error", field=field, message=message)


def _meta() -> Optional[dict]:
    request_id = g.get("request_id")
    return {"request_id": request_id} if request_id else None


def write(code: int, message: str, *, data: Any = None, error: Any = None):
    code = int(code)
    if isinstance(error, list):
        error = [asdict(e) if isinstance(e, ErrorDetail) else e for e in error]

    body = {
        "success": 200 <= code < 300,
        "code": code,
        "status": HTTPStatus(code).phrase,
        "message": message,
        "data": data,
        "error": error,
        "meta": _meta(),
    }
    return jsonify({k: v for k, v in body.items() if v is not None}), code


def ok(data: Any, message: str = "Success"):
    return write(HTTPStatus.OK, message, data=data)


def created(data: Any, message: str):
    return write(HTTPStatus.CREATED, message, data=data)


def no_content():
    return "", HTTPStatus.NO_CONTENT


def bad_request(error: Any, message: str):
    return write(HTTPStatus.BAD_REQUEST, message, error=error)


def not_found(message: str = "Not found"):
    return write(HTTPStatus.NOT_FOUND, message)


def method_not_allowed(message: str = "Method not allowed"):
    return write(HTTPStatus.METHOD_NOT_ALLOWED, message)


def conflict(message: str = "Duplicate"):
    return write(HTTPStatus.CONFLICT, message)


def unprocessable(errors: list[ErrorDetail], message: str = "Invalid payload"):
    return write(HTTPStatus.UNPROCESSABLE_ENTITY, message, error=errors)


def internal(message: str = "Internal error"):
    return write(HTTPStatus.INTERNAL_SERVER_ERROR, message)


def service_unavailable(message: str):
    return write(HTTPStatus.SERVICE_UNAVAILABLE, message)
