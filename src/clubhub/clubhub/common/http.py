from __future__ import annotations

import logging
import math
from typing import Any, Optional, Type, TypeVar

import pydantic
from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from ..core.exceptions import ClubHubError, ErrorKind, ValidationError

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=pydantic.BaseModel)

STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.AUTHENTICATION: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.DOMAIN_RULE: 400,
    ErrorKind.INTERNAL: 500,
}

GENERIC_ERROR_MESSAGE = "Internal server error"


def ok(data: Any = None, message: str = "OK", status: int = 200):
    return jsonify({"success": True, "message": message, "data": data}), status


def paginated(items: list, *, page: int, limit: int, total: int, message: str = "OK"):
    return ok(
        {
            "items": items,
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "total_pages": math.ceil(total / limit) if limit else 0,
            },
        },
        message,
    )


def error_body(message: str, *, errors: Optional[list] = None) -> dict:
    body: dict[str, Any] = {"success": False, "message": message, "data": None}
    if errors:
        body["errors"] = errors
    return body


def parse_body(model: Type[M]) -> M:
    """Validate the JSON body against ``model``; field errors become a ValidationError."""
    payload = request.get_json(silent=True)
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    try:
        return model.model_validate(payload)
    except pydantic.ValidationError as e:
        errors = [
            {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
            for err in e.errors()
        ]
        raise ValidationError("Validation failed", context={"errors": errors})


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ClubHubError)
    def handle_domain_error(e: ClubHubError):
        status = STATUS_BY_KIND.get(e.kind, 500)
        if status >= 500:
            logger.error("Internal error on %s %s: %s", request.method, request.path, e.message)
            return jsonify(error_body(GENERIC_ERROR_MESSAGE)), status
        return jsonify(error_body(e.message, errors=e.context.get("errors"))), status

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return jsonify(error_body(e.description or e.name)), e.code or 500

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify(error_body(GENERIC_ERROR_MESSAGE)), 500
