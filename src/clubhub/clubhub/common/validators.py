from __future__ import annotations

import uuid
from typing import Optional

from ..core.constants import DEFAULT_PAGE, DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required", context={"field": field_name})
    return value.strip()


def require_uuid(value: str, field_name: str) -> str:
    try:
        return str(uuid.UUID(str(value)))
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a valid UUID", context={"field": field_name})


def parse_page(page: Optional[str], limit: Optional[str]) -> tuple[int, int]:
    try:
        page_i = int(page) if page else DEFAULT_PAGE
        limit_i = int(limit) if limit else DEFAULT_PAGE_LIMIT
    except ValueError:
        raise ValidationError("page and limit must be integers")

    if page_i < 1:
        raise ValidationError("page must be >= 1", context={"field": "page"})
    if not 1 <= limit_i <= MAX_PAGE_LIMIT:
        raise ValidationError(f"limit must be between 1 and {MAX_PAGE_LIMIT}", context={"field": "limit"})
    return page_i, limit_i
