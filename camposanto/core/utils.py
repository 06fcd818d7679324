from __future__ import annotations

import re
from datetime import date

from camposanto.core.errors import BadRequest

ID_PATTERN = re.compile(r"-?\d+", re.ASCII)


def parse_id(value: object, error_code: str) -> int:
    """Parse an integer id coming from a URL segment or a JSON body."""
    if isinstance(value, bool):
        raise BadRequest(error_code)
    if isinstance(value, int):
        return value
    raw = str(value if value is not None else "").strip()
    if not ID_PATTERN.fullmatch(raw):
        raise BadRequest(error_code)
    return int(raw)


def parse_optional_id(value: object, error_code: str) -> int | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return parse_id(value, error_code)


def parse_iso_date(value: object, missing_code: str, invalid_code: str) -> date:
    if isinstance(value, date):
        return value
    raw = str(value or "").strip()
    if not raw:
        raise BadRequest(missing_code)
    try:
        return date.fromisoformat(raw[:10])
    except ValueError as exc:
        raise BadRequest(invalid_code) from exc


def parse_optional_iso_date(value: object, invalid_code: str) -> date | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return parse_iso_date(value, invalid_code, invalid_code)


def clean_text(value: object) -> str | None:
    raw = str(value).strip() if value is not None else ""
    return raw or None
