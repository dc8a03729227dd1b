from __future__ import annotations

import dataclasses
from datetime import date, datetime
from enum import Enum
from typing import Any

from flask import jsonify

from ..core.enums import ErrorKind
from ..core.result import ActionResult

STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.FUTURE_DATE: 400,
    ErrorKind.NO_CHANGE: 400,
    ErrorKind.INVALID_SEMESTER: 400,
    ErrorKind.UNAUTHORIZED: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.DUPLICATE: 409,
    ErrorKind.DELETED: 410,
}


def to_jsonable(value: Any) -> Any:
    """Convert domain values (dataclasses, dates, enums, id sets) into JSON types."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (set, frozenset)):
        return sorted(to_jsonable(v) for v in value)
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


def respond(result: ActionResult, *, success_status: int = 200):
    body = result.to_dict()
    if result.success:
        body["data"] = to_jsonable(result.data)
        return jsonify(body), success_status
    return jsonify(body), STATUS_BY_KIND.get(result.kind, 400)


def unauthorized():
    return respond(ActionResult.failure(ErrorKind.UNAUTHORIZED, "Unauthorized: please sign in"))


def server_error(message: str):
    return jsonify({"success": False, "error": message}), 500
