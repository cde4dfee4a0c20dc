# tcms_api/common/http.py
"""Response envelope and request-argument helpers shared by the blueprints."""
from typing import Optional

from flask import jsonify, request


def ok(data=None, status=200, **meta):
    body = {"success": True, "data": data}
    if meta:
        body["meta"] = meta
    return jsonify(body), status


def fail(message="Bad Request", status=400, code=None, detail=None, errors=None):
    err = {"message": message}
    for key, val in (("code", code), ("detail", detail), ("errors", errors)):
        if val:
            err[key] = val
    return jsonify({"success": False, "error": err}), status


def as_int(val, field: str) -> Optional[int]:
    """None/'' -> None; ints and numeric strings -> int; anything else raises ValueError."""
    if val is None or val == "":
        return None
    if isinstance(val, bool):
        raise ValueError(f"{field} must be integer")
    try:
        return int(val)
    except (TypeError, ValueError):
        raise ValueError(f"{field} must be integer")


def int_arg(name: str) -> Optional[int]:
    return as_int(request.args.get(name), name)
