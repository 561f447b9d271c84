"""
Response catalog and envelope builder.

Every body this API sends has the same shape:

    {"code": int, "message": str, "data"?: any, "error"?: str, "meta"?: {...}}

Routes and exception handlers go through `respond`; nothing else builds
envelopes by hand.
"""

from enum import Enum
from typing import Any, Dict, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


class ResponseCode(Enum):
    OK = (0, "SUCCESS", 200)
    CREATED = (1, "CREATED", 201)
    UPDATED = (2, "UPDATED", 200)
    DELETED = (3, "DELETED", 200)
    BAD_REQUEST = (1000, "BAD REQUEST", 400)
    VALIDATION_ERROR = (1001, "VALIDATION ERROR", 400)
    UNAUTHORIZED = (1002, "UNAUTHORIZED", 401)
    FORBIDDEN = (1003, "FORBIDDEN", 403)
    NOT_FOUND = (1004, "NOT FOUND", 404)
    METHOD_NOT_ALLOWED = (1005, "METHOD NOT ALLOWED", 405)
    USER_NOT_FOUND = (1100, "USER NOT FOUND", 404)
    PRODUCT_NOT_FOUND = (1200, "PRODUCT NOT FOUND", 404)
    ORDER_NOT_FOUND = (1300, "ORDER NOT FOUND", 404)
    CONFLICT = (1400, "CONFLICT", 409)
    DUPLICATE = (1401, "DUPLICATE ENTRY", 409)
    INTERNAL_SERVER_ERROR = (1500, "INTERNAL SERVER ERROR", 500)

    def __init__(self, code: int, message: str, http_status: int):
        self.code = code
        self.message = message
        self.http_status = http_status

    @classmethod
    def for_status(cls, http_status: int) -> "ResponseCode":
        """Generic catalog entry for a bare HTTP status."""
        return _BY_STATUS.get(http_status, cls.INTERNAL_SERVER_ERROR if http_status >= 500 else cls.BAD_REQUEST)


_BY_STATUS = {
    400: ResponseCode.BAD_REQUEST,
    401: ResponseCode.UNAUTHORIZED,
    403: ResponseCode.FORBIDDEN,
    404: ResponseCode.NOT_FOUND,
    405: ResponseCode.METHOD_NOT_ALLOWED,
    409: ResponseCode.CONFLICT,
    422: ResponseCode.VALIDATION_ERROR,
    500: ResponseCode.INTERNAL_SERVER_ERROR,
}


def build_response(
    code: int,
    message: str,
    data: Any = None,
    error: Optional[str] = None,
    meta: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    res: Dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        res["data"] = data
    if error is not None:
        res["error"] = error
    if meta is not None:
        res["meta"] = meta
    return res


def respond(
    entry: ResponseCode,
    data: Any = None,
    error: Optional[str] = None,
    meta: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    body = build_response(entry.code, entry.message, data=data, error=error, meta=meta)
    return JSONResponse(status_code=entry.http_status, content=jsonable_encoder(body), headers=headers)
