"""Request-scoped values used to correlate log lines."""

from contextvars import ContextVar
from typing import Dict

request_id_var: ContextVar[str] = ContextVar("request_id", default="")
http_method_var: ContextVar[str] = ContextVar("http_method", default="")
http_path_var: ContextVar[str] = ContextVar("http_path", default="")


def set_request_context(*, request_id: str = "", method: str = "", path: str = "") -> None:
    request_id_var.set(request_id or "")
    http_method_var.set(method or "")
    http_path_var.set(path or "")


def get_context_dict() -> Dict[str, str]:
    ctx = {
        "request_id": request_id_var.get(),
        "method": http_method_var.get(),
        "path": http_path_var.get(),
    }
    return {k: v for k, v in ctx.items() if v}


def clear_context() -> None:
    set_request_context()
