"""HTTP surface of the observability API."""

from .app import create_app
from .errors import register_error_handlers
from .handlers import router
from .schemas import ErrorDetail, ErrorResponse, ScoreTarget, ScoreTracesBody

__all__ = [
    "ErrorDetail",
    "ErrorResponse",
    "ScoreTarget",
    "ScoreTracesBody",
    "create_app",
    "register_error_handlers",
    "router",
]
