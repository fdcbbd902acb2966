from __future__ import annotations

from .request_id import RequestIDMiddleware
from .request_logging import RequestLoggingMiddleware

__all__ = ["RequestIDMiddleware", "RequestLoggingMiddleware"]
