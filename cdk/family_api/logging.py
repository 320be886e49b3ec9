"""
Structured JSON logging for the gateway simulator.

Every entry is one JSON object per line carrying the request's correlation id
(the gateway request id), so one request can be followed from routing to the
storage call and the response rewrite.
"""

import json
import logging
import os
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional


class StructuredLogger:
    """
    JSON line logger bound to one correlation id.

    Fields passed to the constructor or to bind() are repeated on every entry.

    Example:
        logger = StructuredLogger(__name__, correlation_id=request_id)
        route_logger = logger.bind(method="GET", path="/family/{id}")
        route_logger.info("Dispatching request", action="GetItem")
    """

    def __init__(self, name: str, correlation_id: Optional[str] = None, **context: Any) -> None:
        self.name = name
        self.logger = logging.getLogger(name)
        self.logger.setLevel(os.getenv("LOG_LEVEL", "INFO"))
        self.correlation_id = correlation_id or str(uuid.uuid4())
        self.context = context

    def bind(self, **fields: Any) -> "StructuredLogger":
        """Logger with the same correlation id and additional fixed fields."""
        return StructuredLogger(self.name, self.correlation_id, **{**self.context, **fields})

    def log(self, level: int, message: str, **fields: Any) -> None:
        """Emit one entry if the level is enabled; None-valued fields are dropped."""
        if not self.logger.isEnabledFor(level):
            return

        entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": logging.getLevelName(level),
            "logger": self.name,
            "message": message,
            "correlationId": self.correlation_id,
            **self.context,
            **fields,
        }
        print(json.dumps({k: v for k, v in entry.items() if v is not None}, default=str))

    def debug(self, message: str, **fields: Any) -> None:
        self.log(logging.DEBUG, message, **fields)

    def info(self, message: str, **fields: Any) -> None:
        self.log(logging.INFO, message, **fields)

    def warning(self, message: str, **fields: Any) -> None:
        self.log(logging.WARNING, message, **fields)

    def error(self, message: str, **fields: Any) -> None:
        self.log(logging.ERROR, message, **fields)
