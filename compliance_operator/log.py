"""
Logging bootstrap for the compliance operator.

Loggers are plain ``logging`` loggers named under ``compliance_operator``;
this module only configures the root handler and its formatter.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

from .config import LogFormat, LogLevel

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# LogRecord attributes that are not user supplied ``extra`` fields
_RESERVED_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """Render each record as a single-line JSON object."""

    def __init__(self, indent: Optional[int] = None):
        super().__init__()
        self.indent = indent

    def format(self, record: logging.LogRecord) -> str:
        data: Dict[str, Any] = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith('_'):
                data[key] = value
        if record.exc_info:
            data['exception'] = self.formatException(record.exc_info)

        return json.dumps(
            data,
            indent=self.indent,
            default=str,
            ensure_ascii=False,
            separators=(',', ':') if self.indent is None else None
        )


def setup_logging(
    level: Union[LogLevel, str] = LogLevel.INFO,
    fmt: Union[LogFormat, str] = LogFormat.TEXT
) -> None:
    """Configure the root logger for the operator process."""
    level_name = level.value if isinstance(level, LogLevel) else str(level).upper()
    log_format = LogFormat(fmt)

    handler = logging.StreamHandler()
    if log_format == LogFormat.JSON:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))

    logging.basicConfig(
        level=getattr(logging, level_name),
        handlers=[handler],
        force=True
    )
