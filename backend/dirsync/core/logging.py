"""Logging setup with contextual dimensions.

All modules log through ``ContextualLogger``, a ``LoggerAdapter`` that carries
key/value dimensions (``config_id``, ``tenant_id``, ...) into every record.
Derive narrower loggers instead of formatting ids into each message:

    session_logger = logger.with_context(config_id=str(config.id))
    session_logger.info("Bind successful")

Local and test environments get readable single-line output; deployed
environments emit one JSON object per line.
"""

import logging
import sys
from typing import Any, Dict, MutableMapping, Optional, Tuple

from pythonjsonlogger.core import RESERVED_ATTRS
from pythonjsonlogger.json import JsonFormatter

from dirsync.core.config import settings
from dirsync.core.config.enums import Environment

_RESERVED_RECORD_FIELDS = frozenset(RESERVED_ATTRS) | {"message", "asctime", "taskName"}


class ContextualLogger(logging.LoggerAdapter):
    """Logger adapter that merges persistent dimensions into ``extra``."""

    def __init__(
        self,
        logger: logging.Logger,
        prefix: str = "",
        dimensions: Optional[Dict[str, Any]] = None,
    ):
        """Wrap ``logger`` with an optional message prefix and dimensions."""
        super().__init__(logger, dict(dimensions or {}))
        self.prefix = prefix
        self.dimensions: Dict[str, Any] = dict(dimensions or {})

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, Any]:
        """Prefix the message and merge dimensions under any per-call extras."""
        extra = dict(self.dimensions)
        extra.update(kwargs.get("extra") or {})
        kwargs["extra"] = extra
        return f"{self.prefix}{msg}", kwargs

    def with_context(self, **dimensions: Any) -> "ContextualLogger":
        """Return a new logger with additional dimensions."""
        merged = {**self.dimensions, **dimensions}
        return ContextualLogger(self.logger, prefix=self.prefix, dimensions=merged)

    def with_prefix(self, prefix: str) -> "ContextualLogger":
        """Return a new logger whose messages start with ``prefix``."""
        return ContextualLogger(self.logger, prefix=prefix, dimensions=self.dimensions)


class _ReadableFormatter(logging.Formatter):
    """Human readable formatter that appends dimensions as ``key=value`` pairs."""

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        dims = {k: v for k, v in record.__dict__.items() if k not in _RESERVED_RECORD_FIELDS}
        if not dims:
            return base
        rendered = " ".join(f"{k}={v}" for k, v in sorted(dims.items()))
        return f"{base} [{rendered}]"


def _json_formatter() -> JsonFormatter:
    """One JSON object per record; dimensions become top-level keys."""
    return JsonFormatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s",
        rename_fields={"asctime": "timestamp", "levelname": "level", "name": "logger"},
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )


class LoggerConfigurator:
    """Builds configured loggers for the application."""

    _handler_installed = False

    @classmethod
    def _install_handler(cls) -> None:
        if cls._handler_installed:
            return
        handler = logging.StreamHandler(sys.stdout)
        if settings.ENVIRONMENT in (Environment.LOCAL, Environment.TEST):
            handler.setFormatter(
                _ReadableFormatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
            )
        else:
            handler.setFormatter(_json_formatter())
        root = logging.getLogger("dirsync")
        root.addHandler(handler)
        root.setLevel(settings.LOG_LEVEL.upper())
        root.propagate = False
        cls._handler_installed = True

    @classmethod
    def configure_logger(
        cls,
        name: str,
        prefix: str = "",
        dimensions: Optional[Dict[str, Any]] = None,
    ) -> ContextualLogger:
        """Return a ContextualLogger for ``name`` with the given dimensions.

        Args:
            name: Logger name, normally under the ``dirsync`` namespace.
            prefix: Text prepended to every message.
            dimensions: Key/value pairs attached to every record.

        Returns:
            ContextualLogger: configured logger adapter.
        """
        cls._install_handler()
        return ContextualLogger(logging.getLogger(name), prefix=prefix, dimensions=dimensions)


logger = LoggerConfigurator.configure_logger("dirsync")
