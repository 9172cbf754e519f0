"""
Structured logging for the ledger kernel and the reporting module.

Responsibility:
    One JSON object per log line.  Request-scoped identifiers (tenant,
    report, correlation) travel in ``LogContext`` contextvars and are
    merged into every record emitted while they are bound, so a report's
    events can be grepped by tenant without threading ids through every
    call.

Architecture position:
    Kernel root.  Imports nothing from the rest of the package.  Every
    module obtains its logger through ``get_logger`` so that all output
    lives under the ``ledger_kernel`` namespace.

Invariants enforced:
    * ``configure_logging`` attaches exactly one handler, however often
      it is called.
    * Decimal, UUID and datetime values serialize as strings; amounts are
      never rendered as floats.
    * Fields passed with ``extra=`` never overwrite the base keys
      (``ts``, ``level``, ``logger``, ``message``) or bound context.
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from contextvars import ContextVar, Token
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

LOGGER_NAMESPACE = "ledger_kernel"

_CONTEXT_FIELDS = (
    "correlation_id",
    "tenant_id",
    "report_id",
    "actor_id",
    "trace_id",
)

_context_vars: dict[str, ContextVar[str | None]] = {
    name: ContextVar(f"ledger_log_{name}", default=None) for name in _CONTEXT_FIELDS
}


# ---------------------------------------------------------------------------
# Context propagation
# ---------------------------------------------------------------------------


class LogContext:
    """Contextvar-backed fields merged into every record (thread and task safe)."""

    @staticmethod
    def set(**fields: str | None) -> None:
        """Set the given fields; ``None`` values are ignored."""
        for name, value in fields.items():
            if value is not None:
                _var(name).set(str(value))

    @staticmethod
    def get_all() -> dict[str, str]:
        values = {name: var.get() for name, var in _context_vars.items()}
        return {name: value for name, value in values.items() if value is not None}

    @staticmethod
    def clear() -> None:
        for var in _context_vars.values():
            var.set(None)

    @staticmethod
    def bind(**fields: str | None) -> "_BoundContext":
        """``with LogContext.bind(tenant_id=...):`` restores prior values on exit."""
        return _BoundContext(fields)


def _var(name: str) -> ContextVar[str | None]:
    try:
        return _context_vars[name]
    except KeyError:
        raise ValueError(f"unknown log context field: {name!r}") from None


class _BoundContext:

    def __init__(self, fields: dict[str, str | None]):
        self._fields = fields
        self._tokens: list[tuple[ContextVar[str | None], Token]] = []

    def __enter__(self) -> type[LogContext]:
        for name, value in self._fields.items():
            if value is not None:
                var = _var(name)
                self._tokens.append((var, var.set(str(value))))
        return LogContext

    def __exit__(self, *exc: Any) -> None:
        while self._tokens:
            var, token = self._tokens.pop()
            var.reset(token)


# ---------------------------------------------------------------------------
# JSON formatter
# ---------------------------------------------------------------------------

# Attributes every LogRecord carries; anything else on a record came from extra=.
_RECORD_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _to_json(value: Any) -> Any:
    if isinstance(value, (Decimal, UUID)):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


class StructuredFormatter(logging.Formatter):
    """Renders a record as ``{ts, level, logger, message, <context>, <extra>}``."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS:
                payload.setdefault(key, value)

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(self._exception_fields(record))

        return json.dumps(payload, default=_to_json)

    def _exception_fields(self, record: logging.LogRecord) -> dict[str, Any]:
        exc = record.exc_info[1]
        fields: dict[str, Any] = {
            "exc_type": type(exc).__name__,
            "exc_message": str(exc),
        }
        if hasattr(exc, "code"):
            fields["exc_code"] = exc.code
        # Structured attributes of LedgerKernelError subclasses
        for key, value in vars(exc).items():
            if not key.startswith("_"):
                fields[f"exc_{key}"] = value
        fields["traceback"] = self.formatException(record.exc_info)
        return fields


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------


def get_logger(name: str) -> logging.Logger:
    """``get_logger("modules.reporting.service")`` -> ``ledger_kernel.modules.reporting.service``."""
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")


_lock = threading.Lock()

# Marks the handler installed by configure_logging.
_INSTALLED_ATTR = "_ledger_structured"


def _installed_handler(namespace_logger: logging.Logger) -> logging.Handler | None:
    for handler in namespace_logger.handlers:
        if getattr(handler, _INSTALLED_ATTR, False):
            return handler
    return None


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """Install the JSON handler on the namespace logger.

    A no-op while a handler from an earlier call is still attached.
    """
    namespace_logger = logging.getLogger(LOGGER_NAMESPACE)
    with _lock:
        if _installed_handler(namespace_logger) is not None:
            return

        namespace_logger.setLevel(level)
        namespace_logger.propagate = False

        if handler is None:
            handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(StructuredFormatter())
        setattr(handler, _INSTALLED_ATTR, True)
        namespace_logger.addHandler(handler)


def reset_logging() -> None:
    """Drop handlers and forget configuration.  Tests only."""
    namespace_logger = logging.getLogger(LOGGER_NAMESPACE)
    with _lock:
        namespace_logger.handlers.clear()
        namespace_logger.setLevel(logging.WARNING)
