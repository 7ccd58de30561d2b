# SPDX-License-Identifier: MIT
"""Structured JSON logging for the mapper.

Every log line emitted through :class:`StructuredLogger` carries the identifier
of the call chain that produced it, so the statements issued by one
``create`` or ``find`` call can be correlated after the fact.
"""
from __future__ import annotations

import json
import logging
import sys
import time
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Dict, Iterator, Optional
from uuid import uuid4


_CHAIN_ID_VAR: ContextVar[Optional[str]] = ContextVar("tsorm_chain_id", default=None)


def generate_chain_id() -> str:
    """Generate a new call-chain identifier."""

    return uuid4().hex


def get_chain_id() -> Optional[str]:
    """Return the identifier of the active call chain, if any."""

    return _CHAIN_ID_VAR.get()


@contextmanager
def chain_context(chain_id: Optional[str] = None) -> Iterator[str]:
    """Bind ``chain_id`` (or a fresh one) for the duration of the block."""

    resolved = chain_id or generate_chain_id()
    token = _CHAIN_ID_VAR.set(resolved)
    try:
        yield resolved
    finally:
        _CHAIN_ID_VAR.reset(token)


class JSONFormatter(logging.Formatter):
    """Render log records as single-line JSON documents."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        chain_id = getattr(record, "chain_id", None)
        if chain_id:
            payload["chain_id"] = chain_id
        fields = getattr(record, "fields", None)
        if fields:
            payload.update(fields)
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class StructuredLogger:
    """Thin wrapper around :mod:`logging` accepting keyword fields."""

    def __init__(self, name: str) -> None:
        self.logger = logging.getLogger(name)

    def _log(self, level: int, msg: str, **fields: Any) -> None:
        if not self.logger.isEnabledFor(level):
            return
        extra: Dict[str, Any] = {"chain_id": get_chain_id()}
        if fields:
            extra["fields"] = fields
        self.logger.log(level, msg, extra=extra)

    def debug(self, msg: str, **fields: Any) -> None:
        self._log(logging.DEBUG, msg, **fields)

    def info(self, msg: str, **fields: Any) -> None:
        self._log(logging.INFO, msg, **fields)

    def warning(self, msg: str, **fields: Any) -> None:
        self._log(logging.WARNING, msg, **fields)

    def error(self, msg: str, **fields: Any) -> None:
        self._log(logging.ERROR, msg, **fields)

    @contextmanager
    def operation(self, name: str, **context: Any) -> Iterator[Dict[str, Any]]:
        """Time a unit of work and log its outcome.

        The yielded dictionary may be filled with result fields, which are
        included in the completion record::

            with logger.operation("tsorm_create", model="Sensor") as op:
                op["rows_affected"] = outcome.rows_affected
        """

        started = time.perf_counter()
        op_context: Dict[str, Any] = {"operation": name, **context}
        with chain_context(get_chain_id()):
            self.debug(f"Starting operation: {name}", **op_context)
            try:
                yield op_context
            except Exception as exc:
                self.error(
                    f"Failed operation: {name}",
                    **op_context,
                    duration_seconds=time.perf_counter() - started,
                    error_type=type(exc).__name__,
                    error_message=str(exc),
                )
                raise
            self.debug(
                f"Completed operation: {name}",
                **op_context,
                duration_seconds=time.perf_counter() - started,
            )


def configure_logging(level: str = "INFO", use_json: bool = True, stream: Any = None) -> None:
    """Install a single stream handler on the ``tsorm`` logger hierarchy."""

    logger = logging.getLogger("tsorm")
    logger.setLevel(getattr(logging, level.upper()))
    logger.handlers.clear()
    handler = logging.StreamHandler(stream or sys.stderr)
    if use_json:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
    logger.addHandler(handler)


def get_logger(name: str) -> StructuredLogger:
    """Return a :class:`StructuredLogger` for ``name`` (typically ``__name__``)."""

    return StructuredLogger(name)


__all__ = [
    "JSONFormatter",
    "StructuredLogger",
    "chain_context",
    "configure_logging",
    "generate_chain_id",
    "get_chain_id",
    "get_logger",
]
