# SPDX-License-Identifier: MIT
"""Backoff applied to the connectivity check run by :func:`tsorm.db.connect`.

Statements issued by the mapper are never retried. Only a failure to reach
the database at all is considered transient.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

from pydantic import BaseModel, Field, PositiveFloat, PositiveInt
from sqlalchemy.exc import InterfaceError, OperationalError
from tenacity import RetryCallState, Retrying, retry_if_exception, stop_after_attempt, wait_random_exponential

from .utils.logging import get_logger

__all__ = ["RetryPolicy", "is_transient_connect_error", "retry_connect"]

T = TypeVar("T")

_LOGGER = get_logger(__name__)


def is_transient_connect_error(error: BaseException) -> bool:
    """Return ``True`` for failures of the kind a later connect may not hit.

    Opening a pooled connection surfaces socket level errors directly, or as
    SQLAlchemy ``OperationalError``/``InterfaceError`` wrapping the driver's.
    """

    return isinstance(error, (TimeoutError, ConnectionError, OperationalError, InterfaceError))


class RetryPolicy(BaseModel):
    """How often and how patiently ``connect()`` pings the database."""

    attempts: PositiveInt = Field(3, description="Pings to try before connect() fails.")
    initial_backoff: PositiveFloat = Field(0.1, description="Backoff multiplier in seconds.")
    max_backoff: PositiveFloat = Field(2.0, description="Upper bound of a single wait in seconds.")

    def retrying(self) -> Retrying:
        return Retrying(
            stop=stop_after_attempt(int(self.attempts)),
            wait=wait_random_exponential(multiplier=self.initial_backoff, max=self.max_backoff),
            retry=retry_if_exception(is_transient_connect_error),
            before_sleep=_log_retry,
            reraise=True,
        )


def _log_retry(state: RetryCallState) -> None:
    error = state.outcome.exception() if state.outcome is not None else None
    _LOGGER.warning(
        "tsorm_connect_retry",
        attempt=state.attempt_number,
        wait_seconds=state.next_action.sleep if state.next_action is not None else None,
        error=str(error),
    )


def retry_connect(policy: RetryPolicy, ping: Callable[[], T]) -> T:
    """Call ``ping`` until it succeeds or ``policy`` gives up."""

    return policy.retrying()(ping)
