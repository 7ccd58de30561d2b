# SPDX-License-Identifier: MIT
"""Shared utilities for tsorm."""

from .logging import (
    JSONFormatter,
    StructuredLogger,
    chain_context,
    configure_logging,
    get_logger,
)

__all__ = [
    "JSONFormatter",
    "StructuredLogger",
    "chain_context",
    "configure_logging",
    "get_logger",
]
