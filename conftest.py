# SPDX-License-Identifier: MIT
"""Pytest fixtures and environment setup.

This module performs two responsibilities:

* Ensure the repository root is importable so tests can resolve in-tree
  packages (``tsorm`` and the shared ``tests.unit.orm`` helpers) without
  installing them.
* Accept the ``--cov``/``--cov-report`` switches used by the nox sessions
  when the ``pytest-cov`` plugin is absent, so a bare ``pytest`` install
  still runs the suite.
"""

from __future__ import annotations

import logging
import pathlib
import sys
import warnings
from typing import Iterable, Iterator

import pytest

ROOT = pathlib.Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def _register_noop_cov_options(parser: "pytest.Parser") -> None:
    """Register ``--cov`` flags when ``pytest-cov`` is unavailable."""

    group = parser.getgroup("cov", "coverage reporting")
    options: Iterable[tuple[str, dict[str, object]]] = (
        ("--cov", {"action": "append", "dest": "tsorm_cov", "metavar": "PATH", "default": []}),
        ("--cov-report", {"action": "append", "dest": "tsorm_cov_report", "metavar": "TYPE", "default": []}),
    )
    for opt, kwargs in options:
        try:
            group.addoption(opt, **kwargs)
        except ValueError:
            # Option already registered (e.g. by pytest-cov); keep the registered one.
            pass


def pytest_addoption(parser):  # type: ignore[override]
    try:
        import pytest_cov.plugin  # noqa: F401  # type: ignore[attr-defined]
    except Exception:
        _register_noop_cov_options(parser)


def pytest_configure(config):  # type: ignore[override]
    if config.pluginmanager.hasplugin("pytest_cov"):
        return
    cov_targets = config.getoption("tsorm_cov", default=None)
    cov_reports = config.getoption("tsorm_cov_report", default=None)
    if cov_targets or cov_reports:
        from _pytest.warning_types import PytestWarning

        warnings.warn(
            "pytest-cov is not installed; coverage options are accepted but ignored.",
            PytestWarning,
            stacklevel=2,
        )


@pytest.fixture(autouse=True)
def _isolate_tsorm_logger() -> Iterator[None]:
    """Restore the ``tsorm`` logger after tests that reconfigure it."""

    logger = logging.getLogger("tsorm")
    handlers = list(logger.handlers)
    level = logger.level
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
