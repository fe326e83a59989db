"""Shared fixtures for the log sanitizer tests."""

from __future__ import annotations

import logging

import pytest

from logsanitizer.engine.recognizers import AddressMatcher
from logsanitizer.engine.sanitizer import LineSanitizer


@pytest.fixture(scope="session")
def matcher() -> AddressMatcher:
    return AddressMatcher.from_loader()


@pytest.fixture
def sanitizer(matcher: AddressMatcher) -> LineSanitizer:
    return LineSanitizer(matcher)


@pytest.fixture
def isolated_logging():
    """Drops handlers installed by configure_logging and restores the level."""
    root = logging.getLogger()
    before = set(root.handlers)
    level = root.level
    yield root
    for handler in list(root.handlers):
        if handler not in before and not type(handler).__module__.startswith("_pytest"):
            root.removeHandler(handler)
    root.setLevel(level)
