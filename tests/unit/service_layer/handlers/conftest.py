"""Pytest fixtures for service layer handler unit tests."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from .fakes import TestBus, bootstrap_test_bus

# pylint: disable=redefined-outer-name


@pytest.fixture
def bus_params():
    """Default bus parameters. Classes can override this fixture"""
    return {}


@pytest.fixture
def make_test_bus(bus_params) -> Callable[..., TestBus]:
    """Factory to create a message bus with in-memory storage for testing."""

    def _make():
        return bootstrap_test_bus(**bus_params)

    return _make
