"""
Shared pytest fixtures and configuration for nestwatch tests.
"""

import pytest

from nestwatch import AccessorFactory
from tests.utils import CallbackRecorder
from tests.utils.models import make_garage


@pytest.fixture(autouse=True)
def clear_accessor_pool():
    """Clear the accessor pool before each test to prevent state leakage."""
    AccessorFactory.clear_pool()


@pytest.fixture
def recorder():
    """Provide a fresh callback recorder."""
    return CallbackRecorder()


@pytest.fixture
def garage():
    """Provide a garage whose car.engine.power chain fully resolves."""
    return make_garage()
