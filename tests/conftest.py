"""
Pytest fixtures for request-audit tests.
"""

import pytest

from app import app as flask_app
from tests.samples import FIXED_NOW


@pytest.fixture
def fixed_clock():
    """Clock that always returns FIXED_NOW."""
    return lambda: FIXED_NOW


@pytest.fixture
def app():
    """The Flask app with default test config."""
    flask_app.config.update(TESTING=True, TRUST_PROXY=True, LOG_AUDIT=True, LOG_PRETTY=True)
    yield flask_app


@pytest.fixture
def client(app):
    """Flask test client."""
    return app.test_client()
