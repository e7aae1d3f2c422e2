"""Test configuration and fixtures."""

import os
from unittest.mock import patch

import pytest
import requests
from fastapi.testclient import TestClient

from core.settings import Settings
from main import app

SAMPLE_IPN = (
    b"mc_gross=19.95&protection_eligibility=Eligible&address_status=confirmed"
    b"&payer_id=LPLWNMTBWMFAY&payment_date=20%3A12%3A59+Jan+13%2C+2009+PST"
    b"&payment_status=Completed&charset=windows-1252&first_name=Test"
    b"&mc_fee=0.88&notify_version=2.6&payer_email=buyer%40paypalsandbox.com"
    b"&txn_id=61E67681CH3238416&item_name=Caf%E9+Cr%E8me&custom=xyz123"
)


def make_response(text, status_code=200, headers=None):
    """Build a real requests.Response carrying the given body."""
    response = requests.Response()
    response.status_code = status_code
    response._content = text.encode("utf-8")
    response._content_consumed = True
    response.encoding = "utf-8"
    response.url = "https://www.paypal.com/cgi-bin/webscr"
    if headers:
        response.headers.update(headers)
    return response


@pytest.fixture(autouse=True)
def setup_test_environment():
    """Setup test environment variables before each test."""
    original_env = dict(os.environ)

    os.environ.update(
        {
            "APP_NAME": "Test IPN Listener",
            "ENVIRONMENT": "test",
            "DEBUG": "true",
        }
    )
    for key in (
        "PAYPAL_IPN_SANDBOX",
        "PAYPAL_IPN_SSL",
        "PAYPAL_IPN_STRICT",
        "PAYPAL_IPN_TIMEOUT",
    ):
        os.environ.pop(key, None)

    yield

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def mock_settings():
    return Settings(
        PAYPAL_IPN_SANDBOX=True,
        PAYPAL_IPN_SSL=True,
        PAYPAL_IPN_STRICT=False,
        PAYPAL_IPN_TIMEOUT=5.0,
        APP_NAME="Test IPN Listener",
        DEBUG=True,
        ENVIRONMENT="test",
    )


@pytest.fixture
def sample_ipn():
    return SAMPLE_IPN


@pytest.fixture
def response_factory():
    return make_response


@pytest.fixture
def mock_session():
    """Patch the session the verifier opens for each request."""
    with patch("ipn.verifier.requests.Session") as session_class:
        session = session_class.return_value.__enter__.return_value
        session.post.return_value = make_response("VERIFIED")
        yield session


@pytest.fixture
def mock_post(mock_session):
    """The outbound verification POST."""
    return mock_session.post


@pytest.fixture
def client():
    """Test client with settings initialized through the app lifespan."""
    with TestClient(app) as test_client:
        yield test_client
