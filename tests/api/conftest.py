"""
Shared fixtures for API tests.

Signs bodies the way the broker does so endpoints can be exercised with a
real SignatureVerifier.
"""

import time

import jwt
import pytest
from fastapi.testclient import TestClient

from thesis_review.api.deps import get_signature_verifier
from thesis_review.api.main import create_app
from thesis_review.boundary.queue.signature import ISSUER, SIGNATURE_HEADER, SignatureVerifier, body_digest
from thesis_review.configs.queue import QueueSettings

SIGNING_KEY = "api_test_signing_key"


def signed_headers(body: bytes, key: str = SIGNING_KEY) -> dict[str, str]:
    """Headers carrying a broker signature over ``body``."""
    now = int(time.time())
    token = jwt.encode(
        {
            "iss": ISSUER,
            "sub": "http://testserver/api/jobs",
            "exp": now + 300,
            "nbf": now - 5,
            "iat": now,
            "body": body_digest(body),
        },
        key,
        algorithm="HS256",
    )
    return {SIGNATURE_HEADER: token, "Content-Type": "application/json"}


@pytest.fixture
def app():
    app = create_app()
    verifier = SignatureVerifier(QueueSettings(current_signing_key=SIGNING_KEY))
    app.dependency_overrides[get_signature_verifier] = lambda: verifier
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def sign():
    """The ``signed_headers`` helper, for tests that sign their own bodies."""
    return signed_headers
