"""
Shared fixtures and fakes for the test suite.
"""

from typing import Any, Dict, List, Optional

import pytest
import requests
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, status_code: int = 200, payload: Any = None, text: str = ""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("No JSON body")
        return self._payload

    def raise_for_status(self) -> None:
        if not self.ok:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error")


class FakeSession:
    """Records requests and replays queued responses (or raises queued errors)."""

    def __init__(self, responses: Optional[List[Any]] = None):
        self.responses = list(responses or [])
        self.calls: List[Dict[str, Any]] = []

    def _next(self, method: str, url: str, **kwargs) -> FakeResponse:
        self.calls.append({"method": method, "url": url, **kwargs})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def get(self, url: str, **kwargs) -> FakeResponse:
        return self._next("GET", url, **kwargs)

    def post(self, url: str, **kwargs) -> FakeResponse:
        return self._next("POST", url, **kwargs)


@pytest.fixture(scope="session")
def rsa_key_pair():
    """A throwaway RSA key pair as (private PEM, public PEM) strings."""
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()
    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode()
    return private_pem, public_pem


SETTINGS_VARIABLES = [
    "ENVIRONMENT",
    "FREETIME_TIMEZONE",
    "FREETIME_LOG_LEVEL",
    "GOOGLE_SERVICE_ACCOUNT_EMAIL",
    "GOOGLE_SERVICE_ACCOUNT_PRIVATE_KEY",
    "GOOGLE_CALENDAR_IDS",
    "SLACK_SIGNING_SECRET",
]


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Keep the developer's environment out of configuration under test."""
    for variable in SETTINGS_VARIABLES:
        monkeypatch.delenv(variable, raising=False)
