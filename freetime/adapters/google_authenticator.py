"""
Google API authentication using a service account (JWT bearer grant).
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

import jwt
import requests

from ..domain.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


TOKEN_URL = "https://oauth2.googleapis.com/token"
JWT_BEARER_GRANT = "urn:ietf:params:oauth:grant-type:jwt-bearer"
ASSERTION_LIFETIME_SECONDS = 3600
SAFETY_MARGIN_SECONDS = 60


@dataclass
class AccessTokenCache:
    """
    An access token together with the instant (epoch seconds) it expires.

    The cache is an explicit object handed to the authenticator; it holds
    nothing process-wide.
    """
    token: Optional[str] = None
    expires_at: float = 0.0
    safety_margin: float = SAFETY_MARGIN_SECONDS

    def is_valid(self, now: float) -> bool:
        """True while a token is held and ``now`` is before expiry minus the margin."""
        return self.token is not None and now < self.expires_at - self.safety_margin

    def store(self, token: str, expires_at: float) -> None:
        self.token = token
        self.expires_at = expires_at

    def clear(self) -> None:
        self.token = None
        self.expires_at = 0.0


def normalize_private_key(private_key: str) -> str:
    """
    Turn literal ``\\n`` sequences into newlines.

    PEM keys pasted into environment variables usually arrive escaped.
    """
    return private_key.replace("\\n", "\n").strip() + "\n"


class ServiceAccountAuthenticator:
    """
    Mints access tokens for the Google Calendar API.

    Flow:
    1. Sign a JWT assertion with the service account's RSA key (RS256)
    2. Exchange it at the OAuth token endpoint
    3. Keep the token in the cache until shortly before it expires
    """

    SCOPES = ["https://www.googleapis.com/auth/calendar.readonly"]

    def __init__(
        self,
        service_account_email: str,
        private_key: str,
        cache: Optional[AccessTokenCache] = None,
        session: Optional[requests.Session] = None,
        clock: Callable[[], float] = time.time,
        token_url: str = TOKEN_URL,
    ):
        """
        Initialize the authenticator.

        Args:
            service_account_email: Client email of the service account
            private_key: PKCS#8 PEM private key of the service account
            cache: Token cache to read from and refresh into
            session: Optional requests session (used by tests)
            clock: Source of the current time in epoch seconds
            token_url: OAuth token endpoint
        """
        self.service_account_email = service_account_email
        self.private_key = normalize_private_key(private_key)
        self.cache = cache if cache is not None else AccessTokenCache()
        self.session = session or requests.Session()
        self.clock = clock
        self.token_url = token_url
        self._lock = threading.Lock()

    def build_assertion(self, issued_at: int) -> str:
        """Create the signed JWT assertion for the token exchange."""
        payload = {
            "iss": self.service_account_email,
            "scope": " ".join(self.SCOPES),
            "aud": self.token_url,
            "iat": issued_at,
            "exp": issued_at + ASSERTION_LIFETIME_SECONDS,
        }
        try:
            return jwt.encode(payload, self.private_key, algorithm="RS256")
        except (ValueError, TypeError, jwt.PyJWTError) as exc:
            raise AuthenticationError(f"Could not sign service account assertion: {exc}") from exc

    def get_access_token(self, force_refresh: bool = False) -> str:
        """
        Get a valid access token, using the cache or requesting a new one.

        Args:
            force_refresh: Ignore a cached token even if it is still valid

        Returns:
            Access token string

        Raises:
            AuthenticationError: If the token exchange fails
        """
        with self._lock:
            if not force_refresh and self.cache.is_valid(self.clock()):
                return self.cache.token
            return self._refresh()

    def _refresh(self) -> str:
        issued_at = int(self.clock())
        assertion = self.build_assertion(issued_at)

        try:
            response = self.session.post(
                self.token_url,
                data={"grant_type": JWT_BEARER_GRANT, "assertion": assertion},
                timeout=30,
            )
        except requests.exceptions.RequestException as exc:
            raise AuthenticationError(f"Token exchange failed: {exc}") from exc

        if not response.ok:
            logger.error("Token exchange failed: %s", response.text)
            raise AuthenticationError(f"Token exchange failed: {response.status_code}")

        try:
            data = response.json()
            token = data["access_token"]
            expires_in = float(data.get("expires_in", ASSERTION_LIFETIME_SECONDS))
        except (ValueError, KeyError, TypeError) as exc:
            raise AuthenticationError(f"Unexpected token response: {exc}") from exc

        self.cache.store(token, self.clock() + expires_in)
        logger.debug("Refreshed access token, valid for %.0f seconds", expires_in)
        return token

    def clear_cache(self) -> None:
        """Forget the cached token (the next call refreshes)."""
        with self._lock:
            self.cache.clear()
