"""
Slack integration: request signing, slash-command parsing and replies.
"""

import hashlib
import hmac
import logging
import time
from typing import Any, Dict, Literal, Optional, Union
from urllib.parse import parse_qs

import requests
from pydantic import BaseModel

logger = logging.getLogger(__name__)

MAX_REQUEST_AGE_SECONDS = 60 * 5
SIGNATURE_VERSION = "v0"
HELP_KEYWORDS = {"help", "ヘルプ", "h"}

CommandType = Literal["help", "search"]


class SlashCommand(BaseModel):
    """Form payload Slack posts for a slash command."""
    token: str = ""
    team_id: str = ""
    team_domain: str = ""
    channel_id: str = ""
    channel_name: str = ""
    user_id: str = ""
    user_name: str = ""
    command: str = ""
    text: str = ""
    response_url: str = ""
    trigger_id: str = ""

    @classmethod
    def from_form_body(cls, body: Union[bytes, str]) -> "SlashCommand":
        """Parse an ``application/x-www-form-urlencoded`` body."""
        if isinstance(body, bytes):
            body = body.decode("utf-8", errors="replace")
        fields = parse_qs(body, keep_blank_values=True)
        known = {name: values[0] for name, values in fields.items() if name in cls.model_fields}
        return cls(**known)


def compute_signature(signing_secret: str, timestamp: str, body: Union[bytes, str]) -> str:
    """Return the ``v0=<hex>`` signature Slack sends for this request body."""
    if isinstance(body, str):
        body = body.encode("utf-8")
    base_string = f"{SIGNATURE_VERSION}:{timestamp}:".encode("utf-8") + body
    digest = hmac.new(signing_secret.encode("utf-8"), base_string, hashlib.sha256).hexdigest()
    return f"{SIGNATURE_VERSION}={digest}"


def verify_slack_signature(
    signing_secret: str,
    signature: str,
    timestamp: str,
    body: Union[bytes, str],
    now: Optional[float] = None,
) -> bool:
    """
    Verify the X-Slack-Signature header of a request.

    The signature covers the raw body bytes, so this runs before decoding.

    Requests older (or newer) than five minutes are rejected to prevent
    replays.
    """
    if not signing_secret:
        logger.error("Slack signing secret is not configured")
        return False

    try:
        request_time = int(timestamp)
    except (TypeError, ValueError):
        logger.warning("Invalid Slack request timestamp: %r", timestamp)
        return False

    current = time.time() if now is None else now
    if abs(current - request_time) > MAX_REQUEST_AGE_SECONDS:
        logger.warning("Request timestamp too old")
        return False

    expected = compute_signature(signing_secret, timestamp, body)
    return hmac.compare_digest((signature or "").encode("utf-8"), expected.encode("utf-8"))


def parse_command(raw_text: str) -> CommandType:
    """Classify the slash-command text; anything but a help keyword searches."""
    text = (raw_text or "").strip().lower()
    if text in HELP_KEYWORDS:
        return "help"
    return "search"


def respond_to_url(
    response_url: str,
    message: Dict[str, Any],
    session: Optional[requests.Session] = None,
) -> bool:
    """
    Post a message to a slash command's response_url.

    Errors are logged, not raised: there is nobody left to report them to.

    Returns:
        True if Slack accepted the message
    """
    http = session or requests
    try:
        response = http.post(response_url, json=message, timeout=10)
    except requests.exceptions.RequestException as exc:
        logger.error("Slack respond error: %s", exc)
        return False

    if not response.ok:
        logger.error("Slack respond error: %s %s", response.status_code, response.text)
        return False

    return True
