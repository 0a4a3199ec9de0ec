"""
HTTP front end for the Slack slash command.
"""

import logging
from typing import Any, Callable, Dict, Optional

from fastapi import BackgroundTasks, FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from ..adapters.slack import SlashCommand, parse_command, respond_to_url, verify_slack_signature
from ..adapters.slack_blocks import build_free_slot_blocks, build_help_blocks
from ..config import AppConfig
from ..domain.exceptions import ConfigurationError
from ..services.free_time_finder import FreeTimeFinderService, build_service

logger = logging.getLogger(__name__)

Responder = Callable[[str, Dict[str, Any]], Any]

SEARCHING_TEXT = "空き時間を検索中..."
ERROR_TEXT = "エラーが発生しました。もう一度お試しください。"


def process_slash_command(
    command: SlashCommand,
    service: FreeTimeFinderService,
    responder: Responder = respond_to_url,
) -> None:
    """
    Do the actual work for a slash command and reply via its response_url.

    Runs after the HTTP response has been sent (Slack allows three seconds
    for the first reply).
    """
    try:
        if parse_command(command.text) == "help":
            responder(
                command.response_url,
                {"response_type": "ephemeral", "blocks": build_help_blocks()},
            )
            return

        slots = service.find_free_slots()
        responder(
            command.response_url,
            {"response_type": "in_channel", "blocks": build_free_slot_blocks(slots)},
        )
    except Exception:
        logger.exception("Error processing slash command")
        responder(command.response_url, {"response_type": "ephemeral", "text": ERROR_TEXT})


def create_app(
    config: AppConfig,
    service: Optional[FreeTimeFinderService] = None,
    responder: Responder = respond_to_url,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        config: Application configuration (Slack signing secret, calendars)
        service: Free-time service; built from config if omitted
        responder: Callable posting a message to a response_url

    Raises:
        ConfigurationError: If the signing secret is missing in production
    """
    signing_secret = config.slack.signing_secret
    if not signing_secret:
        if config.is_production():
            raise ConfigurationError("SLACK_SIGNING_SECRET is required in production")
        logger.warning("SLACK_SIGNING_SECRET is not set; every slash command will be rejected")

    finder = service or build_service(config)

    app = FastAPI(title="Calendar Slack Bot", docs_url=None, redoc_url=None)

    @app.post("/slack/command")
    async def slack_command(request: Request, background_tasks: BackgroundTasks):
        logger.info("Slash command received")

        signature = request.headers.get("x-slack-signature", "")
        timestamp = request.headers.get("x-slack-request-timestamp", "")
        body = await request.body()

        if not verify_slack_signature(signing_secret, signature, timestamp, body):
            logger.error("Invalid signature")
            return PlainTextResponse("Invalid signature", status_code=401)

        command = SlashCommand.from_form_body(body)
        logger.info("Command: %s Text: %s", command.command, command.text)

        background_tasks.add_task(process_slash_command, command, finder, responder)

        return JSONResponse({"response_type": "ephemeral", "text": SEARCHING_TEXT})

    @app.get("/health")
    async def health():
        return PlainTextResponse("OK")

    @app.get("/")
    async def root():
        return PlainTextResponse("Calendar Slack Bot - Free Time Finder")

    return app
