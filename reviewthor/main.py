"""Lambda entry point for the reviewthor webhook responder."""

from __future__ import annotations

import base64
import json
import random
import string
import time
from collections.abc import Mapping
from typing import Any

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from reviewthor import __version__
from reviewthor.errors import normalize_error
from reviewthor.pipeline import handle_pull_request
from reviewthor.utils.config_loader import load_settings
from reviewthor.utils.logging import configure_logging, get_logger, with_correlation_id
from reviewthor.webhook.handler import WebhookHandler, classify_event
from reviewthor.webhook.validators import verify_webhook_signature

# Configure logging on module load
configure_logging()
logger = get_logger("main")

# Only these GitHub event types reach the classifier
ACCEPTED_EVENT_TYPES = frozenset({"pull_request", "pull_request_review"})

_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_correlation_id() -> str:
    """Generate a correlation ID for deliveries without one."""
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"rev-{int(time.time() * 1000)}-{suffix}"


def process_webhook(body: bytes | None, headers: Mapping[str, str]) -> tuple[int, str]:  # noqa: PLR0911
    """Verify, classify and route one webhook delivery.

    Pipeline failures are logged and swallowed by the pipeline itself, so a
    verified and classified pull request event always answers 200.

    Args:
        body: Raw request body.
        headers: Request headers.

    Returns:
        Tuple of HTTP status code and response message.
    """
    headers = {k.lower(): v for k, v in headers.items()}
    correlation_id = headers.get("x-github-delivery") or generate_correlation_id()
    event_type = headers.get("x-github-event", "")
    signature = headers.get("x-hub-signature-256", "")
    log = with_correlation_id(logger, correlation_id)

    log.info("Webhook received", extra={"event_type": event_type})

    try:
        if not body:
            log.warning("Missing request body")
            return 400, "Missing request body"

        if not signature:
            log.warning("Missing signature header")
            return 401, "Invalid signature"

        if not event_type:
            log.warning("Missing event type header")
            return 400, "Missing event type"

        if event_type not in ACCEPTED_EVENT_TYPES:
            log.info("Ignoring non-pull request event", extra={"event_type": event_type})
            return 200, "Event ignored"

        settings = load_settings()
        if not settings.github_webhook_secret:
            log.error("GITHUB_WEBHOOK_SECRET not configured")
            return 500, "Webhook secret not configured"

        if not verify_webhook_signature(body, signature, settings.github_webhook_secret):
            log.warning("Invalid webhook signature")
            return 401, "Invalid signature"

        try:
            payload = json.loads(body)
        except json.JSONDecodeError as e:
            log.warning("Invalid JSON payload", extra={"error": str(e)})
            return 400, "Invalid JSON payload"

        event = classify_event(payload)
        handler = WebhookHandler.for_pull_requests(
            lambda evt: handle_pull_request(evt, correlation_id, settings)
        )
        handler.route(event)

        log.info(
            "Webhook processed successfully",
            extra={"event": event.kind.value, "repository": event.repository.full_name},
        )
        return 200, "OK"

    except Exception as e:
        log.error("Error processing webhook", extra=normalize_error(e).to_log_fields())
        return 500, "Internal server error"


def _create_response(status_code: int, body: dict[str, Any]) -> dict[str, Any]:
    """Create a Lambda response.

    Args:
        status_code: HTTP status code.
        body: Response body dictionary.

    Returns:
        Lambda response dictionary.
    """
    return {
        "statusCode": status_code,
        "headers": {
            "Content-Type": "application/json",
        },
        "body": json.dumps(body),
    }


def _get_body(event: Mapping[str, Any]) -> bytes | None:
    body = event.get("body")
    if body is None:
        return None
    if event.get("isBase64Encoded"):
        return base64.b64decode(body)
    return body.encode() if isinstance(body, str) else body


def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:  # noqa: ARG001
    """AWS Lambda handler for webhook requests.

    Args:
        event: Lambda event from API Gateway.
        context: Lambda context (unused but required by AWS Lambda).

    Returns:
        Lambda response dictionary.
    """
    path = event.get("path", "")
    method = event.get("httpMethod", "")

    if path == "/health" and method == "GET":
        return _create_response(200, {"status": "healthy", "version": __version__})

    if path == "/webhook" and method == "POST":
        status_code, message = process_webhook(_get_body(event), event.get("headers") or {})
        return _create_response(status_code, {"message": message})

    return _create_response(404, {"message": f"Path not found: {method} {path}"})


async def webhook_route(request: Request) -> JSONResponse:
    """Handle webhook requests for local development."""
    status_code, message = process_webhook(await request.body(), request.headers)
    return JSONResponse(content={"message": message}, status_code=status_code)


async def health_route(request: Request) -> JSONResponse:
    """Handle health check requests for local development."""
    del request  # unused but required by Starlette routing
    return JSONResponse(content={"status": "healthy", "version": __version__})


def create_app() -> Starlette:
    """Create the Starlette app used for local runs."""
    return Starlette(
        routes=[
            Route("/webhook", webhook_route, methods=["POST"]),
            Route("/health", health_route, methods=["GET"]),
        ]
    )


# For local development
if __name__ == "__main__":
    import uvicorn

    print(f"Starting reviewthor v{__version__} on http://localhost:8000")
    uvicorn.run(create_app(), host="0.0.0.0", port=8000)
