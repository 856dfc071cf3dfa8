"""Amazon Bedrock AgentCore Runtime entrypoint for reviewthor.

This module provides the AgentCore-compatible entrypoint for deploying
reviewthor as a Bedrock AgentCore agent. It handles:
- GitHub webhook deliveries forwarded in an invocation envelope
- explanation requests for a single review finding
- health checks via /ping endpoint
"""

from __future__ import annotations

from typing import Any

from bedrock_agentcore.runtime import BedrockAgentCoreApp, PingStatus

from reviewthor.agent.reviewer import ReviewOrchestrator
from reviewthor.agent.service import StrandsReviewService
from reviewthor.errors import normalize_error
from reviewthor.main import process_webhook
from reviewthor.models.finding import Finding
from reviewthor.utils.config_loader import load_settings
from reviewthor.utils.logging import configure_logging, get_logger

# Configure logging
configure_logging()
logger = get_logger("agentcore")

# Create AgentCore application
app = BedrockAgentCoreApp()


def handle_webhook(
    body: bytes,
    signature: str,
    event_type: str,
    delivery_id: str,
) -> dict[str, Any]:
    """Handle a GitHub webhook delivery forwarded by the runtime.

    Args:
        body: Raw request body bytes.
        signature: X-Hub-Signature-256 header value.
        event_type: X-GitHub-Event header value.
        delivery_id: X-GitHub-Delivery header value.

    Returns:
        Dictionary with ``status_code`` and ``message``.
    """
    headers = {
        "X-Hub-Signature-256": signature,
        "X-GitHub-Event": event_type,
    }
    if delivery_id:
        headers["X-GitHub-Delivery"] = delivery_id

    status_code, message = process_webhook(body, headers)
    return {"status_code": status_code, "message": message}


def explain_finding(finding_data: dict[str, Any]) -> dict[str, Any]:
    """Explain a single review finding.

    Args:
        finding_data: Finding in the review response format.

    Returns:
        Dictionary with the explanation under ``result``.
    """
    finding = Finding.from_dict(finding_data)
    service = StrandsReviewService.from_settings(load_settings())

    logger.info(
        "Explaining finding",
        extra={"file": finding.file, "line": finding.line, "category": finding.category},
    )

    return {"result": ReviewOrchestrator(service).explain_reasoning(finding)}


@app.entrypoint
def invoke(payload: dict[str, Any]) -> dict[str, Any]:
    """Main entrypoint for AgentCore invocations.

    Args:
        payload: Request payload containing either:
            - webhook_body: Raw webhook body, with webhook_signature,
              webhook_event_type and webhook_delivery_id
            - finding: A review finding to explain

    Returns:
        Dictionary with the outcome of the request.
    """
    webhook_body = payload.get("webhook_body")
    if webhook_body:
        body_bytes = webhook_body.encode() if isinstance(webhook_body, str) else webhook_body
        return handle_webhook(
            body=body_bytes,
            signature=payload.get("webhook_signature", ""),
            event_type=payload.get("webhook_event_type", ""),
            delivery_id=payload.get("webhook_delivery_id", ""),
        )

    finding_data = payload.get("finding")
    if isinstance(finding_data, dict):
        try:
            return explain_finding(finding_data)
        except Exception as e:
            error = normalize_error(e)
            logger.error("Explanation failed", extra=error.to_log_fields())
            return {"error": error.message, "error_kind": error.kind.value}

    logger.warning("Unsupported invocation", extra={"keys": sorted(payload)})
    return {"error": "Unsupported invocation: expected webhook_body or finding"}


@app.ping
def ping() -> PingStatus:
    """Health check endpoint for AgentCore Runtime.

    Returns:
        PingStatus indicating the agent's health.
    """
    return PingStatus.HEALTHY


# For local development and testing
if __name__ == "__main__":
    app.run()
