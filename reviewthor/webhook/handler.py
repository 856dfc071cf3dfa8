"""Webhook event classification and dispatch."""

from collections.abc import Callable, Mapping
from typing import Any, ClassVar

from reviewthor.models.event import EventKind, Repository, WebhookEvent
from reviewthor.utils.logging import get_logger

logger = get_logger("webhook.handler")

EventHandler = Callable[[WebhookEvent], None]


class WebhookParseError(Exception):
    """Raised when a webhook payload cannot be classified."""

    pass


class MissingFieldError(WebhookParseError):
    """Raised when a payload lacks the installation or repository fields."""

    pass


class UnsupportedEventError(WebhookParseError):
    """Raised when a payload is not one of the supported events."""

    pass


# Pull request actions that trigger a review
REVIEW_ACTIONS = frozenset({"opened", "synchronize", "reopened"})


def _get_object(payload: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = payload.get(key)
    return value if isinstance(value, Mapping) else {}


def _determine_kind(payload: Mapping[str, Any]) -> EventKind:
    action = payload.get("action")
    if not isinstance(action, str):
        action = None

    if isinstance(payload.get("pull_request"), Mapping) and action in REVIEW_ACTIONS:
        return EventKind(f"pull_request.{action}")

    if isinstance(payload.get("review"), Mapping) and action == "submitted":
        return EventKind.REVIEW_SUBMITTED

    raise UnsupportedEventError(f"Unsupported event type: {action or 'unknown'}")


def classify_event(payload: Any) -> WebhookEvent:
    """Classify a webhook payload into one of the supported events.

    Args:
        payload: The parsed webhook payload.

    Returns:
        WebhookEvent instance.

    Raises:
        MissingFieldError: If the installation ID or repository is missing.
        UnsupportedEventError: If the payload is not a supported event.
    """
    if not isinstance(payload, Mapping):
        raise MissingFieldError("Missing installation ID")

    installation_id = _get_object(payload, "installation").get("id")
    if not installation_id:
        raise MissingFieldError("Missing installation ID")

    repository = _get_object(payload, "repository")
    name = repository.get("name")
    owner = _get_object(repository, "owner").get("login")
    if not name or not owner:
        raise MissingFieldError("Missing repository information")

    kind = _determine_kind(payload)

    try:
        return WebhookEvent(
            kind=kind,
            repository=Repository(owner=str(owner), name=str(name)),
            installation_id=int(installation_id),
            payload=dict(payload),
        )
    except (TypeError, ValueError) as e:
        raise MissingFieldError(f"Invalid installation ID: {installation_id!r}") from e


class WebhookHandler:
    """Routes classified events through a dispatch table.

    The table is fixed at construction; event kinds without an entry are
    accepted and not acted upon.
    """

    PULL_REQUEST_KINDS: ClassVar[tuple[EventKind, ...]] = (
        EventKind.PR_OPENED,
        EventKind.PR_SYNCHRONIZE,
        EventKind.PR_REOPENED,
    )

    def __init__(self, handlers: Mapping[EventKind, EventHandler] | None = None) -> None:
        """Initialize the handler.

        Args:
            handlers: Mapping of event kind to the function that handles it.
        """
        self._handlers: dict[EventKind, EventHandler] = dict(handlers or {})

    @classmethod
    def for_pull_requests(cls, handler: EventHandler) -> "WebhookHandler":
        """Build a handler routing the pull request lifecycle events to one function.

        Review-submitted events are deliberately left unrouted.

        Args:
            handler: Function invoked for opened, synchronize and reopened events.

        Returns:
            WebhookHandler instance.
        """
        return cls({kind: handler for kind in cls.PULL_REQUEST_KINDS})

    def handles(self, kind: EventKind) -> bool:
        """Check if an event kind has a handler."""
        return kind in self._handlers

    def route(self, event: WebhookEvent) -> bool:
        """Invoke the handler registered for an event's kind.

        Args:
            event: The classified event.

        Returns:
            True if a handler ran, False if the event was ignored.
        """
        handler = self._handlers.get(event.kind)

        if handler is None:
            logger.info(
                "No handler for event",
                extra={"event": event.kind.value, "repository": event.repository.full_name},
            )
            return False

        handler(event)
        return True
