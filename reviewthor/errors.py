"""Error normalization at the pipeline boundary."""

import traceback
from dataclasses import dataclass
from enum import Enum

from github import GithubException

from reviewthor.agent.reviewer import InvalidResponseFormat
from reviewthor.agent.service import ReviewServiceError
from reviewthor.tools.comments import CommentPostError
from reviewthor.tools.github import GitHubToolError
from reviewthor.webhook.handler import WebhookParseError

UNKNOWN_ERROR_MESSAGE = "Unknown error"


class ErrorKind(str, Enum):
    """Where a failure came from."""

    VALIDATION = "validation"  # Bad input rejected before any external call
    CONTRACT = "contract"  # Review service broke its response contract
    TRANSPORT = "transport"  # GitHub or review service call failed
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class NormalizedError:
    """A caught failure in one uniform shape, ready for logging."""

    kind: ErrorKind
    message: str
    stack: str | None = None

    def to_log_fields(self) -> dict[str, str | None]:
        """Fields to pass as ``extra=`` when logging."""
        return {
            "error_kind": self.kind.value,
            "error": self.message,
            "stack": self.stack,
        }


_TRANSPORT_ERRORS: tuple[type[BaseException], ...] = (
    GitHubToolError,
    CommentPostError,
    ReviewServiceError,
    GithubException,
    ConnectionError,
    TimeoutError,
)


def classify_exception(error: BaseException) -> ErrorKind:
    """Map an exception to its error kind."""
    if isinstance(error, InvalidResponseFormat):
        return ErrorKind.CONTRACT
    if isinstance(error, _TRANSPORT_ERRORS):
        return ErrorKind.TRANSPORT
    if isinstance(error, (WebhookParseError, ValueError)):
        return ErrorKind.VALIDATION
    return ErrorKind.UNKNOWN


def normalize_error(value: object) -> NormalizedError:
    """Normalize anything that was caught into a NormalizedError.

    Values that are not exceptions carry no usable message or stack and
    become a generic unknown error.

    Args:
        value: The caught exception, or any other value.

    Returns:
        NormalizedError instance.
    """
    if not isinstance(value, BaseException):
        return NormalizedError(kind=ErrorKind.UNKNOWN, message=UNKNOWN_ERROR_MESSAGE)

    stack = "".join(traceback.format_exception(type(value), value, value.__traceback__))
    return NormalizedError(
        kind=classify_exception(value),
        message=str(value) or type(value).__name__,
        stack=stack,
    )
