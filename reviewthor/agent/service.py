"""Review service: the language model behind the reviewer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

from strands import Agent
from strands.models import BedrockModel

from reviewthor.models.config import DEFAULT_MODEL_ID
from reviewthor.utils.logging import get_logger

if TYPE_CHECKING:
    from reviewthor.models.config import AppSettings

logger = get_logger("agent.service")


class ReviewServiceError(Exception):
    """Raised when the review service call itself fails."""

    pass


@dataclass
class MessageOptions:
    """Per-call generation options."""

    max_tokens: int = 4096
    temperature: float = 0.3
    stop_sequences: list[str] = field(default_factory=list)


@dataclass
class ServiceResponse:
    """Text returned by the review service."""

    content: str
    reasoning: str = ""


class ReviewService(Protocol):
    """Anything that can answer a single prompt."""

    def create_message(
        self, prompt: str, options: MessageOptions | None = None
    ) -> ServiceResponse: ...


def _extract_text(result: Any) -> tuple[str, str]:
    """Split an agent result into answer text and reasoning text."""
    message = getattr(result, "message", None)
    if not isinstance(message, dict):
        return str(result), ""

    texts: list[str] = []
    reasoning: list[str] = []
    for block in message.get("content", []):
        if "text" in block:
            texts.append(block["text"])
        elif "reasoningContent" in block:
            text = block["reasoningContent"].get("reasoningText", {}).get("text")
            if text:
                reasoning.append(text)

    return "\n".join(texts), "\n".join(reasoning)


class StrandsReviewService:
    """Review service backed by a Strands agent on Amazon Bedrock.

    Each call builds a fresh agent so no conversation history leaks
    between independent requests.
    """

    def __init__(self, model_id: str = DEFAULT_MODEL_ID) -> None:
        """Initialize the service.

        Args:
            model_id: Bedrock model ID.
        """
        self.model_id = model_id

    @classmethod
    def from_settings(cls, settings: AppSettings) -> StrandsReviewService:
        """Create the service from process settings."""
        return cls(model_id=settings.model_id)

    def _create_agent(self, options: MessageOptions) -> Agent:
        model_config: dict[str, Any] = {
            "model_id": self.model_id,
            "max_tokens": options.max_tokens,
            "temperature": options.temperature,
        }
        if options.stop_sequences:
            model_config["stop_sequences"] = list(options.stop_sequences)

        return Agent(model=BedrockModel(**model_config), callback_handler=None)

    def create_message(
        self, prompt: str, options: MessageOptions | None = None
    ) -> ServiceResponse:
        """Send one prompt and return the model's answer.

        Args:
            prompt: The full prompt.
            options: Generation options, defaults if omitted.

        Returns:
            ServiceResponse with the answer text.

        Raises:
            ReviewServiceError: If the model call fails.
        """
        options = options or MessageOptions()

        logger.debug(
            "Calling review service",
            extra={
                "model_id": self.model_id,
                "max_tokens": options.max_tokens,
                "prompt_chars": len(prompt),
            },
        )

        try:
            result = self._create_agent(options)(prompt)
        except Exception as e:
            raise ReviewServiceError(f"Review service error: {e}") from e

        content, reasoning = _extract_text(result)
        return ServiceResponse(content=content, reasoning=reasoning)
