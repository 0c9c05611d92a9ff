"""Flashcard generation from source text using pydantic-ai.

The model is asked for a bare JSON array and its free-text answer goes
through ``GeneratedCardParser``; the agent itself returns plain ``str`` so
fenced or slightly malformed output can still be recovered. Imports for the
LLM provider are kept lazy to avoid import-time errors when credentials are
missing.
"""

from __future__ import annotations

from typing import Optional, Protocol

from pydantic_ai import Agent

from flashdeck.core.config import settings
from flashdeck.core.errors import CompletionError
from flashdeck.core.logging import get_logger
from flashdeck.modules.flashcards.models import GeneratedCard
from flashdeck.modules.flashcards.parser import GeneratedCardParser

logger = get_logger(__name__)


SYSTEM_PROMPT = "You are an assistant that generates flashcards in JSON format."


def build_prompt(text: str) -> str:
    return (
        "You are an assistant generating flashcards (question/answer pairs) from text.\n"
        "Create flashcards with a clear question and a concise answer based ONLY on the provided text.\n"
        'Output ONLY a valid JSON array of objects, where each object has ONLY a "question" (string) '
        'key and an "answer" (string) key.\n'
        "Ensure questions and answers are distinct and meaningful for learning.\n"
        'Example: [{"question": "Example Q1?", "answer": "Example A1."}, '
        '{"question": "Example Q2?", "answer": "Example A2."}]\n\n'
        "Generate flashcards from the following text:\n"
        "---\n"
        f"{text}\n"
        "---\n"
    )


def _build_google_model():
    """Build the Google Gemini model provider (lazy import)."""
    from pydantic_ai.models.google import GoogleModel
    from pydantic_ai.providers.google import GoogleProvider

    provider = GoogleProvider(api_key=settings.generation.gemini_api_key)
    return GoogleModel(settings.generation.gemini_model, provider=provider)


def _build_openrouter_model():
    """Build the OpenRouter model via the OpenAI-compatible provider (lazy import)."""
    from pydantic_ai.models.openai import OpenAIChatModel
    from pydantic_ai.providers.openai import OpenAIProvider

    if not settings.generation.openrouter_api_key:
        raise CompletionError(
            "OpenRouter API key not configured. Set OPENROUTER_API_KEY in your environment."
        )

    provider = OpenAIProvider(
        api_key=settings.generation.openrouter_api_key,
        base_url="https://openrouter.ai/api/v1",
    )
    return OpenAIChatModel(settings.generation.openrouter_model, provider=provider)


def build_model_by_settings():
    """Return a pydantic-ai Model based on configured provider selection."""
    provider = (settings.generation.model_provider or "google").lower()
    if provider == "openrouter":
        return _build_openrouter_model()
    return _build_google_model()


class CompletionClient(Protocol):
    async def complete(self, prompt: str) -> str: ...


class AgentCompletionClient:
    """Free-text completion through a pydantic-ai agent."""

    def __init__(self, model=None, *, retries: Optional[int] = None) -> None:
        self._model = model
        self.retries = settings.generation.retries if retries is None else retries
        self._agent: Optional[Agent[None, str]] = None

    @property
    def agent(self) -> Agent[None, str]:
        if self._agent is None:
            self._agent = Agent[None, str](
                model=self._model or build_model_by_settings(),
                output_type=str,
                system_prompt=SYSTEM_PROMPT,
                retries=self.retries,
            )
        return self._agent

    async def complete(self, prompt: str) -> str:
        logger.info("Sending completion request (%d chars)", len(prompt))
        try:
            res = await self.agent.run(prompt)
        except CompletionError:
            raise
        except Exception as e:
            logger.error(f"Completion provider failed: {e}")
            raise CompletionError(f"AI completion call failed: {e}") from e
        logger.debug("Raw completion: %s", res.output)
        return res.output


async def generate_cards(
    text: str,
    client: CompletionClient,
    parser: Optional[GeneratedCardParser] = None,
) -> list[GeneratedCard]:
    """Ask the completion client for cards about ``text`` and parse its answer."""
    parser = parser or GeneratedCardParser()
    raw = await client.complete(build_prompt(text))
    return parser.parse(raw)


def get_completion_client() -> CompletionClient:
    """FastAPI dependency; tests override it with a canned client."""
    return AgentCompletionClient()
