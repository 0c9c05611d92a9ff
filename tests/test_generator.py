"""Tests for prompt building and the completion clients."""

import pytest
from pydantic_ai.messages import ModelMessage, ModelResponse, TextPart
from pydantic_ai.models.function import AgentInfo, FunctionModel
from pydantic_ai.models import test as stub_models

from flashdeck.core.errors import CompletionError
from flashdeck.modules.flashcards.generator import (
    AgentCompletionClient,
    build_prompt,
    generate_cards,
)
from flashdeck.modules.flashcards.parser import ParseError

from conftest import FakeCompletion


SOURCE = "Mitochondria are membrane-bound organelles that produce ATP for the cell."


def test_prompt_embeds_source_text() -> None:
    prompt = build_prompt(SOURCE)
    assert f"---\n{SOURCE}\n---" in prompt
    assert '"question"' in prompt and '"answer"' in prompt


class TestAgentCompletionClient:
    """Test suite for the pydantic-ai backed completion client."""

    async def test_returns_raw_text(self) -> None:
        raw = '```json\n[{"question": "What do mitochondria make?", "answer": "ATP"}]\n```'
        client = AgentCompletionClient(stub_models.TestModel(custom_output_text=raw))
        assert await client.complete(build_prompt(SOURCE)) == raw

    async def test_provider_failure_is_wrapped(self) -> None:
        def boom(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
            raise RuntimeError("rate limited")

        client = AgentCompletionClient(FunctionModel(boom))
        with pytest.raises(CompletionError) as exc_info:
            await client.complete("prompt")
        assert "rate limited" in exc_info.value.message

    async def test_prompt_reaches_model(self) -> None:
        seen: list[str] = []

        def echo(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
            for message in messages:
                for part in message.parts:
                    content = getattr(part, "content", None)
                    if isinstance(content, str):
                        seen.append(content)
            return ModelResponse(parts=[TextPart("[]")])

        client = AgentCompletionClient(FunctionModel(echo))
        assert await client.complete("generate please") == "[]"
        assert "generate please" in seen
        assert any("JSON format" in s for s in seen)


class TestGenerateCards:
    """Test suite for generate_cards."""

    async def test_parses_completion(self) -> None:
        completion = FakeCompletion(
            '[{"question": "What do mitochondria make?", "answer": "ATP"}]'
        )
        cards = await generate_cards(SOURCE, completion)
        assert [c.answer for c in cards] == ["ATP"]
        assert SOURCE in completion.prompts[0]

    async def test_bad_completion_raises_parse_error(self) -> None:
        with pytest.raises(ParseError):
            await generate_cards(SOURCE, FakeCompletion("Sorry, I can't help with that."))
