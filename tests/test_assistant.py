"""
Tests for the conversational shopping assistant.
"""

from unittest.mock import Mock, patch

import pytest

from dealer_search.assistant import ShoppingAssistant, format_car_line
from dealer_search.config import ConfigurationError, settings
from dealer_search.models import ChatMessage


@pytest.mark.asyncio
async def test_reply_sends_visible_cars(mock_anthropic_client, sample_cars):
    mock_anthropic_client.messages.create.return_value = Mock(
        content=[Mock(text="The 2024 Camry LE is a great fit!")]
    )
    assistant = ShoppingAssistant(client=mock_anthropic_client)
    history = [ChatMessage(role="user", content="Which one is best for commuting?")]

    reply = await assistant.reply(history, sample_cars, "an efficient commuter car")

    assert reply == "The 2024 Camry LE is a great fit!"
    kwargs = mock_anthropic_client.messages.create.call_args.kwargs
    assert 'User original description: "an efficient commuter car"' in kwargs["system"]
    assert f"Displayed vehicles ({len(sample_cars)})" in kwargs["system"]
    assert "2021 Camry LE" in kwargs["system"]
    assert kwargs["messages"] == [{"role": "user", "content": "Which one is best for commuting?"}]


@pytest.mark.asyncio
async def test_context_is_capped(mock_anthropic_client, sample_cars):
    assistant = ShoppingAssistant(client=mock_anthropic_client)
    assistant.context_limit = 2

    await assistant.reply([ChatMessage(role="user", content="hi")], sample_cars, "")

    system = mock_anthropic_client.messages.create.call_args.kwargs["system"]
    assert "Displayed vehicles (2)" in system
    assert "User original description: (not provided)" in system
    assert "\n3. " not in system


def test_finalization_rule_after_two_user_turns(sample_cars):
    assistant = ShoppingAssistant(client=Mock())

    early = assistant.build_system_context("q", sample_cars, user_turns=1)
    late = assistant.build_system_context("q", sample_cars, user_turns=2)

    assert "Progress rule" in early and "Best match:" not in early
    assert "Finalization rule" in late and "Best match:" in late


def test_conversation_must_open_with_user_turn(sample_cars):
    assistant = ShoppingAssistant(client=Mock())
    history = [ChatMessage(role="assistant", content="Hi! How can I help?")]

    _, messages = assistant._prepare(history, sample_cars, "a truck")

    assert messages[0] == {"role": "user", "content": "a truck"}
    assert messages[1]["role"] == "assistant"


def test_format_car_line(sample_cars):
    used_camry = next(car for car in sample_cars if car.id == "camry-used")
    assert format_car_line(used_camry) == "2021 Camry LE: $29,900, 42,000 miles, gasoline, 34 MPG, 2.5L I4"

    new_corolla = next(car for car in sample_cars if car.id == "corolla-new")
    assert "New" in format_car_line(new_corolla)


@pytest.mark.asyncio
async def test_stream_reply_yields_chunks(sample_cars):
    class FakeStream:
        async def __aenter__(self):
            return self

        async def __aexit__(self, *exc):
            return False

        @property
        def text_stream(self):
            async def chunks():
                for text in ["Best ", "", "match: ", "Camry"]:
                    yield text
            return chunks()

    client = Mock()
    client.messages.stream = Mock(return_value=FakeStream())
    assistant = ShoppingAssistant(client=client)

    history = [ChatMessage(role="user", content="a"), ChatMessage(role="user", content="b")]
    chunks = [chunk async for chunk in assistant.stream_reply(history, sample_cars, "")]

    assert chunks == ["Best ", "match: ", "Camry"]
    assert "Finalization rule" in client.messages.stream.call_args.kwargs["system"]


@pytest.mark.asyncio
async def test_missing_api_key_is_a_configuration_error(sample_cars):
    assistant = ShoppingAssistant()

    with patch.object(settings, "anthropic_api_key", ""):
        with pytest.raises(ConfigurationError):
            await assistant.reply([ChatMessage(role="user", content="hi")], sample_cars, "")
