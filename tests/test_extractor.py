"""
Tests for natural-language filter extraction.
"""

from unittest.mock import Mock, patch

import httpx
import pytest
from anthropic import APIConnectionError

from dealer_search.config import ConfigurationError, settings
from dealer_search.extractor import FilterExtractor, parse_filters, strip_code_fences
from dealer_search.models import NumericRange, SearchFilters


@pytest.mark.asyncio
async def test_extract_filters(mock_anthropic_client):
    mock_anthropic_client.messages.create.return_value = Mock(content=[Mock(text=(
        '```json\n{"models": ["RAV4", "Highlander"], "priceRange": {"min": 25000, "max": 40000}, '
        '"condition": "Used", "fuelType": "hybrid"}\n```'
    ))])
    extractor = FilterExtractor(client=mock_anthropic_client)

    filters = await extractor.extract_filters("a used hybrid SUV for a family, 25-40k")

    assert filters.models == ["RAV4", "Highlander"]
    assert filters.price_range == NumericRange(min=25000, max=40000)
    assert filters.condition == "used"
    assert filters.fuel_type == "hybrid"

    kwargs = mock_anthropic_client.messages.create.call_args.kwargs
    assert kwargs["system"] == FilterExtractor.SYSTEM_PROMPT
    assert kwargs["messages"] == [{"role": "user", "content": "a used hybrid SUV for a family, 25-40k"}]


@pytest.mark.asyncio
async def test_extract_filters_api_error_gives_empty_filters(mock_anthropic_client):
    mock_anthropic_client.messages.create.side_effect = APIConnectionError(
        request=httpx.Request("POST", "https://api.anthropic.com/v1/messages")
    )
    extractor = FilterExtractor(client=mock_anthropic_client)

    filters = await extractor.extract_filters("anything")

    assert filters.is_empty()


@pytest.mark.asyncio
async def test_missing_api_key_is_a_configuration_error():
    extractor = FilterExtractor()

    with patch.object(settings, "anthropic_api_key", ""):
        with pytest.raises(ConfigurationError):
            await extractor.extract_filters("a red Camry")


@pytest.mark.parametrize("output", [
    "I could not understand that.",
    "{not json}",
    "[1, 2, 3]",
    '"just a string"',
    '{"year": "last year"}',
    '{"condition": "certified"}',
    "",
])
def test_unusable_output_gives_empty_filters(output):
    assert parse_filters(output).is_empty()


def test_parse_filters_with_surrounding_prose():
    filters = parse_filters('Here are the filters: {"model": "Tacoma", "color": "red"} Hope that helps!')

    assert filters.model == "Tacoma"
    assert filters.color == "red"


def test_parse_filters_ignores_unknown_keys_and_blanks():
    filters = parse_filters('{"model": "Camry", "sunroof": true, "color": "  ", "options": ["", "AWD"]}')

    assert filters.model == "Camry"
    assert filters.color is None
    assert filters.options == ["AWD"]


def test_reversed_range_is_swapped():
    filters = parse_filters('{"priceRange": {"min": 40000, "max": 30000}}')
    assert filters.price_range == NumericRange(min=30000, max=40000)


def test_strip_code_fences():
    assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fences('```\n{"a": 1}```') == '{"a": 1}'
    assert strip_code_fences('{"a": 1}') == '{"a": 1}'


def test_empty_filters_have_no_constraints():
    assert SearchFilters().is_empty()
    assert not SearchFilters(model="Camry").is_empty()
