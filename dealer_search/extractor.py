"""
Natural-language filter extraction with Claude.
Turns a free-text vehicle description into SearchFilters.
"""

import json
import re
from typing import Any, Optional

from anthropic import APIError, AsyncAnthropic
from pydantic import ValidationError

from dealer_search.config import require_anthropic_key, settings
from dealer_search.logging_config import get_structured_logger
from dealer_search.models import SearchFilters

logger = get_structured_logger(__name__)

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


class FilterExtractor:
    """Extract structured search filters from a description."""

    SYSTEM_PROMPT = """You convert car shoppers' descriptions into search filters for a Toyota dealership inventory.

Respond with a single JSON object and nothing else. Use only these keys and omit any key the description does not imply:
- "models": array of Toyota model names, best fit first (e.g. ["RAV4", "Highlander"])
- "priceRange": {"min": number, "max": number}
- "priceRanges": array of {"min": number, "max": number} when several budgets are acceptable
- "year": number
- "condition": "new", "used" or "both"
- "mileage": {"min": number, "max": number}
- "color": exterior color
- "fuelType": "gasoline", "hybrid" or "electric"
- "bodyStyle": e.g. "SUV", "Sedan", "Truck", "Minivan"
- "interiorColor", "interiorMaterial", "transmission", "engine", "driveLine": strings
- "options": array of feature names
- "highwayMpg", "cityMpg", "overallMpg": minimum fuel economy numbers
- "vehicleStatus": "In Stock", "In Transit" or "Build Phase"

Rules:
- Never invent constraints the shopper did not express.
- When a use case is described instead of a model, suggest up to four suitable models.
- Prices and mileage are plain numbers without currency symbols or commas."""

    def __init__(self, client: Optional[AsyncAnthropic] = None):
        """
        Initialize the extractor.

        Args:
            client: Anthropic client; built from settings on first use when omitted
        """
        self._client = client
        self.model = settings.anthropic_model
        self.max_tokens = settings.max_tokens_extraction

    @property
    def client(self) -> AsyncAnthropic:
        if self._client is None:
            self._client = AsyncAnthropic(api_key=require_anthropic_key())
        return self._client

    async def extract_filters(self, description: str) -> SearchFilters:
        """
        Extract filters from a description.

        Args:
            description: Free-text vehicle description

        Returns:
            Validated SearchFilters; empty when the model output is unusable

        Raises:
            ConfigurationError: If no Anthropic API key is configured
        """
        client = self.client

        try:
            response = await client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=0,
                system=self.SYSTEM_PROMPT,
                messages=[{"role": "user", "content": description}]
            )
        except APIError as e:
            logger.warning("filter_extraction_request_failed", error=str(e))
            return SearchFilters()

        text = response.content[0].text if response.content else ""
        filters = parse_filters(text)
        logger.info("filters_extracted", filters=filters.model_dump(exclude_none=True, by_alias=True))
        return filters


def strip_code_fences(text: str) -> str:
    return _FENCE_RE.sub("", text.strip())


def _first_json_object(text: str) -> Any:
    try:
        return json.loads(text)
    except ValueError:
        pass
    # prose around the object
    start = text.find("{")
    if start < 0:
        raise ValueError("no JSON object in model output")
    obj, _ = json.JSONDecoder().raw_decode(text[start:])
    return obj


def parse_filters(text: str) -> SearchFilters:
    """
    Parse model output into SearchFilters.
    Anything that is not a schema-valid JSON object yields empty filters.
    """
    try:
        data = _first_json_object(strip_code_fences(text or ""))
    except ValueError as e:
        # json.JSONDecodeError is a ValueError
        logger.warning("filter_extraction_unparseable", error=str(e), output=(text or "")[:200])
        return SearchFilters()

    if not isinstance(data, dict):
        logger.warning("filter_extraction_not_an_object", output=(text or "")[:200])
        return SearchFilters()

    try:
        return SearchFilters.model_validate(data)
    except ValidationError as e:
        logger.warning("filter_extraction_invalid", errors=e.errors(include_url=False))
        return SearchFilters()
