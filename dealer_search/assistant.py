"""
Conversational shopping assistant with Claude.
Stateless: every call sends the full conversation and the visible cars.
"""

from typing import AsyncIterator, List, Optional

from anthropic import AsyncAnthropic

from dealer_search.config import require_anthropic_key, settings
from dealer_search.logging_config import get_structured_logger
from dealer_search.models import CarSummary, ChatMessage

logger = get_structured_logger(__name__)


class ShoppingAssistant:
    """Answer shopper questions about the cars on the results page."""

    PERSONA = """You are Toyo, a friendly, upbeat Toyota dealership assistant embedded in a results page.
Tone: warm, encouraging, and concise. Avoid jargon. Use short sentences.
Goal: help the user choose confidently. Celebrate good fits. Offer kind guidance.
Context: You only know the vehicles shown in this results page. If asked beyond this list, say you only know what's displayed and suggest adjusting filters.
Style:
- ALWAYS answer in one short paragraph (2-5 simple sentences). No bullet points unless explicitly requested.
- Act as a decisive expert. Do not explain definitions or teach concepts unless asked; focus on recommendations.
- Ask a gentle clarifying question when it helps them decide.
- Never make up specs not present; use what's in the list (year, model, price, mileage, fuel type, MPG, trim hints).
- Keep it positive and helpful."""

    ANSWER_POLICY = """Answer policy:
- Prioritize the user's needs (budget fit, fuel type, MPG, mileage, condition).
- Default to recommending the single best option right now; only ask a question if a critical detail is missing.
- Highlight key differences (trim, powertrain, MPG, price/mileage) briefly.
- Only discuss the vehicles listed above; suggest changing filters to see more.

Before asking a question, briefly acknowledge what the user already told you, then ask one short clarifying question to build on it."""

    FINALIZATION_RULE = (
        'Finalization rule: You have enough information. Now provide your final recommendation in one short '
        'paragraph. Start with "Best match:" and name the single best vehicle (or two only if it\'s a clear tie) '
        'from the list, with a brief reason. Do not ask more questions. Invite the user to view details next.'
    )

    PROGRESS_RULE = (
        "Progress rule: Keep the conversation brief. If you need exactly one more detail to make a strong "
        "recommendation, ask one short question. Otherwise, suggest your top pick now."
    )

    # user turns after which a final recommendation is demanded
    FINALIZE_AFTER_TURNS = 2

    def __init__(self, client: Optional[AsyncAnthropic] = None, temperature: float = 0.4):
        self._client = client
        self.model = settings.anthropic_model
        self.max_tokens = settings.max_tokens_generation
        self.temperature = temperature
        self.context_limit = settings.chat_context_limit

    @property
    def client(self) -> AsyncAnthropic:
        if self._client is None:
            self._client = AsyncAnthropic(api_key=require_anthropic_key())
        return self._client

    def build_system_context(self, original_query: str, cars: List[CarSummary], user_turns: int) -> str:
        """
        Build the system prompt for one call.

        Args:
            original_query: The shopper's original description
            cars: Visible cars, already capped
            user_turns: Number of user messages so far

        Returns:
            System prompt text
        """
        query_line = (
            f'User original description: "{original_query}"'
            if original_query
            else "User original description: (not provided)"
        )
        car_lines = "\n".join(
            f"{index}. {format_car_line(car)}" for index, car in enumerate(cars, start=1)
        )
        rule = self.FINALIZATION_RULE if user_turns >= self.FINALIZE_AFTER_TURNS else self.PROGRESS_RULE

        return (
            f"{self.PERSONA}\n\n{query_line}\n\n"
            f"Displayed vehicles ({len(cars)}):\n{car_lines}\n\n"
            f"{self.ANSWER_POLICY}\n\n{rule}"
        )

    def _prepare(self, history: List[ChatMessage], visible_cars: List[CarSummary], original_query: str):
        cars = list(visible_cars)[:self.context_limit]
        user_turns = sum(1 for message in history if message.role == "user")
        system = self.build_system_context(original_query or "", cars, user_turns)
        messages = [{"role": message.role, "content": message.content} for message in history]
        if not messages or messages[0]["role"] != "user":
            # the API requires the conversation to open with a user turn
            messages.insert(0, {"role": "user", "content": original_query or "Hi"})
        return system, messages

    async def reply(
        self,
        history: List[ChatMessage],
        visible_cars: List[CarSummary],
        original_query: str = ""
    ) -> str:
        """
        Generate one assistant reply.

        Raises:
            ConfigurationError: If no Anthropic API key is configured
            anthropic.APIError: If the call fails
        """
        client = self.client
        system, messages = self._prepare(history, visible_cars, original_query)

        response = await client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            system=system,
            messages=messages
        )

        reply = response.content[0].text
        logger.info("assistant_reply", turns=len(messages), cars=min(len(visible_cars), self.context_limit))
        return reply

    async def stream_reply(
        self,
        history: List[ChatMessage],
        visible_cars: List[CarSummary],
        original_query: str = ""
    ) -> AsyncIterator[str]:
        """
        Stream an assistant reply.

        Yields:
            Text chunks as they are generated
        """
        client = self.client
        system, messages = self._prepare(history, visible_cars, original_query)

        async with client.messages.stream(
            model=self.model,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            system=system,
            messages=messages
        ) as stream:
            async for text in stream.text_stream:
                if text:
                    yield text


def format_car_line(car: CarSummary) -> str:
    """One displayed car as a prompt line, e.g. "2024 Camry XLE: $28,500, New, hybrid, 52 MPG"."""
    name = car.name.replace(f"{car.year} {car.make} ", f"{car.year} ", 1)
    miles = f"{car.mileage:,} miles" if car.mileage > 0 else "New"
    parts = [f"${car.price:,.0f}", miles]
    if car.fuel_type:
        parts.append(car.fuel_type)
    if car.mpg:
        parts.append(f"{car.mpg} MPG")
    if car.specs.engine and car.specs.engine != "Unknown":
        parts.append(car.specs.engine)
    return f"{name}: {', '.join(parts)}"
