"""Gemini response generator.

Sends the user's message, preceded by a fixed sales-agent preamble, to the
Gemini API in a single request. Callers always receive a string: failures
are mapped to fixed apology texts.
"""

from __future__ import annotations

import logging

from google import genai

from src.webhook.models import FallbackReason, GenerationResult

logger = logging.getLogger(__name__)

EMPTY_RESPONSE_TEXT = "Sorry, I could not generate a response right now."
SERVICE_ERROR_TEXT = (
    "Sorry, I'm having technical difficulties processing your request right now. "
    "Please try again later."
)

SYSTEM_INSTRUCTIONS = """\
You are a friendly, helpful sales agent and an expert in digital services for JYJ Digital Solutions.
Your main goal is to understand the digital problem the customer describes and propose the specific \
JYJ Digital Solutions services that can solve it, explaining the benefit for the customer.

ABOUT OUR SERVICES:
- Web development: websites and online stores for businesses that have no digital presence or an \
outdated one. Includes design, hosting and maintenance. The customer gains visibility and sales channels.
- Digital marketing: social media management, paid campaigns and SEO for businesses that struggle to \
attract customers online. The customer gets more qualified leads.
- Process automation: chatbots, integrations and internal tools for teams losing time on repetitive \
work. The customer saves time and reduces errors.
- Digital transformation consulting: assessment and roadmap for companies that do not know where to \
start. The customer gets a clear, prioritized plan.

ADDITIONAL INSTRUCTIONS:
- Keep answers concise and to the point.
- Use a professional but approachable tone.
- Always connect the proposed solution directly to ONE OR MORE of the services above.
- If the problem described is very general or does not clearly fit a service, ask a kind clarifying \
question to better understand the need.
- If the customer asks to talk to a human, uses words like "agent", "person" or "call", or asks \
something you cannot answer with the service information, kindly tell them their request will be \
passed to a human specialist who will contact them soon. DO NOT invent information about services \
we do not offer.
- Avoid generic answers; refer to the specific problem the user mentioned.
"""


class ResponseGenerator:
    """Wraps a Gemini client for one-shot reply generation."""

    def __init__(
        self,
        client: genai.Client,
        model: str,
        instructions: str = SYSTEM_INSTRUCTIONS,
    ) -> None:
        self._client = client
        self._model = model
        self._instructions = instructions

    @classmethod
    def from_api_key(cls, api_key: str, model: str) -> ResponseGenerator:
        return cls(genai.Client(api_key=api_key), model)

    async def generate(self, user_text: str) -> GenerationResult:
        """Run one generation request and classify the outcome."""
        try:
            response = await self._client.aio.models.generate_content(
                model=self._model,
                contents=[self._instructions, user_text],
            )
            text = response.text
        except Exception:  # SDK surfaces network, auth and quota errors differently
            logger.exception("Gemini request failed")
            return GenerationResult(
                text=SERVICE_ERROR_TEXT, fallback=FallbackReason.SERVICE_ERROR,
            )

        if not text:
            logger.warning("Gemini returned no text")
            return GenerationResult(
                text=EMPTY_RESPONSE_TEXT, fallback=FallbackReason.EMPTY_RESPONSE,
            )
        return GenerationResult(text=text)

    async def reply(self, user_text: str) -> str:
        """Return the reply text for ``user_text``; never raises."""
        return (await self.generate(user_text)).text
