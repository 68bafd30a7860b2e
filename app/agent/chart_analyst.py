"""Chart analyst: runs one encoded exchange against the vision provider."""

import logging

from app.agent.providers import AIProvider
from app.agent.prompts import get_system_prompt
from app.agent.response_resolver import Outcome, ParseError, RawText, Structured, resolve
from app.errors import UpstreamFailure
from app.models.request import ChartAnalysisRequest

logger = logging.getLogger(__name__)


class ChartAnalyst:
    """Sends encoded chart requests to a provider and resolves the replies.

    The provider handle is injected; the analyst keeps no conversation state.
    """

    def __init__(self, provider: AIProvider):
        self.provider = provider

    async def analyze(self, request: ChartAnalysisRequest) -> Outcome:
        """Run one exchange.

        Args:
            request: Encoded request from the turn encoder

        Returns:
            Structured, RawText or ParseError outcome

        Raises:
            UpstreamFailure: If the provider call fails
        """
        logger.info(
            f"Chart analysis via {self.provider.name}: "
            f"{request.history_turns} prior turn(s), {len(request.image.data)} image bytes"
        )

        try:
            response = await self.provider.analyze_image(
                image_base64=request.image.to_base64(),
                prompt=request.prompt,
                media_type=request.image.media_type,
                system=get_system_prompt(request.is_first_turn),
                model_type="planning" if request.is_first_turn else "fast",
            )
        except Exception as e:
            raise UpstreamFailure(
                f"{self.provider.name} vision call failed: {type(e).__name__}",
                provider=self.provider.name,
            ) from e

        if response.usage:
            logger.debug(f"{self.provider.name} usage: {response.usage}")

        outcome = resolve(response.content)
        if isinstance(outcome, Structured):
            logger.info("Resolved structured chart analysis")
        elif isinstance(outcome, RawText):
            logger.info(f"Resolved raw text answer ({len(outcome.text)} chars)")
        elif isinstance(outcome, ParseError):
            logger.warning(f"Structured span did not parse: {outcome.reason}")
        return outcome
