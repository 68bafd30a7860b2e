"""Client-side conversation session about one chart image.

State machine::

    EMPTY --load_image--> IDLE --submit--> SENDING --reply/failure--> IDLE
      ^                                                                 |
      +------------------------------ reset ----------------------------+

Every dispatch captures an exchange id. ``reset()`` and ``load_image()`` bump
the id, so a reply arriving for a superseded exchange is discarded instead of
being appended to the new conversation.
"""

import asyncio
import json
import logging
from enum import Enum
from typing import Any, List, Optional, Protocol, Sequence, Tuple

from app.models.conversation import Turn
from app.models.request import ChartImage

logger = logging.getLogger(__name__)

ERROR_REPLY = "Sorry, there was an error processing your message. Please try again."


class SessionState(str, Enum):
    """Lifecycle states of a conversation session."""
    EMPTY = "empty"
    IDLE = "idle"
    SENDING = "sending"


class Transport(Protocol):
    """Anything that can deliver one exchange to the analysis endpoint."""

    async def send(self, image: ChartImage, prompt: str, history: Sequence[Turn]) -> dict:
        ...


def render_reply(response: Any) -> str:
    """Turn the endpoint's ``response`` value into assistant turn content.

    Structured analyses are kept as their JSON text; plain text is preserved
    unaltered.
    """
    if isinstance(response, str):
        return response
    return json.dumps(response)


class ConversationSession:
    """Owns the image, the ordered turn log and the single in-flight exchange.

    Args:
        transport: Delivers requests to the analysis endpoint
    """

    def __init__(self, transport: Transport):
        self.transport = transport
        self._image: Optional[ChartImage] = None
        self._turns: List[Turn] = []
        self._in_flight = False
        self._exchange_id = 0

    @property
    def state(self) -> SessionState:
        """Current lifecycle state."""
        if self._image is None:
            return SessionState.EMPTY
        if self._in_flight:
            return SessionState.SENDING
        return SessionState.IDLE

    @property
    def image(self) -> Optional[ChartImage]:
        return self._image

    @property
    def turns(self) -> Tuple[Turn, ...]:
        """The committed turns, oldest first."""
        return tuple(self._turns)

    @property
    def is_sending(self) -> bool:
        return self._in_flight

    @property
    def exchange_id(self) -> int:
        return self._exchange_id

    @property
    def transcript(self) -> Tuple[Turn, ...]:
        """Turns for display, with a typing placeholder while sending."""
        if self._in_flight:
            return self.turns + (Turn(role="assistant", content="", is_typing=True),)
        return self.turns

    def load_image(self, image: ChartImage) -> None:
        """Start a new conversation about ``image``.

        Replaces any current image and clears the turn log; an outstanding
        exchange is superseded.
        """
        self._supersede()
        self._image = image
        logger.info(f"Loaded chart image ({image.media_type}, {len(image.data)} bytes)")

    def reset(self) -> None:
        """Drop the image and all turns. Allowed from any state."""
        self._supersede()
        self._image = None
        logger.info("Conversation session reset")

    def _supersede(self) -> None:
        self._exchange_id += 1
        self._turns = []
        self._in_flight = False

    async def submit(self, question: str) -> Optional[Turn]:
        """Ask ``question`` about the current image.

        Appends the user turn immediately, dispatches the exchange and appends
        the assistant reply. Transport failures become the fixed error reply;
        nothing is raised and nothing is retried. A cancelled exchange also
        gets the error reply before the cancellation propagates.

        Args:
            question: The user's question

        Returns:
            The assistant turn that was appended, or None when the submit was
            not allowed (blank question, no image, exchange in flight) or its
            reply was discarded as stale
        """
        question = (question or "").strip()
        if not question or self._image is None or self._in_flight:
            logger.debug(f"Submit ignored in state {self.state.value}")
            return None

        prior_turns = list(self._turns)
        self._turns.append(Turn(role="user", content=question))
        self._in_flight = True
        self._exchange_id += 1
        exchange_id = self._exchange_id

        try:
            body = await self.transport.send(self._image, question, prior_turns)
            reply = Turn(role="assistant", content=render_reply(body["response"]))
        except asyncio.CancelledError:
            if exchange_id == self._exchange_id:
                logger.warning(f"Exchange {exchange_id} cancelled before a reply arrived")
                self._turns.append(Turn(role="assistant", content=ERROR_REPLY))
                self._in_flight = False
            raise
        except Exception as e:
            logger.error(f"Error sending message: {type(e).__name__}: {e}")
            reply = Turn(role="assistant", content=ERROR_REPLY)

        if exchange_id != self._exchange_id:
            logger.info(f"Discarding reply for superseded exchange {exchange_id}")
            return None

        self._turns.append(reply)
        self._in_flight = False
        return reply
