"""Turn encoder: folds conversation history and a new question into one request.

The vision endpoint is stateless. Multi-turn continuity comes from the client
re-sending every prior turn, which is linearized here into a single prompt:

    User: What's the trend?
    Assistant: {"keyInsights": ...}
    User: Where should I put my stop?
"""

import json
import logging
from typing import Iterable, List, Optional, Sequence

from pydantic import TypeAdapter, ValidationError

from app.errors import HistoryDecodeError, InvalidInput
from app.models.conversation import Turn
from app.models.request import ChartAnalysisRequest, ChartImage

logger = logging.getLogger(__name__)

_turn_list_adapter = TypeAdapter(List[Turn])


def linearize_turns(turns: Iterable[Turn]) -> List[str]:
    """Render turns as ``"User: ..."`` / ``"Assistant: ..."`` lines, in order."""
    return [f"{turn.speaker_label()}: {turn.content}" for turn in turns]


def build_prompt(question: str, prior_turns: Optional[Sequence[Turn]]) -> str:
    """Combine prior turns and the new question into one prompt string.

    With ``prior_turns`` absent the question is used on its own. Otherwise the
    history lines are followed by a final ``"User: <question>"`` line, so an
    empty history yields exactly ``"User: <question>"``.
    """
    if prior_turns is None:
        return question

    lines = linearize_turns(prior_turns)
    lines.append(f"User: {question}")
    return "\n".join(lines)


def encode(
    image: Optional[ChartImage],
    question: Optional[str],
    prior_turns: Optional[Sequence[Turn]] = None,
) -> ChartAnalysisRequest:
    """Build the outbound request for one exchange.

    Args:
        image: Chart image with its declared media type
        question: The new user question
        prior_turns: Turns before this question, oldest first (not mutated)

    Returns:
        ChartAnalysisRequest carrying the image and the combined prompt

    Raises:
        InvalidInput: If the image is missing/empty or the question is blank
    """
    if image is None or not image.data:
        raise InvalidInput("Image and prompt are required")

    question = (question or "").strip()
    if not question:
        raise InvalidInput("Image and prompt are required")

    prompt = build_prompt(question, prior_turns)
    return ChartAnalysisRequest(
        image=image,
        prompt=prompt,
        question=question,
        history_turns=len(prior_turns) if prior_turns else 0,
    )


def decode_history(raw_history: Optional[str]) -> Optional[List[Turn]]:
    """Parse the ``history`` form field into turns.

    Args:
        raw_history: JSON array of ``{role, content}`` objects, or None/empty

    Returns:
        List of turns, or None when no history was sent

    Raises:
        HistoryDecodeError: If the field is not valid serialized turn data
    """
    if not raw_history:
        return None

    try:
        return _turn_list_adapter.validate_json(raw_history)
    except ValidationError as e:
        raise HistoryDecodeError(f"Invalid history: {e.error_count()} validation error(s)") from e


def encode_from_form(
    image: Optional[ChartImage],
    question: Optional[str],
    raw_history: Optional[str],
) -> ChartAnalysisRequest:
    """Encode a request from raw form fields.

    Malformed history never fails the request: it is logged and discarded, and
    the question is sent on its own.
    """
    try:
        prior_turns = decode_history(raw_history)
    except HistoryDecodeError as e:
        logger.warning(f"Invalid history JSON, ignoring: {e}")
        prior_turns = None

    return encode(image, question, prior_turns)


def serialize_history(turns: Sequence[Turn]) -> str:
    """Serialize turns to the JSON array sent in the ``history`` form field."""
    return json.dumps([turn.to_wire() for turn in turns])
