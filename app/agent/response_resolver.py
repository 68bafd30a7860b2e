"""Response resolver: coerces free-form model text into an analysis outcome.

The model is asked for a JSON object on the first turn but is never
guaranteed to produce one. Replies degrade through three tiers:

1. ``Structured`` - a brace-delimited span parsed into an AnalysisResult
2. ``RawText`` - no span at all; the reply is a conversational answer
3. ``ParseError`` - a span was found but did not parse or validate

Span extraction is a heuristic (first ``{`` to last ``}``), not a
validating parser. Known limitation: replies with several independent
JSON-like blocks, or with braces inside string values, can produce a span
that fails to parse and therefore resolves to ``ParseError``.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Union

from pydantic import ValidationError

from app.models.analysis import AnalysisResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Structured:
    """The reply contained a valid structured analysis."""

    result: AnalysisResult


@dataclass(frozen=True)
class RawText:
    """The reply contained no structured span; display it verbatim."""

    text: str


@dataclass(frozen=True)
class ParseError:
    """A structured span was found but could not be parsed.

    ``raw_text`` is the trimmed model reply, kept for diagnostics.
    """

    raw_text: str
    reason: str = ""


Outcome = Union[Structured, RawText, ParseError]


def extract_structured_span(text: str) -> Optional[str]:
    """Return the substring from the first ``{`` to the last ``}``.

    Args:
        text: Model reply

    Returns:
        The outermost brace-delimited span, or None when there is no ``{``
        or no ``}`` after it
    """
    json_start = text.find("{")
    json_end = text.rfind("}") + 1
    if json_start >= 0 and json_end > json_start:
        return text[json_start:json_end]
    return None


def resolve(raw_text: str) -> Outcome:
    """Resolve a model reply into a Structured, RawText or ParseError outcome.

    Args:
        raw_text: Unprocessed text returned by the vision model

    Returns:
        The resolved outcome; RawText and ParseError carry the trimmed reply
    """
    response_text = (raw_text or "").strip()

    json_str = extract_structured_span(response_text)
    if json_str is None:
        logger.warning("No valid JSON found in AI response, returning raw text.")
        return RawText(text=response_text)

    try:
        result = AnalysisResult.model_validate_json(json_str)
    except ValidationError as e:
        if any(error["type"] == "json_invalid" for error in e.errors()):
            logger.error(f"Failed to parse AI response JSON: {json_str[:500]}")
            return ParseError(raw_text=response_text, reason="invalid JSON")
        logger.warning(
            f"AI response JSON does not match the analysis schema "
            f"({e.error_count()} validation error(s)): {json_str[:500]}"
        )
        return ParseError(raw_text=response_text, reason=f"{e.error_count()} validation error(s)")

    return Structured(result=result)
