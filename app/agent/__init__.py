"""Chart analysis agent.

Encodes conversation turns into vision requests, calls the configured
provider and resolves the model's replies into structured or text outcomes.
"""

from app.agent.turn_encoder import encode, encode_from_form
from app.agent.response_resolver import Outcome, Structured, RawText, ParseError, resolve
from app.agent.chart_analyst import ChartAnalyst

__all__ = [
    "encode",
    "encode_from_form",
    "Outcome",
    "Structured",
    "RawText",
    "ParseError",
    "resolve",
    "ChartAnalyst",
]
