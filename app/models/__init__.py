"""Pydantic models for data validation and serialization."""

from .analysis import AnalysisResult
from .conversation import Turn
from .request import ChartImage, ChartAnalysisRequest
from .response import ChatResponse, ErrorResponse, EchoResponse

__all__ = [
    "AnalysisResult",
    "Turn",
    "ChartImage",
    "ChartAnalysisRequest",
    "ChatResponse",
    "ErrorResponse",
    "EchoResponse",
]
