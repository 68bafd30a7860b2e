"""Response models for API endpoints."""

from typing import Optional, Union

from pydantic import BaseModel, Field

from app.models.analysis import AnalysisResult


class ChatResponse(BaseModel):
    """Successful exchange: a structured analysis or the model's raw text.

    Attributes:
        response: Parsed AnalysisResult (camelCase on the wire) or raw text
    """

    response: Union[AnalysisResult, str] = Field(
        ...,
        description="Structured chart analysis, or raw text when no structured object was found",
    )


class ErrorResponse(BaseModel):
    """Failed exchange.

    Attributes:
        error: Generic, non-leaking error message
        response: Raw model text, only for JSON parsing errors
    """

    error: str = Field(..., description="Error message")
    response: Optional[str] = Field(None, description="Raw model output for parse failures")


class EchoResponse(BaseModel):
    """Echo of the diagnostic GET endpoint's query parameters."""

    prompt: Optional[str] = None
    image_url: Optional[str] = Field(None, alias="imageUrl")

    model_config = {"populate_by_name": True}
