"""Request models for the chart analysis exchange."""

import base64

from pydantic import BaseModel, Field, field_validator


class ChartImage(BaseModel):
    """An uploaded chart image.

    Attributes:
        data: Raw image bytes
        media_type: Declared media type, e.g. 'image/png'
    """

    data: bytes = Field(..., description="Raw image bytes", min_length=1)
    media_type: str = Field(
        default="image/png",
        description="Declared media type of the image",
        examples=["image/png", "image/jpeg", "image/gif"],
    )

    @field_validator("media_type")
    @classmethod
    def validate_media_type(cls, v: str) -> str:
        """Normalize media type, defaulting to PNG when none was declared."""
        v = (v or "").strip().lower()
        return v or "image/png"

    def to_base64(self) -> str:
        """Base64-encode the image for inline provider payloads."""
        return base64.b64encode(self.data).decode("ascii")


class ChartAnalysisRequest(BaseModel):
    """Outbound payload for one exchange with the vision model.

    Attributes:
        image: The chart image attachment
        prompt: Conversation history linearized before the new question
        question: The new user question on its own
        history_turns: Number of prior turns folded into the prompt
    """

    image: ChartImage
    prompt: str = Field(..., min_length=1)
    question: str = Field(..., min_length=1)
    history_turns: int = Field(default=0, ge=0)

    @property
    def is_first_turn(self) -> bool:
        """Whether this is the opening question about the chart."""
        return self.history_turns == 0
