"""Conversation turn model shared by the client session and the endpoint."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

RoleLiteral = Literal["user", "assistant"]


class Turn(BaseModel):
    """One message in a chart conversation.

    Turns are immutable once created; their order in a transcript is the
    conversation context re-sent to the model on every exchange.

    Attributes:
        role: 'user' or 'assistant'
        content: Message text. For assistant turns this is either the
            serialized structured analysis or the model's raw text.
        is_typing: Transient flag for a pending assistant placeholder
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    role: RoleLiteral = Field(..., description="Message role")
    content: str = Field(..., description="Message content")
    is_typing: bool = Field(default=False, alias="isTyping", exclude=True)

    def speaker_label(self) -> str:
        """Label used when the turn is linearized into a prompt."""
        return "User" if self.role == "user" else "Assistant"

    def to_wire(self) -> dict:
        """Serialize to the ``{role, content}`` shape sent as history."""
        return {"role": self.role, "content": self.content}
