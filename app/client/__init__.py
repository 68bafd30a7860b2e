"""Client library: conversation session and HTTP transport."""

from app.client.session import ConversationSession, SessionState, ERROR_REPLY
from app.client.transport import ChartTransport, TransportError

__all__ = [
    "ConversationSession",
    "SessionState",
    "ERROR_REPLY",
    "ChartTransport",
    "TransportError",
]
