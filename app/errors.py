"""Error taxonomy for the chart conversation exchange."""


class ChartChatError(Exception):
    """Base class for all chart conversation errors."""


class InvalidInput(ChartChatError):
    """A required field (image or prompt) is missing or empty.

    Raised before any remote call is attempted.
    """


class HistoryDecodeError(ChartChatError):
    """The history field is present but is not valid serialized turn data.

    Recovered locally by discarding the history; never surfaced to the user.
    """


class UpstreamFailure(ChartChatError):
    """The remote vision model call failed (network, quota, bad request)."""

    def __init__(self, message: str, provider: str = ""):
        super().__init__(message)
        self.provider = provider
