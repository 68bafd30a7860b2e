"""HTTP transport from the conversation session to the analysis endpoint."""

import logging
from typing import Any, Dict, Optional, Sequence

import httpx

from app.agent.turn_encoder import serialize_history
from app.config import get_settings
from app.models.conversation import Turn
from app.models.request import ChartImage

logger = logging.getLogger(__name__)

ANALYZE_PATH = "/api/gen"


class TransportError(Exception):
    """The exchange did not complete with a success response."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ChartTransport:
    """Posts multipart chart requests to ``/api/gen``.

    Args:
        base_url: Server root, e.g. 'http://localhost:8000'
        timeout: Request timeout in seconds
        client: Optional preconfigured httpx client (owned by the caller)
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        settings = get_settings()
        self.base_url = base_url or settings.api_base_url
        self.timeout = timeout if timeout is not None else settings.request_timeout_seconds
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP async client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout, connect=10.0),
            )
        return self._client

    async def send(
        self,
        image: ChartImage,
        prompt: str,
        history: Sequence[Turn],
    ) -> Dict[str, Any]:
        """Send one exchange and return the decoded success body.

        Args:
            image: Active chart image
            prompt: The new user question
            history: Turns prior to this question

        Returns:
            The JSON body, ``{"response": <object or text>}``

        Raises:
            TransportError: On non-success status or an undecodable body
            httpx.RequestError: On network failure
        """
        client = self._get_client()
        files = {"image": ("chart", image.data, image.media_type)}
        data = {"prompt": prompt, "history": serialize_history(history)}

        logger.debug(f"POST {ANALYZE_PATH}: {len(history)} prior turn(s)")
        response = await client.post(ANALYZE_PATH, files=files, data=data)

        if response.is_error:
            raise TransportError(
                f"{response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise TransportError("Response body is not JSON", status_code=response.status_code) from e

        if not isinstance(body, dict) or "response" not in body:
            raise TransportError("Response body has no 'response' field", status_code=response.status_code)
        return body

    async def aclose(self) -> None:
        """Close the HTTP client if this transport created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
