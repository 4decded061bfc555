import base64
import logging

import httpx

from typecard.core.errors import UpstreamError


logger = logging.getLogger(__name__)


class ImageClient:
    """Downloads background images and encodes them for inline embedding."""

    def __init__(self, http_client: httpx.AsyncClient, timeout: float = 10.0) -> None:
        self._http = http_client
        self._timeout = timeout

    async def fetch_base64(self, url: str) -> str:
        try:
            response = await self._http.get(
                url,
                headers={"User-Agent": "typecard"},
                timeout=self._timeout,
                follow_redirects=True,
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("Background image request failed for %s: %s", url, exc)
            raise UpstreamError("Background image request failed") from exc

        content_type = response.headers.get("content-type", "")
        if not content_type.startswith("image/"):
            raise UpstreamError("Background image URL did not return an image")

        return base64.b64encode(response.content).decode("ascii")
