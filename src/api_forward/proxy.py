"""Server-side fetch of a target URL with image URL extraction."""

import logging
import re
from typing import Any

import httpx
from fastapi.responses import JSONResponse, RedirectResponse, Response

from api_forward.errors import make_error_response
from api_forward.models.endpoints import ProxySettings

logger = logging.getLogger(__name__)

PROXY_TIMEOUT = 15.0

# Unanchored: ".png" anywhere in the value, query string included, counts.
IMAGE_URL_PATTERN = re.compile(r"\.(jpeg|jpg|gif|png|webp|bmp|svg)", re.IGNORECASE)


def get_value_by_dotted_path(data: Any, path: str | None) -> Any:
    """Walk ``data`` along ``a.b.c``; None when any step is missing."""
    if not path:
        return None
    current = data
    for segment in path.split("."):
        if isinstance(current, dict):
            current = current.get(segment)
        elif isinstance(current, list) and segment.isdecimal():
            index = int(segment)
            current = current[index] if index < len(current) else None
        else:
            return None
        if current is None:
            return None
    return current


def is_image_url(value: Any) -> bool:
    """True for strings that mention a known image file extension."""
    return isinstance(value, str) and IMAGE_URL_PATTERN.search(value) is not None


def _upstream_error_response(response: httpx.Response) -> Response:
    status = response.status_code
    if not response.content:
        message = (
            f"Target API error ({status})" if status < 500 else "Proxy target error"
        )
        return make_error_response(status, message)
    try:
        return JSONResponse(status_code=status, content=response.json())
    except ValueError:
        return Response(
            content=response.content,
            status_code=status,
            media_type=response.headers.get("content-type"),
        )


class ProxyExecutor:
    """Fetch proxied targets and decide between redirecting and returning the body."""

    def __init__(
        self,
        timeout: float = PROXY_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Args:
            timeout: Upper bound in seconds for the whole outbound request.
            transport: Optional httpx transport, e.g. a MockTransport in tests.
        """
        self.timeout = timeout
        self.transport = transport

    async def fetch(self, target_url: str) -> httpx.Response:
        """GET ``target_url``; the connection is released before returning."""
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            follow_redirects=True,
            transport=self.transport,
        ) as client:
            return await client.get(target_url)

    async def execute(self, target_url: str, settings: ProxySettings) -> Response:
        """Proxy ``target_url`` and build the response for the caller."""
        logger.info(f"[Proxy] Requesting: {target_url}")
        try:
            response = await self.fetch(target_url)
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
            logger.error(f"[Proxy] Bad request for {target_url}: {e}")
            return make_error_response(500, "Proxy setup failed", target=target_url)
        except httpx.TransportError as e:
            logger.error(f"[Proxy] No response from {target_url}: {e!r}")
            return make_error_response(504, "Proxy request timeout", target=target_url)
        except httpx.HTTPError as e:
            logger.error(f"[Proxy] Failed: {target_url}: {e}")
            return make_error_response(500, "Proxy setup failed", target=target_url)

        if response.status_code >= 400:
            logger.info(f"[Proxy] Upstream returned {response.status_code}")
            return _upstream_error_response(response)

        image_url = None
        if settings.image_url_field:
            try:
                body = response.json()
            except ValueError:
                body = None
            image_url = get_value_by_dotted_path(body, settings.image_url_field)

        if is_image_url(image_url):
            logger.info(f"[Proxy] Redirecting to: {image_url}")
            return RedirectResponse(image_url, status_code=302)

        if settings.fallback_action == "error":
            return make_error_response(
                404, "Could not extract image URL", target=target_url
            )

        return Response(
            content=response.content,
            status_code=200,
            media_type=response.headers.get("content-type", "application/json"),
        )
