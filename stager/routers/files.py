"""
Image proxy and provider status endpoints.
"""

import logging
from typing import Optional
from urllib.parse import urljoin, urlparse

import httpx
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response

from stager.config import FAL_TIMEOUT, PROXY_MAX_REDIRECTS
from stager.fal_client import configure_credentials

logger = logging.getLogger(__name__)
router = APIRouter()

# Hosts the widget may load through the proxy; subdomains are allowed too
ALLOWED_IMAGE_HOSTS = [
    "fal.media",
    "storage.googleapis.com",
    "images.unsplash.com",
    "encrypted-tbn0.gstatic.com",       # Google Shopping thumbnails
    "m.media-amazon.com",
    "images-na.ssl-images-amazon.com",
    "i5.walmartimages.com",
    "target.scene7.com",
    "cb2.scene7.com",
    "assets.weimgs.com",                # West Elm
    "img.laredoute.com",
    "media.conforama.fr",
]


def get_proxy_transport() -> Optional[httpx.AsyncBaseTransport]:
    """Transport for upstream image fetches; overridden in tests."""
    return None


def is_allowed_image_host(url: str) -> bool:
    host = (urlparse(url).hostname or "").lower()
    return any(host == h or host.endswith("." + h) for h in ALLOWED_IMAGE_HOSTS)


async def _fetch_allowed(client: httpx.AsyncClient, url: str) -> httpx.Response:
    """GET `url`, following redirects by hand so every hop is checked against the allow-list."""
    for _ in range(PROXY_MAX_REDIRECTS + 1):
        response = await client.get(url)
        if not response.is_redirect:
            response.raise_for_status()
            return response

        url = urljoin(url, response.headers["location"])
        if urlparse(url).scheme not in ("http", "https") or not is_allowed_image_host(url):
            logger.warning(f"Image proxy refused redirect to {url}")
            raise HTTPException(502, "Upstream redirected to a disallowed host")

    raise HTTPException(502, "Too many upstream redirects")


@router.get("/image-proxy")
async def image_proxy(
    url: Optional[str] = Query(None),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_proxy_transport)
):
    """Stream an allow-listed remote image back with a 24h cache header."""
    if not url:
        raise HTTPException(400, "Missing url parameter")

    if urlparse(url).scheme not in ("http", "https"):
        raise HTTPException(400, "Only http(s) URLs can be proxied")

    if not is_allowed_image_host(url):
        raise HTTPException(403, "Domain not allowed")

    async with httpx.AsyncClient(timeout=FAL_TIMEOUT, transport=transport) as client:
        try:
            upstream = await _fetch_allowed(client, url)
        except httpx.HTTPStatusError as e:
            logger.warning(f"Image proxy upstream returned {e.response.status_code} for {url}")
            raise HTTPException(502, f"Upstream image fetch failed: {e.response.status_code}")
        except httpx.RequestError as e:
            logger.error(f"Image proxy error for {url}: {e}")
            raise HTTPException(502, "Image proxy error")

    return Response(
        content=upstream.content,
        media_type=upstream.headers.get("content-type", "image/jpeg"),
        headers={"Cache-Control": "public, max-age=86400"}
    )


@router.get("/provider/status")
async def provider_status():
    """Check if the primary image provider is configured."""
    return {
        "configured": bool(configure_credentials()),
        "provider": "fal",
        "fallback": "pollinations"
    }
