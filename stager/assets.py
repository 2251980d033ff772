"""
Make image references readable by the primary provider.

fal models only accept URLs they can fetch, so data URIs are uploaded and
third-party URLs are downloaded and re-uploaded. Normalization never fails
the request: on any error the original reference is passed through.
"""

import logging
from typing import Optional
from urllib.parse import urlparse

import httpx

from stager.config import FAL_ASSET_DOMAINS, FAL_TIMEOUT
from stager.fal_client import ConfigurationError, FalProvider
from stager.utils import parse_data_uri

logger = logging.getLogger(__name__)


class AssetNormalizationError(Exception):
    """An image reference could not be converted to a provider URL."""
    pass


def is_provider_asset(url: str) -> bool:
    """True if `url` is hosted on a fal asset domain or one of its subdomains."""
    host = (urlparse(url).hostname or "").lower()
    return any(host == domain or host.endswith("." + domain) for domain in FAL_ASSET_DOMAINS)


async def normalize_asset(
    reference: str,
    provider: FalProvider,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> str:
    """
    Convert an image reference to a URL the provider can read.

    Args:
        reference: data URI or URL
        provider: Provider whose storage receives uploads
        transport: Optional httpx transport for the download step

    Returns:
        Provider URL, or `reference` unchanged if it needs no conversion or
        conversion failed
    """
    try:
        return await _normalize(reference, provider, transport)
    except ConfigurationError:
        raise
    except AssetNormalizationError as e:
        logger.warning(f"Passing image through unchanged: {e}")
        return reference


async def _normalize(reference: str, provider: FalProvider, transport) -> str:
    if reference.startswith("data:"):
        try:
            mime_type, data = parse_data_uri(reference)
        except ValueError as e:
            raise AssetNormalizationError(f"Invalid data URI: {e}")
        logger.info(f"Uploading data URI ({mime_type}, {len(data)/1024:.1f}KB)")
        return await _upload(provider, data, mime_type)

    if reference.startswith(("http://", "https://")):
        if is_provider_asset(reference):
            return reference
        data, mime_type = await _download(reference, transport)
        return await _upload(provider, data, mime_type)

    logger.warning(f"Unknown image reference format: {reference[:60]}")
    return reference


async def _upload(provider: FalProvider, data: bytes, mime_type: str) -> str:
    try:
        return await provider.upload(data, mime_type)
    except ConfigurationError:
        raise
    except Exception as e:
        raise AssetNormalizationError(f"Upload failed: {type(e).__name__}: {e}")


async def _download(url: str, transport) -> tuple:
    logger.info(f"Downloading {url} for re-upload")

    async with httpx.AsyncClient(timeout=FAL_TIMEOUT, transport=transport, follow_redirects=True) as client:
        try:
            response = await client.get(url)
            response.raise_for_status()
        except httpx.TimeoutException:
            raise AssetNormalizationError(f"Download timed out: {url}")
        except httpx.HTTPStatusError as e:
            raise AssetNormalizationError(f"Download failed: {e.response.status_code}")
        except httpx.RequestError as e:
            raise AssetNormalizationError(f"Download error: {str(e)}")

    mime_type = response.headers.get("content-type", "image/jpeg").split(";")[0].strip() or "image/jpeg"
    logger.info(f"Downloaded {len(response.content)/1024:.1f}KB ({mime_type})")
    return response.content, mime_type
