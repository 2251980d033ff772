"""
fal.ai client for image editing and text-to-image generation.
"""

import os
import time
import logging
import threading
from typing import List, Optional

import httpx

from stager.config import (FAL_RUN_BASE, FAL_UPLOAD_BASE, FAL_EDIT_MODEL, FAL_TEXT_MODEL,
                           FAL_DEPTH_MODEL, FAL_DEPTH_CONTROLNET, FAL_TIMEOUT)
from stager.utils import extension_for

logger = logging.getLogger(__name__)

_credentials_lock = threading.Lock()
_credentials_loaded = False
_credentials: Optional[str] = None


class FalError(Exception):
    """Error talking to fal.ai."""
    pass


class ConfigurationError(FalError):
    """No fal.ai credential is configured."""
    pass


class UpstreamProviderError(FalError):
    """fal.ai failed, timed out or returned an unusable response."""
    pass


def configure_credentials() -> Optional[str]:
    """
    Read the fal.ai key from FAL_KEY (or FAL_API_KEY) once and cache it.

    Safe to call repeatedly and from several threads; only the first call
    touches the environment.
    """
    global _credentials_loaded, _credentials
    with _credentials_lock:
        if not _credentials_loaded:
            _credentials = os.environ.get("FAL_KEY") or os.environ.get("FAL_API_KEY") or None
            _credentials_loaded = True
            if _credentials:
                logger.info("fal.ai credentials configured")
            else:
                logger.warning("FAL_KEY not set, image synthesis will use the fallback provider")
        return _credentials


def reset_credentials():
    """Forget the cached key so the next configure_credentials() re-reads the environment."""
    global _credentials_loaded, _credentials
    with _credentials_lock:
        _credentials_loaded = False
        _credentials = None


class FalProvider:
    """
    Thin async wrapper over the fal.run REST endpoints.

    A new httpx.AsyncClient is opened per call; `transport` lets tests
    substitute an httpx.MockTransport.
    """

    name = "fal"

    def __init__(self, api_key: Optional[str] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._api_key = api_key
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self._api_key or configure_credentials())

    @property
    def api_key(self) -> str:
        key = self._api_key or configure_credentials()
        if not key:
            raise ConfigurationError("FAL_KEY not configured")
        return key

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=FAL_TIMEOUT, transport=self._transport)

    def _headers(self) -> dict:
        return {"Authorization": f"Key {self.api_key}"}

    async def upload(self, data: bytes, mime_type: str) -> str:
        """
        Upload raw bytes to fal storage.

        Returns:
            Public URL fal models can read
        """
        file_name = f"room-upload-{int(time.time() * 1000)}.{extension_for(mime_type)}"
        url = f"{FAL_UPLOAD_BASE}/{file_name}"

        logger.info(f"Uploading to fal.ai: {file_name} ({len(data)/1024:.1f}KB)")

        result = await self._request(
            url,
            files={"file_upload": (file_name, data, mime_type)},
            what="upload"
        )

        uploaded_url = result.get("url") or result.get("file_url") or result.get("access_url")
        if not uploaded_url:
            raise UpstreamProviderError(f"fal.ai upload returned no URL (keys: {sorted(result)})")

        logger.info(f"Uploaded to {uploaded_url}")
        return uploaded_url

    async def edit(self, prompt: str, image_urls: List[str]) -> str:
        """Image edit with nano-banana; the first URL is the image being edited."""
        return await self._run(FAL_EDIT_MODEL, {
            "prompt": prompt,
            "image_urls": image_urls,
            "num_images": 1,
            "enable_safety_checker": True,
        })

    async def generate(self, prompt: str) -> str:
        return await self._run(FAL_TEXT_MODEL, {
            "prompt": prompt,
            "image_size": "landscape_16_9",
            "num_images": 1,
            "enable_safety_checker": True,
        })

    async def generate_with_depth(
        self,
        prompt: str,
        control_image_url: str,
        conditioning_scale: float,
        apply_strength: float
    ) -> str:
        """Text-to-image constrained by a depth map through a FLUX ControlNet."""
        return await self._run(FAL_DEPTH_MODEL, {
            "prompt": prompt,
            "image_size": "landscape_4_3",
            "num_images": 1,
            "enable_safety_checker": True,
            "controlnets": [{
                "path": FAL_DEPTH_CONTROLNET,
                "control_image_url": control_image_url,
                "conditioning_scale": conditioning_scale,
                "end_percentage": apply_strength,
            }],
        })

    async def _run(self, model: str, payload: dict) -> str:
        logger.info(f"Calling fal.ai {model}: {payload['prompt'][:150]}")

        result = await self._request(f"{FAL_RUN_BASE}/{model}", json=payload, what=model)

        try:
            image_url = result["images"][0]["url"]
        except (KeyError, IndexError, TypeError):
            raise UpstreamProviderError(f"fal.ai {model} returned no image")

        logger.info(f"fal.ai {model} result: {image_url}")
        return image_url

    async def _request(self, url: str, what: str, **kwargs) -> dict:
        headers = self._headers()

        async with self._client() as client:
            try:
                response = await client.post(url, headers=headers, **kwargs)
                response.raise_for_status()
            except httpx.TimeoutException:
                raise UpstreamProviderError(f"fal.ai {what} timed out (>{FAL_TIMEOUT:.0f}s)")
            except httpx.HTTPStatusError as e:
                raise UpstreamProviderError(
                    f"fal.ai {what} failed: {e.response.status_code} {e.response.text[:200]}"
                )
            except httpx.RequestError as e:
                raise UpstreamProviderError(f"fal.ai {what} request error: {str(e)}")

        try:
            result = response.json()
        except ValueError:
            raise UpstreamProviderError(f"fal.ai {what} returned invalid JSON")

        if not isinstance(result, dict):
            raise UpstreamProviderError(f"fal.ai {what} returned unexpected payload")
        return result
