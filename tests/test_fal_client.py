"""
Tests for the fal.ai client. All HTTP goes through httpx.MockTransport.
"""

import json
from concurrent.futures import ThreadPoolExecutor

import httpx
import pytest

from stager.config import FAL_DEPTH_CONTROLNET, FAL_UPLOAD_BASE
from stager.fal_client import (ConfigurationError, FalProvider, UpstreamProviderError,
                               configure_credentials, reset_credentials)

RESULT_URL = "https://v3b.fal.media/files/rabbit/result.png"


def _recording_transport(handler):
    requests = []

    def record(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    return httpx.MockTransport(record), requests


def _images_response(request):
    return httpx.Response(200, json={"images": [{"url": RESULT_URL}]})


class TestCredentials:
    def test_reads_fal_key(self, monkeypatch):
        monkeypatch.setenv("FAL_KEY", "key-a")
        assert configure_credentials() == "key-a"

    def test_falls_back_to_fal_api_key(self, monkeypatch):
        monkeypatch.setenv("FAL_API_KEY", "key-b")
        assert configure_credentials() == "key-b"

    def test_missing_key_is_none(self):
        assert configure_credentials() is None
        assert FalProvider().configured is False

    def test_read_once(self, monkeypatch):
        monkeypatch.setenv("FAL_KEY", "first")
        assert configure_credentials() == "first"
        monkeypatch.setenv("FAL_KEY", "second")
        assert configure_credentials() == "first"

        reset_credentials()
        assert configure_credentials() == "second"

    def test_concurrent_calls_agree(self, monkeypatch):
        monkeypatch.setenv("FAL_KEY", "shared")
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda _: configure_credentials(), range(32)))
        assert set(results) == {"shared"}

    def test_explicit_key_wins(self):
        assert FalProvider(api_key="explicit").api_key == "explicit"


class TestFalProvider:
    @pytest.mark.asyncio
    async def test_edit_posts_images_and_prompt(self):
        transport, requests = _recording_transport(_images_response)
        provider = FalProvider(api_key="test-key", transport=transport)

        url = await provider.edit("add a sofa", ["https://fal.media/room.png", "https://fal.media/sofa.png"])

        assert url == RESULT_URL
        [request] = requests
        assert request.url.path == "/fal-ai/nano-banana/edit"
        assert request.headers["Authorization"] == "Key test-key"
        body = json.loads(request.content)
        assert body["prompt"] == "add a sofa"
        assert body["image_urls"] == ["https://fal.media/room.png", "https://fal.media/sofa.png"]

    @pytest.mark.asyncio
    async def test_generate_uses_text_model(self):
        transport, requests = _recording_transport(_images_response)
        provider = FalProvider(api_key="test-key", transport=transport)

        assert await provider.generate("a living room") == RESULT_URL
        assert requests[0].url.path == "/fal-ai/flux-pro/v1.1-ultra"
        assert json.loads(requests[0].content)["image_size"] == "landscape_16_9"

    @pytest.mark.asyncio
    async def test_generate_with_depth_sends_controlnet(self):
        transport, requests = _recording_transport(_images_response)
        provider = FalProvider(api_key="test-key", transport=transport)

        await provider.generate_with_depth(
            "a bedroom", "https://fal.media/depth.png", conditioning_scale=0.7, apply_strength=0.8
        )

        body = json.loads(requests[0].content)
        [controlnet] = body["controlnets"]
        assert controlnet["path"] == FAL_DEPTH_CONTROLNET
        assert controlnet["control_image_url"] == "https://fal.media/depth.png"
        assert controlnet["conditioning_scale"] == 0.7
        assert controlnet["end_percentage"] == 0.8

    @pytest.mark.asyncio
    @pytest.mark.parametrize("key", ["url", "file_url", "access_url"])
    async def test_upload_reads_any_url_key(self, key):
        transport, requests = _recording_transport(
            lambda request: httpx.Response(200, json={key: "https://v3b.fal.media/files/up.png"})
        )
        provider = FalProvider(api_key="test-key", transport=transport)

        url = await provider.upload(b"\x89PNG data", "image/png")

        assert url == "https://v3b.fal.media/files/up.png"
        [request] = requests
        assert str(request.url).startswith(FAL_UPLOAD_BASE + "/room-upload-")
        assert str(request.url).endswith(".png")
        assert b'name="file_upload"' in request.content
        assert b"\x89PNG data" in request.content

    @pytest.mark.asyncio
    async def test_upload_without_url_fails(self):
        transport, _ = _recording_transport(lambda request: httpx.Response(200, json={"id": "x"}))
        provider = FalProvider(api_key="test-key", transport=transport)

        with pytest.raises(UpstreamProviderError):
            await provider.upload(b"data", "image/jpeg")

    @pytest.mark.asyncio
    async def test_http_error(self):
        transport, _ = _recording_transport(lambda request: httpx.Response(500, text="overloaded"))
        provider = FalProvider(api_key="test-key", transport=transport)

        with pytest.raises(UpstreamProviderError, match="500"):
            await provider.generate("prompt")

    @pytest.mark.asyncio
    async def test_timeout(self):
        def slow(request):
            raise httpx.ReadTimeout("timed out", request=request)

        provider = FalProvider(api_key="test-key", transport=httpx.MockTransport(slow))

        with pytest.raises(UpstreamProviderError, match="timed out"):
            await provider.generate("prompt")

    @pytest.mark.asyncio
    async def test_connection_error(self):
        def refused(request):
            raise httpx.ConnectError("connection refused", request=request)

        provider = FalProvider(api_key="test-key", transport=httpx.MockTransport(refused))

        with pytest.raises(UpstreamProviderError):
            await provider.generate("prompt")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [{"images": []}, {"images": [{}]}, {"detail": "nsfw"}])
    async def test_response_without_image(self, payload):
        transport, _ = _recording_transport(lambda request: httpx.Response(200, json=payload))
        provider = FalProvider(api_key="test-key", transport=transport)

        with pytest.raises(UpstreamProviderError):
            await provider.edit("prompt", ["https://fal.media/a.png"])

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        transport, _ = _recording_transport(lambda request: httpx.Response(200, text="<html>"))
        provider = FalProvider(api_key="test-key", transport=transport)

        with pytest.raises(UpstreamProviderError):
            await provider.generate("prompt")

    @pytest.mark.asyncio
    async def test_no_key_makes_no_request(self):
        transport, requests = _recording_transport(_images_response)
        provider = FalProvider(transport=transport)

        with pytest.raises(ConfigurationError):
            await provider.generate("prompt")
        assert requests == []
