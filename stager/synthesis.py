"""
Image synthesis orchestration.

Chooses a generation mode from what the request carries, calls the primary
provider under a deadline, and falls back to a keyless URL provider on any
failure. synthesize() never raises for provider problems; the caller always
gets an image URL.
"""

import time
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Tuple, TypeVar, Union

from stager.assets import normalize_asset
from stager.config import PRIMARY_DEADLINE_SECONDS, DEPTH_CONDITIONING_SCALE, DEPTH_APPLY_STRENGTH
from stager.fal_client import ConfigurationError, FalProvider
from stager.models.generation import GenerationMode, GenerationRequest, GenerationResult
from stager.pollinations import build_fallback_url, current_millis
from stager.prompt_compiler import compile_prompt

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_PLACEMENT_HINT = "Find an empty area of the floor; do not overlap existing furniture"


@dataclass(frozen=True)
class Ok:
    value: Any


@dataclass(frozen=True)
class Err:
    error: Exception


Result = Union[Ok, Err]


async def run_to_result(awaitable: Awaitable[T]) -> Result:
    """Await `awaitable`, turning any Exception into Err. Cancellation propagates."""
    try:
        return Ok(await awaitable)
    except Exception as e:
        return Err(e)


async def try_with_fallback(
    primary: Awaitable[T],
    fallback: Callable[[Exception], T]
) -> Tuple[T, Optional[Exception]]:
    """
    Run `primary`; if it fails, build a value with `fallback(error)`.

    Returns:
        (value, error) where error is None when the primary succeeded
    """
    result = await run_to_result(primary)
    if isinstance(result, Ok):
        return result.value, None
    return fallback(result.error), result.error


def select_mode(request: GenerationRequest) -> GenerationMode:
    has_base = bool(request.baseImage and request.baseImage.strip())
    if has_base and request.itemImages:
        return GenerationMode.TWO_IMAGE_EDIT
    if has_base:
        return GenerationMode.SINGLE_IMAGE_EDIT
    if request.depthImage:
        return GenerationMode.DEPTH_CONDITIONED
    return GenerationMode.UNCONDITIONED


def compile_request_prompt(request: GenerationRequest) -> str:
    return compile_prompt(
        request.style,
        room_type=request.roomType,
        wall_color_name=request.wallColorName,
        wall_color_hex=request.wallColorHex,
        furniture_names=request.itemNames,
        hint=request.hint
    )


def build_insert_instruction(request: GenerationRequest) -> str:
    """Edit instruction for base photo + one reference item image."""
    item_name = request.itemNames[0] if request.itemNames else "the furniture item"
    placement = (request.placementHint or "").strip() or DEFAULT_PLACEMENT_HINT
    clauses = [
        "Image 1 is the base room photo: keep its walls, floor, lighting, perspective and existing furniture unchanged",
        f"Insert only the item shown in image 2 ({item_name}) into the room",
        f"Placement: {placement.rstrip('.')}",
        "Match the room's lighting, scale and shadows",
    ]
    if request.style and request.style.strip():
        clauses.append(f"{request.style.strip()} style")
    return ". ".join(clauses) + "."


class ImageSynthesizer:
    """
    Primary provider with a guaranteed fallback.

    Args:
        provider: fal.ai provider (a default FalProvider reads FAL_KEY lazily)
        clock: Millisecond clock used to seed fallback URLs
        deadline: Seconds allowed for the whole primary path
        transport: Optional httpx transport for asset downloads
    """

    def __init__(
        self,
        provider: Optional[FalProvider] = None,
        clock: Callable[[], int] = current_millis,
        deadline: float = PRIMARY_DEADLINE_SECONDS,
        transport=None
    ):
        self.provider = provider or FalProvider()
        self.clock = clock
        self.deadline = deadline
        self.transport = transport

    async def synthesize(self, request: GenerationRequest) -> GenerationResult:
        start = time.monotonic()
        mode = select_mode(request)
        prompt = compile_request_prompt(request)

        logger.info(f"Synthesizing in {mode.value} mode")

        image_url, error = await try_with_fallback(
            self._primary(mode, request, prompt),
            lambda e: build_fallback_url(prompt, self.clock)
        )

        elapsed_ms = int((time.monotonic() - start) * 1000)

        if error is not None:
            logger.warning(f"Primary provider failed ({type(error).__name__}: {error}), using fallback")
            return GenerationResult(
                imageUrl=image_url,
                provider="pollinations",
                mode=mode,
                processingTimeMs=elapsed_ms,
                fallback=True,
                fallbackReason=type(error).__name__
            )

        logger.info(f"Generated with fal.ai in {elapsed_ms}ms")
        return GenerationResult(
            imageUrl=image_url,
            provider=self.provider.name,
            mode=mode,
            processingTimeMs=elapsed_ms,
            fallback=False
        )

    async def _primary(self, mode: GenerationMode, request: GenerationRequest, prompt: str) -> str:
        if not self.provider.configured:
            raise ConfigurationError("FAL_KEY not configured")
        return await asyncio.wait_for(self._dispatch(mode, request, prompt), timeout=self.deadline)

    async def _dispatch(self, mode: GenerationMode, request: GenerationRequest, prompt: str) -> str:
        if mode == GenerationMode.TWO_IMAGE_EDIT:
            base_url, item_url = await asyncio.gather(
                self._normalize(request.baseImage),
                self._normalize(request.itemImages[0])
            )
            return await self.provider.edit(build_insert_instruction(request), [base_url, item_url])

        if mode == GenerationMode.SINGLE_IMAGE_EDIT:
            base_url = await self._normalize(request.baseImage)
            return await self.provider.edit(prompt, [base_url])

        if mode == GenerationMode.DEPTH_CONDITIONED:
            depth_url = await self._normalize(request.depthImage)
            return await self.provider.generate_with_depth(
                prompt,
                depth_url,
                conditioning_scale=DEPTH_CONDITIONING_SCALE,
                apply_strength=DEPTH_APPLY_STRENGTH
            )

        return await self.provider.generate(prompt)

    async def _normalize(self, reference: str) -> str:
        return await normalize_asset(reference, self.provider, transport=self.transport)
