"""
Room design endpoints: placement, prompt, scene export, capture, image
synthesis, design profiles and the product list.
"""

import asyncio
import logging
from typing import List, Optional, Tuple

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from stager.costing import summarize_products
from stager.depth_capture import capture_depth
from stager.models.catalog import CatalogCategory, CatalogItem
from stager.models.design import DesignProfile, DesignProfileRequest, ProductList, ProductListRequest
from stager.models.generation import (GenerationRequest, GenerationResult, LayoutRequest,
                                      PromptRequest, VisualizeRequest, VisualizeResponse)
from stager.models.room import RoomSpec
from stager.placement import place_items
from stager.prompt_compiler import compile_prompt
from stager.scene_builder import build_scene, export_glb
from stager.styles import build_design_profile, get_style_profile
from stager.synthesis import ImageSynthesizer, compile_request_prompt

logger = logging.getLogger(__name__)
router = APIRouter()

_synthesizer: Optional[ImageSynthesizer] = None


def get_synthesizer() -> ImageSynthesizer:
    global _synthesizer
    if _synthesizer is None:
        _synthesizer = ImageSynthesizer()
    return _synthesizer


def split_paint(items: List[CatalogItem]) -> Tuple[List[CatalogItem], List[CatalogItem]]:
    """Separate wall paint from furniture, preserving order. Returns (furniture, paint)."""
    furniture, paint = [], []
    for item in items:
        (paint if item.resolved_category == CatalogCategory.PAINT else furniture).append(item)
    return furniture, paint


def apply_paint(room: RoomSpec, paint: List[CatalogItem]) -> RoomSpec:
    if paint and paint[0].colorHex:
        return room.model_copy(update={"wallColor": paint[0].colorHex})
    return room


def _render_capture(room: RoomSpec, items: List[CatalogItem], placements) -> Optional[str]:
    """Build and capture synchronously (runs in thread pool)."""
    return capture_depth(build_scene(room, items, placements))


@router.post("/placements")
def compute_placements(request: LayoutRequest):
    furniture, _ = split_paint(request.items)
    return {"placements": place_items(furniture, request.room)}


@router.post("/prompt")
def build_prompt(request: PromptRequest):
    prompt = compile_prompt(
        request.style,
        room_type=request.roomType,
        wall_color_name=request.wallColorName,
        wall_color_hex=request.wallColorHex,
        furniture_names=request.furnitureNames,
        hint=request.hint
    )
    return {"prompt": prompt}


@router.post("/scene")
async def export_scene(request: LayoutRequest):
    """Export the placed room as a binary glTF."""
    furniture, paint = split_paint(request.items)
    room = apply_paint(request.room, paint)
    placements = place_items(furniture, room)

    loop = asyncio.get_event_loop()
    glb = await loop.run_in_executor(
        None,
        lambda: export_glb(build_scene(room, furniture, placements))
    )
    logger.info(f"Exported scene GLB: {len(glb)/1024:.1f}KB")

    return Response(
        content=glb,
        media_type="model/gltf-binary",
        headers={"Content-Disposition": "attachment; filename=room.glb"}
    )


@router.post("/capture")
async def capture_scene(request: LayoutRequest):
    """Render the placed room off-screen; depthImage is null when no GL context is available."""
    furniture, paint = split_paint(request.items)
    room = apply_paint(request.room, paint)
    placements = place_items(furniture, room)

    loop = asyncio.get_event_loop()
    depth_image = await loop.run_in_executor(None, _render_capture, room, furniture, placements)

    return {"depthImage": depth_image, "placements": placements}


@router.post("/generate", response_model=GenerationResult)
async def generate_image(
    request: GenerationRequest,
    synthesizer: ImageSynthesizer = Depends(get_synthesizer)
):
    return await synthesizer.synthesize(request)


@router.post("/visualize", response_model=VisualizeResponse)
async def visualize_room(
    request: VisualizeRequest,
    synthesizer: ImageSynthesizer = Depends(get_synthesizer)
):
    """
    Full pipeline: place furniture, capture the scene when there is no base
    photo, then synthesize. Always returns an image URL.
    """
    furniture, paint = split_paint(request.items)
    room = apply_paint(request.room, paint)
    placements = place_items(furniture, room)

    depth_image = None
    if request.captureDepth and not request.baseImage:
        loop = asyncio.get_event_loop()
        depth_image = await loop.run_in_executor(None, _render_capture, room, furniture, placements)

    wall_paint = paint[0] if paint else None
    generation = GenerationRequest(
        room=room,
        itemNames=[item.displayName for item in furniture],
        itemImages=[item.referenceImage for item in furniture if item.referenceImage],
        style=request.style,
        roomType=request.roomType,
        wallColorName=(wall_paint.colorName or wall_paint.displayName) if wall_paint else None,
        wallColorHex=wall_paint.colorHex if wall_paint else None,
        baseImage=request.baseImage,
        depthImage=depth_image,
        placementHint=request.placementHint,
        hint=request.hint
    )

    result = await synthesizer.synthesize(generation)

    return VisualizeResponse(
        result=result,
        placements=placements,
        prompt=compile_request_prompt(generation),
        depthCaptured=depth_image is not None
    )


@router.get("/styles/{style}")
def get_style(style: str):
    return get_style_profile(style)


@router.post("/profile", response_model=DesignProfile)
def design_profile(request: DesignProfileRequest):
    """Style profile merged with the caller's preferences and budget split."""
    return build_design_profile(request.style, budget=request.budget, preferences=request.preferences)


@router.post("/product-list", response_model=ProductList)
def product_list(request: ProductListRequest):
    return summarize_products(request.products)
