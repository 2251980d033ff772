from enum import Enum
from pydantic import BaseModel
from typing import Optional, List

from stager.models.catalog import CatalogItem
from stager.models.room import RoomSpec, Placement


class GenerationMode(str, Enum):
    TWO_IMAGE_EDIT = "two_image_edit"
    SINGLE_IMAGE_EDIT = "single_image_edit"
    DEPTH_CONDITIONED = "depth_conditioned"
    UNCONDITIONED = "unconditioned"


class GenerationRequest(BaseModel):
    room: Optional[RoomSpec] = None
    itemNames: List[str] = []
    itemImages: List[str] = []
    style: str = "modern"
    roomType: Optional[str] = None
    wallColorName: Optional[str] = None
    wallColorHex: Optional[str] = None
    baseImage: Optional[str] = None
    depthImage: Optional[str] = None
    placementHint: Optional[str] = None
    hint: Optional[str] = None


class GenerationResult(BaseModel):
    imageUrl: str
    provider: str
    mode: GenerationMode
    processingTimeMs: int
    fallback: bool
    fallbackReason: Optional[str] = None


class LayoutRequest(BaseModel):
    room: RoomSpec
    items: List[CatalogItem] = []


class PromptRequest(BaseModel):
    style: str = "modern"
    roomType: Optional[str] = None
    wallColorName: Optional[str] = None
    wallColorHex: Optional[str] = None
    furnitureNames: List[str] = []
    hint: Optional[str] = None


class VisualizeRequest(BaseModel):
    room: RoomSpec
    items: List[CatalogItem] = []
    style: str = "modern"
    roomType: Optional[str] = None
    baseImage: Optional[str] = None
    placementHint: Optional[str] = None
    hint: Optional[str] = None
    captureDepth: bool = True


class VisualizeResponse(BaseModel):
    result: GenerationResult
    placements: List[Placement]
    prompt: str
    depthCaptured: bool
