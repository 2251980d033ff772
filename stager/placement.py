"""
Rule-based furniture placement.

Maps each selected catalog item to a pose inside the room from its category
alone. Every category has exactly one PlacementRule; there is no collision
detection between rules, so items from different zones may overlap.

Coordinates are room-local centimetres: origin at the back-left floor corner,
x along the width, z along the length away from the back wall, y up.
Yaw 0 means the item faces +z.
"""

import math
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from stager.models.catalog import CatalogCategory, CatalogItem
from stager.models.room import Placement, RoomSpec

logger = logging.getLogger(__name__)

WALL_CLEARANCE = 10.0  # cm between an item's back and its wall
STACK_SPACING = 120.0  # cm between shelves/mirrors sharing a wall


class ZoneKind(str, Enum):
    BACK_WALL_CENTERED = "back_wall_centered"
    ROOM_CENTER = "room_center"
    AGAINST_WALL = "against_wall"
    CORNER_ANGLED = "corner_angled"
    NEAR_PRIMARY_SURFACE = "near_primary_surface"
    DEFAULT_ROW = "default_row"


class Wall(str, Enum):
    BACK = "back"    # z = 0
    FRONT = "front"  # z = length
    LEFT = "left"    # x = 0
    RIGHT = "right"  # x = width


@dataclass(frozen=True)
class PlacementRule:
    zone: ZoneKind
    wall: Optional[Wall] = None
    spacing: float = 0.0
    along_start: float = 60.0
    elevation: float = 0.0
    corner_inset: float = 30.0
    corner_start: int = 0


PLACEMENT_RULES: Dict[CatalogCategory, PlacementRule] = {
    CatalogCategory.SOFA: PlacementRule(ZoneKind.BACK_WALL_CENTERED, spacing=230.0),
    CatalogCategory.BED: PlacementRule(ZoneKind.BACK_WALL_CENTERED, spacing=200.0),
    CatalogCategory.TABLE: PlacementRule(ZoneKind.ROOM_CENTER, spacing=150.0),
    CatalogCategory.RUG: PlacementRule(ZoneKind.ROOM_CENTER),
    CatalogCategory.DESK: PlacementRule(ZoneKind.AGAINST_WALL, wall=Wall.FRONT, spacing=160.0),
    CatalogCategory.SHELF: PlacementRule(ZoneKind.AGAINST_WALL, wall=Wall.LEFT, spacing=STACK_SPACING),
    CatalogCategory.MIRROR: PlacementRule(ZoneKind.AGAINST_WALL, wall=Wall.RIGHT, spacing=STACK_SPACING,
                                          elevation=100.0),
    CatalogCategory.ARMCHAIR: PlacementRule(ZoneKind.CORNER_ANGLED, corner_inset=30.0),
    CatalogCategory.LAMP: PlacementRule(ZoneKind.CORNER_ANGLED, corner_inset=0.0, corner_start=2),
    CatalogCategory.CHAIR: PlacementRule(ZoneKind.NEAR_PRIMARY_SURFACE),
    CatalogCategory.PAINT: PlacementRule(ZoneKind.DEFAULT_ROW, wall=Wall.FRONT, spacing=100.0),
    CatalogCategory.OTHER: PlacementRule(ZoneKind.DEFAULT_ROW, wall=Wall.FRONT, spacing=100.0),
}

# (x side, z side, yaw facing the room centre), cycled by index
CORNERS = [
    (Wall.LEFT, Wall.FRONT, 3 * math.pi / 4),
    (Wall.RIGHT, Wall.FRONT, -3 * math.pi / 4),
    (Wall.LEFT, Wall.BACK, math.pi / 4),
    (Wall.RIGHT, Wall.BACK, -math.pi / 4),
]

# (dx, dz, yaw) around the room centre: in front, behind, left, right.
# Chairs go here even when no table was selected.
SEAT_OFFSETS = [
    (0.0, 80.0, math.pi),
    (0.0, -80.0, 0.0),
    (-90.0, 0.0, math.pi / 2),
    (90.0, 0.0, -math.pi / 2),
]
SEAT_RING_STEP = 60.0  # extra distance for every further set of four chairs


def normalize_yaw(yaw: float) -> float:
    """Wrap an angle into [-pi, pi]."""
    return math.atan2(math.sin(yaw), math.cos(yaw))


def rule_for(category: CatalogCategory) -> PlacementRule:
    return PLACEMENT_RULES[category]


def place_items(items: Sequence[CatalogItem], room: RoomSpec) -> List[Placement]:
    """
    Compute one Placement per item, in input order.

    Pure function of (items, room): identical input always gives identical
    output. Items of the same category are spread by their index within that
    category.
    """
    counters: Dict[CatalogCategory, int] = {}
    placements = []

    for item in items:
        category = item.resolved_category
        index = counters.get(category, 0)
        counters[category] = index + 1

        rule = rule_for(category)
        x, z, yaw = _pose_for(rule, item, room, index)

        placements.append(Placement(
            itemId=item.id,
            category=category,
            x=_clamp(x, room.width),
            y=rule.elevation,
            z=_clamp(z, room.length),
            yaw=normalize_yaw(yaw)
        ))

    logger.info(f"Placed {len(placements)} items in {room.width:.0f}x{room.length:.0f}cm room")
    return placements


def _pose_for(rule: PlacementRule, item: CatalogItem, room: RoomSpec, index: int) -> Tuple[float, float, float]:
    zone = rule.zone

    if zone == ZoneKind.BACK_WALL_CENTERED:
        x = room.width / 2 + _fan(index, rule.spacing)
        return x, item.depth / 2 + WALL_CLEARANCE, 0.0

    if zone == ZoneKind.ROOM_CENTER:
        x = room.width / 2 + _fan(index, rule.spacing)
        return x, room.length / 2, 0.0

    if zone in (ZoneKind.AGAINST_WALL, ZoneKind.DEFAULT_ROW):
        along = rule.along_start + index * rule.spacing
        return _against_wall(rule.wall, item, room, along)

    if zone == ZoneKind.CORNER_ANGLED:
        side_x, side_z, yaw = CORNERS[(rule.corner_start + index) % len(CORNERS)]
        inset = item.depth / 2 + WALL_CLEARANCE + rule.corner_inset
        x = inset if side_x == Wall.LEFT else room.width - inset
        z = inset if side_z == Wall.BACK else room.length - inset
        return x, z, yaw

    if zone == ZoneKind.NEAR_PRIMARY_SURFACE:
        dx, dz, yaw = SEAT_OFFSETS[index % len(SEAT_OFFSETS)]
        ring = index // len(SEAT_OFFSETS)
        scale = 1.0 + ring * SEAT_RING_STEP / max(abs(dx), abs(dz))
        return room.width / 2 + dx * scale, room.length / 2 + dz * scale, yaw

    raise ValueError(f"Unhandled zone kind: {zone}")


def _against_wall(wall: Wall, item: CatalogItem, room: RoomSpec, along: float) -> Tuple[float, float, float]:
    """Back of the item against `wall`, `along` cm from that wall's start."""
    offset = item.depth / 2 + WALL_CLEARANCE

    if wall == Wall.LEFT:
        return offset, along, math.pi / 2
    if wall == Wall.RIGHT:
        return room.width - offset, along, -math.pi / 2
    if wall == Wall.BACK:
        return along, offset, 0.0
    return along, room.length - offset, math.pi


def _fan(index: int, spacing: float) -> float:
    """0, +s, -s, +2s, -2s, ... so repeated items spread out from the centre line."""
    if index == 0:
        return 0.0
    step = (index + 1) // 2
    sign = 1.0 if index % 2 else -1.0
    return sign * step * spacing


def _clamp(value: float, upper: float) -> float:
    return min(max(value, 0.0), upper)
