"""
Builds a renderable trimesh scene from a room and its furniture placements.

The scene is a coarse proxy used only to condition image synthesis: one floor
slab, the two walls facing the camera, and one flat-coloured box per item.
Uses trimesh's Y-up convention with 1 scene unit = 100 cm.
"""

import math
import logging
from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np
import trimesh

from stager.config import CAPTURE_WIDTH, CAPTURE_HEIGHT
from stager.models.catalog import CatalogCategory, CatalogItem
from stager.models.room import Placement, RoomSpec

logger = logging.getLogger(__name__)

CM_PER_UNIT = 100.0

# Slab thickness for floor and walls (scene units)
SHELL_THICKNESS = 0.01

CAMERA_YFOV = math.radians(50.0)

CATEGORY_COLORS = {
    CatalogCategory.SOFA: "#7a8b99",
    CatalogCategory.BED: "#c9b79c",
    CatalogCategory.TABLE: "#8b5a2b",
    CatalogCategory.RUG: "#b5651d",
    CatalogCategory.DESK: "#6f4e37",
    CatalogCategory.SHELF: "#a0785a",
    CatalogCategory.MIRROR: "#ccddee",
    CatalogCategory.ARMCHAIR: "#9c6644",
    CatalogCategory.CHAIR: "#5c4033",
    CatalogCategory.LAMP: "#e8d8b0",
    CatalogCategory.PAINT: "#bbbbbb",
    CatalogCategory.OTHER: "#999999",
}


@dataclass
class SceneGraph:
    scene: trimesh.Scene
    camera_pose: np.ndarray
    yfov: float = CAMERA_YFOV
    width: int = CAPTURE_WIDTH
    height: int = CAPTURE_HEIGHT


def hex_to_rgba(color: str) -> List[int]:
    """'#rrggbb' (or 'rgb') to an RGBA list; unparseable input becomes mid grey."""
    value = (color or "").strip().lstrip("#")
    if len(value) == 3:
        value = "".join(c * 2 for c in value)
    try:
        if len(value) != 6:
            raise ValueError(value)
        rgb = [int(value[i:i + 2], 16) for i in (0, 2, 4)]
    except ValueError:
        logger.warning(f"Invalid hex colour {color!r}, using grey")
        rgb = [128, 128, 128]
    return rgb + [255]


def build_scene(room: RoomSpec, items: Sequence[CatalogItem], placements: Sequence[Placement]) -> SceneGraph:
    """
    Materialize the room shell plus one box per placement.

    Args:
        room: Room extents in cm
        items: Catalog items, in the same order as `placements`
        placements: Output of placement.place_items for `items`

    Returns:
        SceneGraph with the scene and a camera pose derived from the room only
    """
    if len(items) != len(placements):
        raise ValueError(f"Got {len(items)} items but {len(placements)} placements")

    scene = trimesh.Scene()
    w, l, h = room.width / CM_PER_UNIT, room.length / CM_PER_UNIT, room.height / CM_PER_UNIT
    t = SHELL_THICKNESS

    # Room shell: floor, back wall (z=0), left wall (x=0)
    _add_box(scene, "floor", (w, t, l), (w / 2, -t / 2, l / 2), 0.0, room.floorColor)
    _add_box(scene, "wall_back", (w, h, t), (w / 2, h / 2, -t / 2), 0.0, room.wallColor)
    _add_box(scene, "wall_left", (t, h, l), (-t / 2, h / 2, l / 2), 0.0, room.wallColor)

    for index, (item, placement) in enumerate(zip(items, placements)):
        size = (item.width / CM_PER_UNIT, item.height / CM_PER_UNIT, item.depth / CM_PER_UNIT)
        center = (
            placement.x / CM_PER_UNIT,
            placement.y / CM_PER_UNIT + size[1] / 2,
            placement.z / CM_PER_UNIT
        )
        _add_box(
            scene,
            f"item_{index}_{placement.category.value}",
            size,
            center,
            placement.yaw,
            CATEGORY_COLORS[placement.category]
        )

    camera_pose = compute_camera_pose(room)
    logger.info(f"Built scene with {len(scene.graph.nodes_geometry)} meshes")

    return SceneGraph(scene=scene, camera_pose=camera_pose)


def compute_camera_pose(room: RoomSpec) -> np.ndarray:
    """
    Elevated three-quarter view from beyond the front-right corner.

    Eye at (1.5W, 1.8H, 2L), looking at the floor centre 30% up the room height.
    """
    w, l, h = room.width / CM_PER_UNIT, room.length / CM_PER_UNIT, room.height / CM_PER_UNIT
    eye = np.array([w * 1.5, h * 1.8, l * 2.0])
    target = np.array([w / 2, h * 0.3, l / 2])

    pose = np.eye(4)
    pose[:3, :3] = look_at_rotation(eye, target, np.array([0.0, 1.0, 0.0]))
    pose[:3, 3] = eye
    return pose


def look_at_rotation(eye: np.ndarray, target: np.ndarray, up: np.ndarray) -> np.ndarray:
    """Compute rotation matrix for camera looking at target."""
    forward = target - eye
    forward = forward / np.linalg.norm(forward)
    right = np.cross(forward, up)
    right = right / np.linalg.norm(right)
    actual_up = np.cross(right, forward)

    rotation = np.eye(3)
    rotation[0, :] = right
    rotation[1, :] = actual_up
    rotation[2, :] = -forward
    return rotation.T


def export_glb(scene_graph: SceneGraph) -> bytes:
    """
    Export scene to GLB bytes.
    """
    return scene_graph.scene.export(file_type='glb')


def _add_box(
    scene: trimesh.Scene,
    name: str,
    extents: Tuple[float, float, float],
    center: Tuple[float, float, float],
    yaw: float,
    color: str
):
    box = trimesh.creation.box(extents=extents)
    box.visual.face_colors = hex_to_rgba(color)

    transform = trimesh.transformations.rotation_matrix(yaw, [0, 1, 0])
    transform[:3, 3] = center
    scene.add_geometry(box, node_name=name, geom_name=name, transform=transform)
