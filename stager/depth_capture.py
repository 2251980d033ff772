"""
Off-screen capture of a built scene, used to condition image synthesis.

Renders exactly one frame with pyrender and returns it as a PNG data URI.
A missing GL stack is expected on some hosts, so every failure degrades
to None instead of raising.
"""

import io
import logging
from contextlib import contextmanager
from typing import Optional

import numpy as np
from PIL import Image

from stager.config import CAPTURE_CHANNEL
from stager.scene_builder import SceneGraph
from stager.utils import to_data_uri

logger = logging.getLogger(__name__)

# Nearest surface maps to 255, farthest to this; empty pixels stay 0
FAR_INTENSITY = 32


class RenderContextError(Exception):
    """Offscreen rendering is unavailable or the frame could not be produced."""
    pass


def _load_pyrender():
    try:
        import pyrender
    except Exception as e:
        # PyOpenGL raises more than ImportError when the platform backend is missing
        raise RenderContextError(f"pyrender unavailable: {e}") from e
    return pyrender


@contextmanager
def offscreen_renderer(pyrender, width: int, height: int):
    """Yield an OffscreenRenderer and release its GL context on every exit path."""
    try:
        renderer = pyrender.OffscreenRenderer(width, height)
    except Exception as e:
        raise RenderContextError(f"Could not create GL context: {e}") from e

    try:
        yield renderer
    finally:
        renderer.delete()


def capture_depth(scene_graph: SceneGraph, channel: str = CAPTURE_CHANNEL) -> Optional[str]:
    """
    Render the scene from its camera and encode the frame.

    Args:
        scene_graph: Output of scene_builder.build_scene
        channel: 'depth' for a grayscale depth map, 'color' for the shaded frame

    Returns:
        PNG data URI, or None if rendering is unavailable
    """
    try:
        pyrender = _load_pyrender()
        pr_scene = _to_pyrender_scene(pyrender, scene_graph)

        with offscreen_renderer(pyrender, scene_graph.width, scene_graph.height) as renderer:
            try:
                color, depth = renderer.render(
                    pr_scene,
                    flags=pyrender.RenderFlags.SHADOWS_DIRECTIONAL
                )
            except Exception as e:
                raise RenderContextError(f"Frame render failed: {e}") from e

    except RenderContextError as e:
        logger.warning(f"Scene capture unavailable, continuing without it: {e}")
        return None

    if channel == "color":
        uri = encode_color_frame(color)
    else:
        uri = encode_depth_frame(depth)

    logger.info(f"Captured {channel} frame {scene_graph.width}x{scene_graph.height}: {len(uri)/1024:.1f}KB")
    return uri


def _to_pyrender_scene(pyrender, scene_graph: SceneGraph):
    try:
        pr_scene = pyrender.Scene(ambient_light=[0.3, 0.3, 0.3], bg_color=[0.0, 0.0, 0.0, 1.0])

        scene = scene_graph.scene
        for node_name in scene.graph.nodes_geometry:
            transform, geometry_name = scene.graph[node_name]
            mesh = pyrender.Mesh.from_trimesh(scene.geometry[geometry_name], smooth=False)
            pr_scene.add(mesh, pose=transform)

        aspect = scene_graph.width / scene_graph.height
        camera = pyrender.PerspectiveCamera(yfov=scene_graph.yfov, aspectRatio=aspect)
        pr_scene.add(camera, pose=scene_graph.camera_pose)

        light = pyrender.DirectionalLight(color=[1.0, 1.0, 1.0], intensity=3.0)
        pr_scene.add(light, pose=scene_graph.camera_pose)
    except Exception as e:
        raise RenderContextError(f"Could not convert scene: {e}") from e

    return pr_scene


def encode_depth_frame(depth: np.ndarray) -> str:
    """
    Encode a float depth buffer as an 8-bit grayscale PNG data URI.

    Zero depth (nothing hit) stays black; hit pixels are linearly mapped
    so the nearest surface is white.
    """
    depth = np.asarray(depth, dtype=np.float32)
    hit = depth > 0
    gray = np.zeros(depth.shape, dtype=np.uint8)

    if hit.any():
        near = float(depth[hit].min())
        far = float(depth[hit].max())
        span = far - near
        if span > 0:
            scaled = 255.0 - (depth[hit] - near) / span * (255.0 - FAR_INTENSITY)
        else:
            scaled = np.full(depth[hit].shape, 255.0)
        gray[hit] = np.clip(np.round(scaled), 0, 255).astype(np.uint8)

    return _png_data_uri(Image.fromarray(gray))


def encode_color_frame(color: np.ndarray) -> str:
    img = Image.fromarray(np.asarray(color, dtype=np.uint8)).convert("RGB")
    return _png_data_uri(img)


def _png_data_uri(img: Image.Image) -> str:
    buffer = io.BytesIO()
    img.save(buffer, format='PNG')
    return to_data_uri(buffer.getvalue(), "image/png")
