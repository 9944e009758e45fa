"""
Renderer Module - Point Cloud Preview
=====================================
Projects the scene's particles into an OpenCV image: perspective camera,
depth-sorted points, the topper star and a soft glow pass. A light 2D
snowfall can be layered on top of the finished frame.
"""

import math
import cv2
import numpy as np
from typing import Optional, Tuple

from .scene import ParticleScene


def rotation_matrix(pitch: float, yaw: float) -> np.ndarray:
    """Scene rotation, pitch about x applied after yaw about y."""
    cp, sp = math.cos(pitch), math.sin(pitch)
    cy, sy = math.cos(yaw), math.sin(yaw)
    rx = np.array([[1, 0, 0], [0, cp, -sp], [0, sp, cp]], dtype=np.float64)
    ry = np.array([[cy, 0, sy], [0, 1, 0], [-sy, 0, cy]], dtype=np.float64)
    return rx @ ry


class PointCloudRenderer:
    """Lightweight renderer for the particle scene."""

    FOV_DEG = 40.0
    CAMERA_POSITION = (0.0, 9.0, 32.0)
    CAMERA_PITCH = -0.25
    NEAR = 0.1

    def __init__(self, width: int = 960, height: int = 540, point_size: int = 2, glow: bool = True):
        self.width = int(width)
        self.height = int(height)
        self.point_size = int(point_size)
        self.glow = glow
        self._focal = (self.height * 0.5) / math.tan(math.radians(self.FOV_DEG) * 0.5)
        # View transform undoes the camera pitch
        self._view = rotation_matrix(-self.CAMERA_PITCH, 0.0)

    def project(self, points: np.ndarray, pitch: float, yaw: float) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
        """
        Project scene-space points to pixels.

        Returns:
            (px, py, depth, visible) arrays
        """
        world = points @ rotation_matrix(pitch, yaw).T + np.asarray(ParticleScene.SCENE_OFFSET)
        view = (world - np.asarray(self.CAMERA_POSITION)) @ self._view.T

        # Camera looks down -z
        depth = -view[:, 2]
        visible = depth > self.NEAR
        safe = np.where(visible, depth, 1.0)
        px = self.width * 0.5 + view[:, 0] / safe * self._focal
        py = self.height * 0.5 - view[:, 1] / safe * self._focal
        visible &= (px >= 0) & (px < self.width) & (py >= 0) & (py < self.height)
        return px.astype(np.int32), py.astype(np.int32), depth, visible

    def render(self, scene: ParticleScene) -> np.ndarray:
        """Draw the scene into a new BGR image."""
        img = np.zeros((self.height, self.width, 3), dtype=np.uint8)
        pitch, yaw = scene.orientation()

        px, py, depth, visible = self.project(scene.positions(), pitch, yaw)
        colors = (scene.colors()[:, ::-1] * 255.0).astype(np.uint8)

        # Far to near so closer particles end up on top
        idx = np.flatnonzero(visible)
        idx = idx[np.argsort(-depth[idx])]
        img[py[idx], px[idx]] = colors[idx]

        if self.point_size > 1:
            kernel = np.ones((self.point_size, self.point_size), np.uint8)
            img = cv2.dilate(img, kernel)

        self._draw_star(img, scene, pitch, yaw)

        if self.glow:
            blur = cv2.GaussianBlur(img, (0, 0), 3)
            img = cv2.addWeighted(img, 0.8, blur, 0.6, 0)
        return img

    def _draw_star(self, img: np.ndarray, scene: ParticleScene, pitch: float, yaw: float):
        px, py, _, visible = self.project(scene.star.outline(), pitch, yaw)
        if not visible.all():
            return
        pts = np.column_stack([px, py]).astype(np.int32)
        fill = tuple(int(c * 255) for c in reversed(scene.theme.star_rgb()))
        glow = tuple(int(c * 255) for c in reversed(scene.theme.star_emissive_rgb()))
        cv2.fillPoly(img, [pts], fill, cv2.LINE_AA)
        cv2.polylines(img, [pts], True, glow, 2, cv2.LINE_AA)


class Snowfall:
    """
    A few soft snowflakes drifting down over the finished frame.

    Flakes live in pixel space. One that falls past the bottom edge
    respawns above the top at a new random column.
    """

    COUNT = 10
    RADIUS_RANGE = (10.0, 16.0)
    SPEED_RANGE = (30.0, 45.0)  # px/s
    RESPAWN_MARGIN = 50.0

    def __init__(self, width: int, height: int, count: int = COUNT,
                 rng: Optional[np.random.Generator] = None):
        self.width = int(width)
        self.height = int(height)
        self.rng = rng if rng is not None else np.random.default_rng()

        lo, hi = self.RADIUS_RANGE
        self.radius = lo + self.rng.random(count) * (hi - lo)
        lo, hi = self.SPEED_RANGE
        self.speed = lo + self.rng.random(count) * (hi - lo)
        self.x = self.rng.random(count) * self.width
        self.y = self._spawn_height(count)

    def _spawn_height(self, n: int) -> np.ndarray:
        # Start just above the top edge
        return -80.0 - self.rng.random(n) * 70.0

    def step(self, dt: float):
        """Move the flakes down by dt seconds."""
        self.y += self.speed * max(0.0, float(dt))
        gone = self.y > self.height + self.RESPAWN_MARGIN
        n = int(np.count_nonzero(gone))
        if n:
            self.y[gone] = self._spawn_height(n)
            self.x[gone] = self.rng.random(n) * self.width

    def draw(self, img: np.ndarray) -> np.ndarray:
        """Composite the flakes onto a copy of img."""
        layer = np.zeros_like(img)
        for x, y, r in zip(self.x, self.y, self.radius):
            cv2.circle(layer, (int(x), int(y)), max(1, int(r * 0.5)), (255, 255, 255), -1, cv2.LINE_AA)
        # Blur turns the solid cores into soft radial blobs
        layer = cv2.GaussianBlur(layer, (0, 0), 4)
        return cv2.add(img, layer)
