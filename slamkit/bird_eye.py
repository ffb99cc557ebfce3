"""Rendering a point cloud as a bird's-eye-view image."""

from __future__ import annotations

from pathlib import Path

import numpy as np
from PIL import Image

BACKGROUND = (255, 255, 255)
POINT_COLOR = (79, 143, 227)
"""RGB colour of pixels that hold points."""


def _as_points(cloud) -> np.ndarray:
    pts = np.asarray(cloud, dtype=float)
    if pts.ndim == 1:
        pts = pts.reshape(-1, 3)
    if pts.ndim != 2 or pts.shape[1] < 3:
        raise ValueError("cloud must be an array of points with at least x, y, z")
    return pts


def generate_bev_image(cloud, resolution: float = 0.1, min_z: float = 0.2, max_z: float = 2.5) -> np.ndarray:
    """Top-down RGB image of the cloud: one pixel per resolution square, white background.

    Only points with min_z <= z <= max_z are drawn.
    """
    pts = _as_points(cloud)
    if len(pts) == 0:
        raise ValueError("cannot render an empty cloud")
    x, y, z = pts[:, 0], pts[:, 1], pts[:, 2]
    min_x, max_x = float(x.min()), float(x.max())
    min_y, max_y = float(y.min()), float(y.max())

    inv_r = 1.0 / resolution
    rows = int((max_y - min_y) * inv_r)
    cols = int((max_x - min_x) * inv_r)

    x_center = 0.5 * (max_x + min_x)
    y_center = 0.5 * (max_y + min_y)
    x_center_image = float(cols // 2)
    y_center_image = float(rows // 2)

    image = np.full((rows, cols, 3), BACKGROUND, dtype=np.uint8)

    px = np.trunc((x - x_center) * inv_r + x_center_image)
    py = np.trunc((y - y_center) * inv_r + y_center_image)
    keep = (px >= 0) & (px < cols) & (py >= 0) & (py < rows) & (z >= min_z) & (z <= max_z)
    image[py[keep].astype(int), px[keep].astype(int)] = POINT_COLOR
    return image


def write_image(image, path) -> None:
    """Save an RGB uint8 image; the format follows the file extension."""
    data = np.asarray(image, dtype=np.uint8)
    if data.size == 0:
        raise ValueError("cannot write an empty image")
    Image.fromarray(data).save(Path(path))