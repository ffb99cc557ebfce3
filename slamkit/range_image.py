"""Rendering a lidar scan as a range image coloured by distance."""

from __future__ import annotations

import numpy as np

_SECTORS = np.array([[1, 3, 0], [1, 0, 2], [3, 0, 1], [0, 2, 1], [0, 1, 3], [2, 1, 0]])


def _as_points(cloud) -> np.ndarray:
    pts = np.asarray(cloud, dtype=float)
    if pts.ndim == 1:
        pts = pts.reshape(-1, 3)
    if pts.ndim != 2 or pts.shape[1] < 3:
        raise ValueError("cloud must be an array of points with at least x, y, z")
    return pts


def _hsv_to_rgb(hsv: np.ndarray) -> np.ndarray:
    """8-bit HSV (hue in 0..180 for a full turn) to 8-bit RGB."""
    h = hsv[..., 0].astype(float) * (6.0 / 180.0)
    s = hsv[..., 1].astype(float) / 255.0
    v = hsv[..., 2].astype(float) / 255.0
    h = np.mod(h, 6.0)
    sector = np.floor(h).astype(int)
    frac = h - sector
    wrap = sector >= 6
    sector[wrap] = 0
    frac[wrap] = 0.0
    tab = np.stack((v, v * (1.0 - s), v * (1.0 - s * frac), v * (1.0 - s * (1.0 - frac))), axis=-1)
    bgr = np.take_along_axis(tab, _SECTORS[sector], axis=-1)
    return np.clip(np.rint(bgr[..., ::-1] * 255.0), 0, 255).astype(np.uint8)


def generate_range_image(
    cloud,
    azimuth_resolution_deg: float = 0.3,
    elevation_rows: int = 16,
    elevation_range: float = 15.0,
    lidar_height: float = 1.128,
) -> np.ndarray:
    """RGB range image: columns by azimuth, rows by elevation (up is up), hue by range.

    Empty pixels are black; where several points fall on a pixel the last wins.
    """
    pts = _as_points(cloud)
    cols = int(360 / azimuth_resolution_deg)
    rows = int(elevation_rows)
    hsv = np.zeros((rows, cols, 3), dtype=np.uint8)
    ele_resolution = elevation_range * 2 / elevation_rows

    if len(pts):
        x, y, z = pts[:, 0], pts[:, 1], pts[:, 2]
        azimuth = np.degrees(np.arctan2(y, x))
        azimuth = np.where(azimuth < 0, azimuth + 360.0, azimuth)
        rng = np.hypot(x, y)
        with np.errstate(divide="ignore", invalid="ignore"):
            elevation = np.degrees(np.arcsin((z - lidar_height) / rng))

        valid = np.isfinite(elevation)
        col = np.trunc(azimuth / azimuth_resolution_deg)
        row = np.trunc(np.where(valid, (elevation + elevation_range) / ele_resolution + 0.5, -1.0))
        valid &= (col >= 0) & (col < cols) & (row >= 0) & (row < rows)

        idx = np.nonzero(valid)[0]
        if len(idx):
            col_i = col[idx].astype(int)
            row_i = row[idx].astype(int)
            flat = row_i * cols + col_i
            _, first = np.unique(flat[::-1], return_index=True)
            keep = idx[::-1][first]
            hue = np.clip(np.trunc(rng[keep] / 100.0 * 255.0), 0, 255).astype(np.uint8)
            hsv[row[keep].astype(int), col[keep].astype(int)] = np.stack(
                (hue, np.full_like(hue, 255), np.full_like(hue, 127)), axis=-1
            )

    return _hsv_to_rgb(hsv[::-1])