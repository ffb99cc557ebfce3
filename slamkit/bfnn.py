"""Brute-force nearest-neighbour search on point clouds."""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor

import numpy as np

_CHUNK_ELEMENTS = 1_000_000


def _as_cloud(cloud) -> np.ndarray:
    return np.asarray(cloud, dtype=float).reshape(-1, 3)


def _dist2(cloud: np.ndarray, point) -> np.ndarray:
    return ((cloud - np.asarray(point, dtype=float).reshape(3)) ** 2).sum(axis=1)


def _check_nonempty(cloud: np.ndarray) -> None:
    if len(cloud) == 0:
        raise ValueError("cannot search an empty cloud")


def bfnn_point(cloud, point) -> int:
    """Index of the point of cloud closest to point."""
    pts = _as_cloud(cloud)
    _check_nonempty(pts)
    return int(np.argmin(_dist2(pts, point)))


def bfnn_point_k(cloud, point, k: int = 5) -> list[int]:
    """Indices of the k points of cloud closest to point, nearest first."""
    pts = _as_cloud(cloud)
    if k > len(pts):
        raise ValueError(f"cannot take {k} neighbours from {len(pts)} points")
    order = np.argsort(_dist2(pts, point), kind="stable")
    return [int(i) for i in order[:k]]


def bfnn_cloud(cloud1, cloud2) -> list[tuple[int, int]]:
    """For each point of cloud2, the pair (index of nearest in cloud1, index in cloud2)."""
    target = _as_cloud(cloud1)
    return [(bfnn_point(target, q), idx) for idx, q in enumerate(_as_cloud(cloud2))]


def _chunks(n_query: int, n_target: int) -> list[range]:
    size = max(1, _CHUNK_ELEMENTS // max(1, n_target))
    return [range(s, min(s + size, n_query)) for s in range(0, n_query, size)]


def _chunk_dist2(target: np.ndarray, queries: np.ndarray) -> np.ndarray:
    return ((target[None, :, :] - queries[:, None, :]) ** 2).sum(axis=2)


def bfnn_cloud_mt(cloud1, cloud2) -> list[tuple[int, int]]:
    """Same result as bfnn_cloud, computed over blocks of queries in worker threads."""
    target = _as_cloud(cloud1)
    queries = _as_cloud(cloud2)
    if len(queries) == 0:
        return []
    _check_nonempty(target)

    def work(block: range) -> np.ndarray:
        return np.argmin(_chunk_dist2(target, queries[block.start:block.stop]), axis=1)

    with ThreadPoolExecutor(max_workers=os.cpu_count()) as pool:
        nearest = np.concatenate(list(pool.map(work, _chunks(len(queries), len(target)))))
    return [(int(m), idx) for idx, m in enumerate(nearest)]


def bfnn_cloud_mt_k(cloud1, cloud2, k: int = 5) -> list[tuple[int, int]]:
    """k nearest neighbours for every point of cloud2, as k consecutive pairs per query."""
    target = _as_cloud(cloud1)
    queries = _as_cloud(cloud2)
    if k > len(target):
        raise ValueError(f"cannot take {k} neighbours from {len(target)} points")
    if len(queries) == 0:
        return []

    def work(block: range) -> np.ndarray:
        d2 = _chunk_dist2(target, queries[block.start:block.stop])
        return np.argsort(d2, axis=1, kind="stable")[:, :k]

    with ThreadPoolExecutor(max_workers=os.cpu_count()) as pool:
        nearest = np.concatenate(list(pool.map(work, _chunks(len(queries), len(target)))))
    return [(int(m), idx) for idx, row in enumerate(nearest) for m in row]