"""Voxel-grid down-sampling, box cropping and bounding boxes for point clouds."""

from __future__ import annotations

import math
from typing import Sequence, Union

from .geometry import Box
from .pointcloud import Point, PointCloud


def _finite(p: Point) -> bool:
    return math.isfinite(p.x) and math.isfinite(p.y) and math.isfinite(p.z)


def voxel_grid(cloud: PointCloud, leaf_size: Union[float, Sequence[float]]) -> PointCloud:
    """Replace the points in each voxel of size ``leaf_size`` by their centroid.

    ``leaf_size`` is one edge length or an (x, y, z) triple. Non-finite points are
    dropped; output points are ordered by voxel index, x varying fastest.
    """
    if isinstance(leaf_size, (int, float)):
        leaves = (float(leaf_size),) * 3
    else:
        leaves = tuple(float(v) for v in leaf_size)
        if len(leaves) != 3:
            raise ValueError("leaf_size must be a number or three numbers")
    if any(not leaf > 0 for leaf in leaves):
        raise ValueError("leaf sizes must be positive")

    voxels: dict[tuple[int, int, int], list[Point]] = {}
    for p in cloud:
        if not _finite(p):
            continue
        i = math.floor(p.x / leaves[0])
        j = math.floor(p.y / leaves[1])
        k = math.floor(p.z / leaves[2])
        voxels.setdefault((k, j, i), []).append(p)

    centroids = []
    for key in sorted(voxels):
        members = voxels[key]
        n = len(members)
        centroids.append(
            Point(
                sum(p.x for p in members) / n,
                sum(p.y for p in members) / n,
                sum(p.z for p in members) / n,
                sum(p.intensity for p in members) / n,
            )
        )
    return PointCloud(centroids, cloud.with_intensity)


def crop_box_indices(
    cloud: PointCloud, min_point: Sequence[float], max_point: Sequence[float]
) -> list[int]:
    """Return indices of finite points inside the inclusive box [min_point, max_point].

    Only the first three components of each corner are used.
    """
    lo = tuple(min_point[:3])
    hi = tuple(max_point[:3])
    if len(lo) != 3 or len(hi) != 3:
        raise ValueError("box corners need at least three components")
    return [
        i
        for i, p in enumerate(cloud)
        if _finite(p)
        and lo[0] <= p.x <= hi[0]
        and lo[1] <= p.y <= hi[1]
        and lo[2] <= p.z <= hi[2]
    ]


def crop_box(
    cloud: PointCloud, min_point: Sequence[float], max_point: Sequence[float]
) -> PointCloud:
    """Return the points of ``cloud`` inside the inclusive box."""
    return cloud.select(crop_box_indices(cloud, min_point, max_point))


def bounding_box(cloud: PointCloud) -> Box:
    """Return the axis-aligned box spanning the finite points of ``cloud``."""
    points = [p for p in cloud if _finite(p)]
    if not points:
        raise ValueError("cannot bound a cloud with no finite points")
    xs = [p.x for p in points]
    ys = [p.y for p in points]
    zs = [p.z for p in points]
    return Box(min(xs), min(ys), min(zs), max(xs), max(ys), max(zs))