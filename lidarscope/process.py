"""Obstacle-detection pipeline: filtering, plane segmentation, clustering and I/O."""

from __future__ import annotations

import logging
import math
import random
import time
from collections import defaultdict, deque
from pathlib import Path
from typing import Iterable, Optional, Sequence

from . import filters, pcd, ransac
from .geometry import Box
from .pointcloud import PointCloud

logger = logging.getLogger(__name__)

# Region around the lidar occupied by the ego car's roof.
ROOF_MIN = (-1.5, -1.7, -1.0, 1.0)
ROOF_MAX = (2.6, 1.7, -0.4, 1.0)


def _euclidean_clusters(
    cloud: PointCloud, tolerance: float, min_size: int, max_size: int
) -> list[list[int]]:
    """Group point indices whose chains of neighbours lie within ``tolerance``.

    Clusters outside [min_size, max_size] are dropped; indices within a cluster are
    sorted and clusters are ordered from largest to smallest.
    """
    coords = [
        (p.x, p.y, p.z) if math.isfinite(p.x) and math.isfinite(p.y) and math.isfinite(p.z) else None
        for p in cloud
    ]

    def cell_of(c: tuple[float, float, float]) -> tuple[int, int, int]:
        return (
            math.floor(c[0] / tolerance),
            math.floor(c[1] / tolerance),
            math.floor(c[2] / tolerance),
        )

    grid: dict[tuple[int, int, int], list[int]] = defaultdict(list)
    for i, c in enumerate(coords):
        if c is not None:
            grid[cell_of(c)].append(i)

    tol2 = tolerance * tolerance
    offsets = [(dx, dy, dz) for dx in (-1, 0, 1) for dy in (-1, 0, 1) for dz in (-1, 0, 1)]
    processed = [c is None for c in coords]
    clusters: list[list[int]] = []

    for start, c in enumerate(coords):
        if processed[start]:
            continue
        processed[start] = True
        members = [start]
        queue = deque([start])
        while queue:
            current = coords[queue.popleft()]
            cx, cy, cz = cell_of(current)
            for dx, dy, dz in offsets:
                for j in grid.get((cx + dx, cy + dy, cz + dz), ()):
                    if processed[j]:
                        continue
                    other = coords[j]
                    d2 = (
                        (other[0] - current[0]) ** 2
                        + (other[1] - current[1]) ** 2
                        + (other[2] - current[2]) ** 2
                    )
                    if d2 <= tol2:
                        processed[j] = True
                        members.append(j)
                        queue.append(j)
        if min_size <= len(members) <= max_size:
            clusters.append(sorted(members))

    clusters.sort(key=len, reverse=True)
    return clusters


class ProcessPointClouds:
    """The stages of the lidar obstacle-detection pipeline."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng = rng if rng is not None else random.Random()

    def num_points(self, cloud: PointCloud) -> int:
        """Print and return the number of points in ``cloud``."""
        count = len(cloud)
        print(count)
        return count

    def filter_cloud(
        self,
        cloud: PointCloud,
        filter_res: float,
        min_point: Sequence[float],
        max_point: Sequence[float],
    ) -> PointCloud:
        """Down-sample, crop to the region of interest and drop the ego car's roof."""
        start = time.monotonic()
        filtered = filters.voxel_grid(cloud, filter_res)
        region = filters.crop_box(filtered, min_point, max_point)
        roof = filters.crop_box_indices(region, ROOF_MIN, ROOF_MAX)
        result = region.select(roof, negative=True)
        logger.debug("filtering took %d milliseconds", int((time.monotonic() - start) * 1000))
        return result

    def separate_clouds(
        self, inliers: Iterable[int], cloud: PointCloud
    ) -> tuple[PointCloud, PointCloud]:
        """Return (obstacle cloud, plane cloud) for the plane ``inliers`` of ``cloud``."""
        indices = list(inliers)
        plane = cloud.select(indices)
        obstacles = cloud.select(indices, negative=True)
        return obstacles, plane

    def segment_plane(
        self, cloud: PointCloud, max_iterations: int, distance_threshold: float
    ) -> tuple[PointCloud, PointCloud]:
        """Fit the dominant plane by RANSAC and return (obstacles, plane)."""
        start = time.monotonic()
        try:
            inliers = sorted(
                ransac.ransac_plane(cloud, max_iterations, distance_threshold, self.rng)
            )
        except ValueError:
            inliers = []
        if not inliers:
            logger.error("Could not estimate a planar model for the given dataset.")
        logger.debug(
            "plane segmentation took %d milliseconds", int((time.monotonic() - start) * 1000)
        )
        return self.separate_clouds(inliers, cloud)

    def clustering(
        self, cloud: PointCloud, cluster_tolerance: float, min_size: int, max_size: int
    ) -> list[PointCloud]:
        """Split ``cloud`` into Euclidean clusters, largest first."""
        if not cluster_tolerance > 0:
            raise ValueError("cluster tolerance must be positive")
        start = time.monotonic()
        clusters = [
            cloud.select(indices)
            for indices in _euclidean_clusters(cloud, cluster_tolerance, min_size, max_size)
        ]
        logger.debug(
            "clustering took %d milliseconds and found %d clusters",
            int((time.monotonic() - start) * 1000),
            len(clusters),
        )
        return clusters

    def bounding_box(self, cluster: PointCloud) -> Box:
        """Return the axis-aligned box around ``cluster``."""
        return filters.bounding_box(cluster)

    def save_pcd(self, cloud: PointCloud, path) -> None:
        """Write ``cloud`` as an ASCII PCD file."""
        pcd.save_pcd(cloud, path)

    def load_pcd(self, path) -> PointCloud:
        """Read a PCD file."""
        return pcd.load_pcd(path)

    def stream_pcd(self, directory) -> list[Path]:
        """Return the files of ``directory`` in chronological (sorted) order."""
        return pcd.stream_pcd(directory)

    def ransac_plane_segment(
        self, cloud: PointCloud, max_iterations: float, distance_tol: float
    ) -> tuple[PointCloud, PointCloud]:
        """Fit a plane with the hand-written RANSAC and return (inliers, outliers)."""
        inliers = ransac.ransac_plane(cloud, max_iterations, distance_tol, self.rng)
        return ransac.split_by_indices(cloud, inliers)