"""RANSAC fitting of lines and planes to point clouds, plus sample line data."""

from __future__ import annotations

import logging
import math
import random
from typing import Iterable, Optional

from .pointcloud import Point, PointCloud

logger = logging.getLogger(__name__)


def create_line_data(rng: Optional[random.Random] = None) -> PointCloud:
    """Return ten noisy points along y = x followed by ten scattered outliers."""
    rng = rng if rng is not None else random.Random()
    scatter = 0.6
    cloud = PointCloud()
    for i in range(-5, 5):
        rx = 2 * (rng.random() - 0.5)
        ry = 2 * (rng.random() - 0.5)
        cloud.append(Point(i + scatter * rx, i + scatter * ry, 0.0))
    for _ in range(10):
        rx = 2 * (rng.random() - 0.5)
        ry = 2 * (rng.random() - 0.5)
        cloud.append(Point(5 * rx, 5 * ry, 0.0))
    return cloud


def _best_model(cloud, max_iterations, distance_tol, rng, sample_size, fit):
    if len(cloud) < sample_size:
        raise ValueError(f"need at least {sample_size} points, got {len(cloud)}")
    rng = rng if rng is not None else random.Random()
    best: set[int] = set()
    iteration = 0
    while iteration < max_iterations:
        sample = [cloud[i] for i in rng.sample(range(len(cloud)), sample_size)]
        distance = fit(sample)
        inliers = (
            set()
            if distance is None
            else {i for i, p in enumerate(cloud) if distance(p) < distance_tol}
        )
        if len(inliers) > len(best):
            best = inliers
        logger.debug("iteration %d: best has %d inliers", iteration, len(best))
        iteration += 1
    return best


def _line_through(sample):
    p1, p2 = sample
    a = p1.y - p2.y
    b = p2.x - p1.x
    c = p1.x * p2.y - p2.x * p1.y
    den = math.hypot(a, b)
    if den == 0:
        return None
    return lambda p: abs(a * p.x + b * p.y + c) / den


def _plane_through(sample):
    p1, p2, p3 = sample
    a1, b1, c1 = p2.x - p1.x, p2.y - p1.y, p2.z - p1.z
    a2, b2, c2 = p3.x - p1.x, p3.y - p1.y, p3.z - p1.z
    a = b1 * c2 - b2 * c1
    b = a2 * c1 - a1 * c2
    c = a1 * b2 - b1 * a2
    d = -a * p1.x - b * p1.y - c * p1.z
    den = math.sqrt(a * a + b * b + c * c)
    if den == 0:
        return None
    return lambda p: abs(a * p.x + b * p.y + c * p.z + d) / den


def ransac_line(
    cloud: PointCloud,
    max_iterations: float,
    distance_tol: float,
    rng: Optional[random.Random] = None,
) -> set[int]:
    """Return indices of the inliers of the best 2D line found in ``max_iterations`` tries.

    A point is an inlier when its distance to the line is strictly below ``distance_tol``.
    """
    return _best_model(cloud, max_iterations, distance_tol, rng, 2, _line_through)


def ransac_plane(
    cloud: PointCloud,
    max_iterations: float,
    distance_tol: float,
    rng: Optional[random.Random] = None,
) -> set[int]:
    """Return indices of the inliers of the best plane found in ``max_iterations`` tries."""
    return _best_model(cloud, max_iterations, distance_tol, rng, 3, _plane_through)


def split_by_indices(cloud: PointCloud, indices: Iterable[int]) -> tuple[PointCloud, PointCloud]:
    """Split ``cloud`` into (points at ``indices``, all other points), keeping cloud order."""
    chosen = set(indices)
    inliers = PointCloud(with_intensity=cloud.with_intensity)
    outliers = PointCloud(with_intensity=cloud.with_intensity)
    for i, p in enumerate(cloud):
        (inliers if i in chosen else outliers).append(p)
    return inliers, outliers