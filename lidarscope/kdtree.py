"""A two-dimensional k-d tree and Euclidean clustering built on it."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator, Optional, Sequence

from .geometry import Box, Color, Vect3


@dataclass
class Node:
    """A tree node holding a point and its id."""

    point: list[float]
    id: int
    left: Optional[Node] = None
    right: Optional[Node] = None


def _within(point1: Sequence[float], point2: Sequence[float], tol: float) -> bool:
    dx = point1[0] - point2[0]
    dy = point1[1] - point2[1]
    return math.sqrt(dx * dx + dy * dy) <= tol


class KdTree:
    """A k-d tree over 2D points, splitting on x at even depths and y at odd ones."""

    def __init__(self) -> None:
        self.root: Optional[Node] = None

    def insert(self, point: Sequence[float], point_id: int) -> None:
        """Insert ``point`` under ``point_id``; ties go to the right subtree."""
        new = Node(list(point), point_id)
        if self.root is None:
            self.root = new
            return
        node, depth = self.root, 0
        while True:
            axis = depth % 2
            if point[axis] < node.point[axis]:
                if node.left is None:
                    node.left = new
                    return
                node = node.left
            else:
                if node.right is None:
                    node.right = new
                    return
                node = node.right
            depth += 1

    def search(self, target: Sequence[float], distance_tol: float) -> list[int]:
        """Return ids of points within ``distance_tol`` of ``target``, in preorder."""
        ids: list[int] = []
        self._search(target, self.root, 0, distance_tol, ids)
        return ids

    def _search(
        self,
        target: Sequence[float],
        node: Optional[Node],
        depth: int,
        tol: float,
        ids: list[int],
    ) -> None:
        if node is None:
            return
        x, y = node.point[0], node.point[1]
        if (
            target[0] - tol <= x <= target[0] + tol
            and target[1] - tol <= y <= target[1] + tol
            and _within(target, node.point, tol)
        ):
            ids.append(node.id)
        axis = depth % 2
        if target[axis] - tol < node.point[axis]:
            self._search(target, node.left, depth + 1, tol, ids)
        if target[axis] + tol > node.point[axis]:
            self._search(target, node.right, depth + 1, tol, ids)

    def __iter__(self) -> Iterator[Node]:
        """Yield the nodes in preorder."""
        stack = [self.root] if self.root is not None else []
        while stack:
            node = stack.pop()
            yield node
            if node.right is not None:
                stack.append(node.right)
            if node.left is not None:
                stack.append(node.left)


def euclidean_cluster(
    points: Sequence[Sequence[float]], tree: KdTree, distance_tol: float
) -> list[list[int]]:
    """Group point indices into clusters of points linked by ``distance_tol``."""
    processed: set[int] = set()
    clusters: list[list[int]] = []
    for idx in range(len(points)):
        if idx in processed:
            continue
        cluster = [idx]
        processed.add(idx)
        stack = [iter(tree.search(points[idx], distance_tol))]
        while stack:
            for neighbour in stack[-1]:
                if neighbour not in processed:
                    processed.add(neighbour)
                    cluster.append(neighbour)
                    stack.append(iter(tree.search(points[neighbour], distance_tol)))
                    break
            else:
                stack.pop()
        clusters.append(cluster)
    return clusters


def tree_split_lines(tree: KdTree, window: Box) -> list[tuple[Vect3, Vect3, Color]]:
    """Return the split lines of the tree clipped to ``window``, in preorder.

    x splits are blue vertical lines, y splits red horizontal ones.
    """
    lines: list[tuple[Vect3, Vect3, Color]] = []

    def walk(node: Optional[Node], win: Box, depth: int) -> None:
        if node is None:
            return
        lower = Box(win.x_min, win.y_min, win.z_min, win.x_max, win.y_max, win.z_max)
        upper = Box(win.x_min, win.y_min, win.z_min, win.x_max, win.y_max, win.z_max)
        if depth % 2 == 0:
            x = node.point[0]
            lines.append((Vect3(x, win.y_min, 0), Vect3(x, win.y_max, 0), Color(0, 0, 1)))
            lower.x_max = x
            upper.x_min = x
        else:
            y = node.point[1]
            lines.append((Vect3(win.x_min, y, 0), Vect3(win.x_max, y, 0), Color(1, 0, 0)))
            lower.y_max = y
            upper.y_min = y
        walk(node.left, lower, depth + 1)
        walk(node.right, upper, depth + 1)

    walk(tree.root, window, 0)
    return lines