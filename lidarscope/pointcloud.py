"""Points and point clouds."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, Sequence


@dataclass(frozen=True)
class Point:
    """A point in space with an optional intensity value."""

    x: float
    y: float
    z: float = 0.0
    intensity: float = 0.0


@dataclass
class PointCloud:
    """An unorganised list of points.

    ``with_intensity`` marks clouds whose points carry meaningful intensity values.
    """

    points: list[Point] = field(default_factory=list)
    with_intensity: bool = False

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[Point]:
        return iter(self.points)

    def __getitem__(self, index):
        return self.points[index]

    def append(self, point: Point) -> None:
        self.points.append(point)

    def extend(self, points: Iterable[Point]) -> None:
        self.points.extend(points)

    def clear(self) -> None:
        self.points.clear()

    def select(self, indices: Iterable[int], negative: bool = False) -> PointCloud:
        """Return a cloud of the points at ``indices`` in the given order,
        or, with ``negative``, of every other point in cloud order."""
        if negative:
            excluded = set(indices)
            kept = [p for i, p in enumerate(self.points) if i not in excluded]
        else:
            kept = []
            for i in indices:
                if not 0 <= i < len(self.points):
                    raise IndexError(f"point index {i} out of range")
                kept.append(self.points[i])
        return PointCloud(kept, self.with_intensity)

    @classmethod
    def from_xy(cls, points: Iterable[Sequence[float]]) -> PointCloud:
        """Build a cloud in the z = 0 plane from (x, y) pairs."""
        return cls([Point(float(p[0]), float(p[1]), 0.0) for p in points])