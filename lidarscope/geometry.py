"""Basic geometric types for the highway scene: colours, vectors, boxes and cars."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

# Rendering property keys and values understood by a scene.
REPRESENTATION = "representation"
SURFACE = "surface"
WIREFRAME = "wireframe"
COLOR = "color"
OPACITY = "opacity"
POINT_SIZE = "point_size"


@dataclass(frozen=True)
class Color:
    """An RGB colour with components in [0, 1]; -1 marks "use the data's own colouring"."""

    r: float
    g: float
    b: float


@dataclass(frozen=True)
class Vect3:
    """A three-dimensional vector in metres."""

    x: float
    y: float
    z: float

    def __add__(self, other: Vect3) -> Vect3:
        if not isinstance(other, Vect3):
            return NotImplemented
        return Vect3(self.x + other.x, self.y + other.y, self.z + other.z)


class CameraAngle(Enum):
    """Preset viewpoints for the scene camera."""

    XY = "xy"
    TOP_DOWN = "top_down"
    SIDE = "side"
    FPS = "fps"


@dataclass
class Box:
    """An axis-aligned bounding box."""

    x_min: float
    y_min: float
    z_min: float
    x_max: float
    y_max: float
    z_max: float


@dataclass
class BoxQ:
    """An oriented bounding box: centre, rotation quaternion (w, x, y, z) and extents."""

    transform: tuple[float, float, float]
    quaternion: tuple[float, float, float, float]
    cube_length: float
    cube_width: float
    cube_height: float


def inbetween(point: float, center: float, span: float) -> bool:
    """Return True if ``point`` lies within ``span`` of ``center`` (inclusive)."""
    return center - span <= point <= center + span


@dataclass
class Car:
    """A car made of a lower body and a narrower cabin on top."""

    position: Vect3
    dimensions: Vect3
    color: Color
    name: str

    def render(self, viewer: Any) -> None:
        """Add the car's body and cabin cubes to ``viewer``."""
        pos, dim = self.position, self.dimensions
        self._add_part(
            viewer,
            self.name,
            (pos.x - dim.x / 2, pos.x + dim.x / 2),
            (pos.y - dim.y / 2, pos.y + dim.y / 2),
            (pos.z, pos.z + dim.z * 2 / 3),
        )
        self._add_part(
            viewer,
            self.name + "Top",
            (pos.x - dim.x / 4, pos.x + dim.x / 4),
            (pos.y - dim.y / 2, pos.y + dim.y / 2),
            (pos.z + dim.z * 2 / 3, pos.z + dim.z),
        )

    def _add_part(self, viewer: Any, name: str, xs, ys, zs) -> None:
        viewer.add_cube(xs[0], xs[1], ys[0], ys[1], zs[0], zs[1], self.color, name)
        viewer.set_property(name, REPRESENTATION, SURFACE)
        viewer.set_property(name, COLOR, self.color)
        viewer.set_property(name, OPACITY, 1.0)

    def check_collision(self, point: Vect3) -> bool:
        """Return True if ``point`` lies inside the body or the cabin."""
        pos, dim = self.position, self.dimensions
        in_body = (
            inbetween(point.x, pos.x, dim.x / 2)
            and inbetween(point.y, pos.y, dim.y / 2)
            and inbetween(point.z, pos.z + dim.z / 3, dim.z / 3)
        )
        in_cabin = (
            inbetween(point.x, pos.x, dim.x / 4)
            and inbetween(point.y, pos.y, dim.y / 2)
            and inbetween(point.z, pos.z + dim.z * 5 / 6, dim.z / 6)
        )
        return in_body or in_cabin