"""An in-memory scene that records rendered shapes and point clouds."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Union

from .geometry import (
    COLOR,
    OPACITY,
    POINT_SIZE,
    REPRESENTATION,
    SURFACE,
    WIREFRAME,
    Box,
    BoxQ,
    Color,
    Vect3,
)
from .pointcloud import PointCloud

INTENSITY_FIELD = "intensity"
COLOR_FIELD = "color_field"


@dataclass
class Shape:
    """One item in a scene: a cube, an oriented cube, a line or a point cloud."""

    name: str
    kind: str
    coords: tuple = ()
    color: Optional[Color] = None
    cloud: Optional[PointCloud] = None
    properties: dict[str, Any] = field(default_factory=dict)


def _xyz(p: Any) -> tuple[float, float, float]:
    return (float(p.x), float(p.y), float(p.z))


class Scene:
    """A viewer holding named shapes and point clouds plus camera settings."""

    def __init__(self, title: str = "Viewer") -> None:
        self.title = title
        self.shapes: dict[str, Shape] = {}
        self.point_clouds: dict[str, Shape] = {}
        self.background = Color(0, 0, 0)
        self.coordinate_system: Optional[float] = None
        self.camera_position: Optional[tuple[float, float, float]] = None
        self.camera_view_up: Optional[tuple[float, float, float]] = None
        self.ray_count = 0

    def _add(self, shape: Shape) -> None:
        if shape.name in self.shapes:
            raise ValueError(f"shape {shape.name!r} already exists")
        self.shapes[shape.name] = shape

    def add_cube(self, x_min, x_max, y_min, y_max, z_min, z_max, color: Color, name: str) -> None:
        self._add(Shape(name, "cube", (x_min, x_max, y_min, y_max, z_min, z_max), color))

    def add_line(self, start, end, color: Color, name: str) -> None:
        self._add(Shape(name, "line", (_xyz(start), _xyz(end)), color))

    def add_point_cloud(self, cloud: PointCloud, name: str) -> None:
        if name in self.point_clouds:
            raise ValueError(f"point cloud {name!r} already exists")
        self.point_clouds[name] = Shape(name, "point_cloud", cloud=cloud)

    def set_property(self, name: str, key: str, value: Any) -> None:
        """Set a rendering property on the shape or point cloud called ``name``."""
        target = self.shapes.get(name) or self.point_clouds.get(name)
        if target is None:
            raise KeyError(name)
        target.properties[key] = value

    def remove_shape(self, name: str) -> None:
        if name not in self.shapes:
            raise KeyError(name)
        del self.shapes[name]

    def remove_all_point_clouds(self) -> None:
        self.point_clouds.clear()

    def remove_all_shapes(self) -> None:
        self.shapes.clear()

    def set_camera(self, position, view_up) -> None:
        self.camera_position = tuple(float(v) for v in position)
        self.camera_view_up = tuple(float(v) for v in view_up)


def render_highway(viewer: Scene) -> None:
    """Draw the road surface and its two lane markings."""
    road_length = 50.0
    road_width = 12.0
    road_height = 0.2
    grey = Color(0.2, 0.2, 0.2)
    viewer.add_cube(
        -road_length / 2, road_length / 2,
        -road_width / 2, road_width / 2,
        -road_height, 0,
        grey, "highwayPavement",
    )
    viewer.set_property("highwayPavement", REPRESENTATION, SURFACE)
    viewer.set_property("highwayPavement", COLOR, grey)
    viewer.set_property("highwayPavement", OPACITY, 1.0)
    yellow = Color(1, 1, 0)
    for name, y in (("line1", -road_width / 6), ("line2", road_width / 6)):
        viewer.add_line(
            Vect3(-road_length / 2, y, 0.01), Vect3(road_length / 2, y, 0.01), yellow, name
        )


def render_rays(viewer: Scene, origin: Vect3, cloud: PointCloud) -> None:
    """Draw a red ray from ``origin`` to every point of ``cloud``."""
    red = Color(1, 0, 0)
    for point in cloud:
        viewer.add_line(origin, point, red, f"ray{viewer.ray_count}")
        viewer.ray_count += 1


def clear_rays(viewer: Scene) -> None:
    """Remove every ray drawn by :func:`render_rays`."""
    while viewer.ray_count:
        viewer.ray_count -= 1
        viewer.remove_shape(f"ray{viewer.ray_count}")


def render_point_cloud(
    viewer: Scene, cloud: PointCloud, name: str, color: Optional[Color] = None
) -> None:
    """Add ``cloud`` to the scene.

    Clouds with intensity are coloured by intensity unless a colour is given
    (or the colour's red component is -1), and drawn with point size 2; plain
    clouds default to white and point size 4.
    """
    viewer.add_point_cloud(cloud, name)
    if cloud.with_intensity:
        if color is None or color.r == -1:
            viewer.set_property(name, COLOR_FIELD, INTENSITY_FIELD)
        else:
            viewer.set_property(name, COLOR, color)
        viewer.set_property(name, POINT_SIZE, 2)
    else:
        viewer.set_property(name, POINT_SIZE, 4)
        viewer.set_property(name, COLOR, color if color is not None else Color(1, 1, 1))


def render_box(
    viewer: Scene,
    box: Union[Box, BoxQ],
    box_id: int,
    color: Color = Color(1, 0, 0),
    opacity: float = 1.0,
) -> None:
    """Draw a wireframe box and a translucent filled copy of it."""
    opacity = min(max(opacity, 0.0), 1.0)
    for name, representation, alpha in (
        (f"box{box_id}", WIREFRAME, opacity),
        (f"boxFill{box_id}", SURFACE, opacity * 0.3),
    ):
        if isinstance(box, BoxQ):
            viewer._add(
                Shape(
                    name,
                    "oriented_cube",
                    (
                        tuple(box.transform),
                        tuple(box.quaternion),
                        box.cube_length,
                        box.cube_width,
                        box.cube_height,
                    ),
                    color,
                )
            )
        else:
            viewer.add_cube(
                box.x_min, box.x_max, box.y_min, box.y_max, box.z_min, box.z_max, color, name
            )
        viewer.set_property(name, REPRESENTATION, representation)
        viewer.set_property(name, COLOR, color)
        viewer.set_property(name, OPACITY, alpha)