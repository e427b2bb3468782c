"""A simulated lidar that casts rays against a sloped ground plane and cars."""

from __future__ import annotations

import logging
import math
import random
import time
from dataclasses import dataclass, field
from typing import Optional, Sequence

from .geometry import Car, Vect3
from .pointcloud import Point, PointCloud

logger = logging.getLogger(__name__)

PI = 3.1415


@dataclass
class Ray:
    """A ray stepping out from ``origin`` in fixed increments of ``resolution``.

    ``horizontal_angle`` is the heading in the xy plane; ``vertical_angle`` is the
    elevation above the xy plane (0 is level, pi/2 straight up).
    """

    origin: Vect3
    horizontal_angle: float
    vertical_angle: float
    resolution: float
    direction: Vect3 = field(init=False)
    cast_position: Vect3 = field(init=False)
    cast_distance: float = field(init=False, default=0.0)

    def __post_init__(self) -> None:
        cos_v = math.cos(self.vertical_angle)
        self.direction = Vect3(
            self.resolution * cos_v * math.cos(self.horizontal_angle),
            self.resolution * cos_v * math.sin(self.horizontal_angle),
            self.resolution * math.sin(self.vertical_angle),
        )
        self.cast_position = self.origin
        self.cast_distance = 0.0

    def cast(
        self,
        cars: Sequence[Car],
        min_distance: float,
        max_distance: float,
        cloud: PointCloud,
        slope_angle: float,
        sderr: float,
        rng: Optional[random.Random] = None,
    ) -> None:
        """Step the ray until it hits the ground or a car, or runs out of range.

        If the travelled distance lies within [min_distance, max_distance], the
        hit position, with uniform noise in [0, sderr) per axis, is appended to
        ``cloud``.
        """
        rng = rng if rng is not None else random.Random()
        self.cast_position = self.origin
        self.cast_distance = 0.0
        slope = math.tan(slope_angle)

        collision = False
        while not collision and self.cast_distance < max_distance:
            self.cast_position = self.cast_position + self.direction
            self.cast_distance += self.resolution

            collision = self.cast_position.z <= self.cast_position.x * slope

            if not collision and self.cast_distance < max_distance:
                collision = any(car.check_collision(self.cast_position) for car in cars)

        if min_distance <= self.cast_distance <= max_distance:
            rx, ry, rz = rng.random(), rng.random(), rng.random()
            pos = self.cast_position
            cloud.append(Point(pos.x + rx * sderr, pos.y + ry * sderr, pos.z + rz * sderr))


class Lidar:
    """A roof-mounted lidar with several vertical layers of rays sweeping 360 degrees."""

    def __init__(
        self,
        cars: Sequence[Car],
        ground_slope: float,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.cloud = PointCloud()
        self.position = Vect3(0, 0, 2.6)
        self.min_distance = 5.0
        self.max_distance = 50.0
        self.resolution = 0.2
        self.sderr = 0.0
        self.cars = list(cars)
        self.ground_slope = ground_slope
        self.rng = rng if rng is not None else random.Random()

        num_layers = 8
        steepest_angle = 30.0 * (-PI / 180)
        angle_range = 26.0 * (PI / 180)
        horizontal_angle_inc = PI / 64
        angle_increment = angle_range / num_layers

        self.rays: list[Ray] = []
        vertical = steepest_angle
        while vertical < steepest_angle + angle_range:
            horizontal = 0.0
            while horizontal <= 2 * PI:
                self.rays.append(Ray(self.position, horizontal, vertical, self.resolution))
                horizontal += horizontal_angle_inc
            vertical += angle_increment

    def scan(self) -> PointCloud:
        """Cast every ray and return the refreshed point cloud."""
        self.cloud.clear()
        start = time.monotonic()
        for ray in self.rays:
            ray.cast(
                self.cars,
                self.min_distance,
                self.max_distance,
                self.cloud,
                self.ground_slope,
                self.sderr,
                self.rng,
            )
        elapsed_ms = (time.monotonic() - start) * 1000
        logger.info("ray casting took %d milliseconds", int(elapsed_ms))
        return self.cloud