import math
import random

import pytest

from lidarscope.geometry import Car, Color, Vect3
from lidarscope.lidar import PI, Lidar, Ray
from lidarscope.pointcloud import PointCloud


def test_ray_direction_has_resolution_length():
    ray = Ray(Vect3(0, 0, 0), 0.7, -0.3, 0.2)
    d = ray.direction
    assert math.isclose(math.sqrt(d.x**2 + d.y**2 + d.z**2), 0.2)
    assert ray.cast_position == Vect3(0, 0, 0)
    assert ray.cast_distance == 0.0


def test_ray_straight_down_hits_ground():
    ray = Ray(Vect3(0, 0, 2.6), 0.0, -math.pi / 2, 0.2)
    cloud = PointCloud()
    ray.cast([], 0.0, 50.0, cloud, 0.0, 0.0, random.Random(1))
    assert len(cloud) == 1
    point = cloud[0]
    assert point.z <= 1e-9
    assert point.z > -0.2
    assert math.isclose(ray.cast_distance, 2.6, abs_tol=0.21)


def test_ray_below_min_distance_adds_nothing():
    ray = Ray(Vect3(0, 0, 2.6), 0.0, -math.pi / 2, 0.2)
    cloud = PointCloud()
    ray.cast([], 5.0, 50.0, cloud, 0.0, 0.0, random.Random(1))
    assert len(cloud) == 0


def test_ray_hits_car_in_front():
    car = Car(Vect3(10, 0, 0), Vect3(4, 2, 2), Color(0, 0, 1), "car")
    ray = Ray(Vect3(0, 0, 1), 0.0, 0.0, 0.2)
    cloud = PointCloud()
    ray.cast([car], 0.0, 50.0, cloud, 0.0, 0.0, random.Random(1))
    assert len(cloud) == 1
    assert 8.0 <= cloud[0].x < 8.0 + 0.2 + 1e-9
    assert car.check_collision(Vect3(cloud[0].x, cloud[0].y, cloud[0].z))


def test_ray_noise_is_bounded_by_sderr():
    car = Car(Vect3(10, 0, 0), Vect3(4, 2, 2), Color(0, 0, 1), "car")
    clean, noisy = PointCloud(), PointCloud()
    Ray(Vect3(0, 0, 1), 0.0, 0.0, 0.2).cast([car], 0.0, 50.0, clean, 0.0, 0.0, random.Random(3))
    Ray(Vect3(0, 0, 1), 0.0, 0.0, 0.2).cast([car], 0.0, 50.0, noisy, 0.0, 1.0, random.Random(3))
    for a, b in ((clean[0].x, noisy[0].x), (clean[0].y, noisy[0].y), (clean[0].z, noisy[0].z)):
        assert 0.0 <= b - a < 1.0


def test_lidar_rays_point_downward_from_roof():
    lidar = Lidar([], 0.0, random.Random(0))
    assert lidar.rays
    assert all(ray.origin == lidar.position for ray in lidar.rays)
    assert all(ray.direction.z < 0 for ray in lidar.rays)
    assert all(ray.vertical_angle < -30.0 * PI / 180 + 26.0 * PI / 180 for ray in lidar.rays)


def test_lidar_scan_of_empty_road_lies_on_ground():
    lidar = Lidar([], 0.0, random.Random(0))
    cloud = lidar.scan()
    assert len(cloud) > 0
    assert all(-0.2 < p.z <= 1e-9 for p in cloud)
    assert all(math.hypot(p.x, p.y) > 0 for p in cloud)


def test_lidar_scan_is_repeatable_and_reuses_cloud():
    lidar = Lidar([], 0.0, random.Random(0))
    first = len(lidar.scan())
    cloud = lidar.scan()
    assert len(cloud) == first
    assert cloud is lidar.cloud


def test_lidar_scan_sees_car():
    car = Car(Vect3(15, 0, 0), Vect3(4, 2, 2), Color(0, 0, 1), "car1")
    lidar = Lidar([car], 0.0, random.Random(0))
    cloud = lidar.scan()
    on_car = [p for p in cloud if p.z > 0]
    assert on_car
    assert all(car.check_collision(Vect3(p.x, p.y, p.z)) for p in on_car)


@pytest.mark.parametrize("slope", [0.0, 0.1])
def test_lidar_scan_respects_slope(slope):
    lidar = Lidar([], slope, random.Random(0))
    cloud = lidar.scan()
    assert all(p.z <= p.x * math.tan(slope) + 1e-9 for p in cloud)