import random

import pytest

from lidarscope.geometry import Box
from lidarscope.pcd import PcdError
from lidarscope.pointcloud import Point, PointCloud
from lidarscope.process import ProcessPointClouds


def ground_with_obstacles():
    ground = [Point(float(x), float(y), 0.0) for x in range(5) for y in range(5)]
    high = [Point(0.0, 0.0, 2.0), Point(4.0, 4.0, 2.0), Point(2.0, 0.0, 2.0)]
    return PointCloud(ground + high)


@pytest.fixture
def processor():
    return ProcessPointClouds(rng=random.Random(0))


def test_num_points_prints_and_returns(processor, capsys):
    cloud = PointCloud([Point(0, 0, 0), Point(1, 1, 1)])
    assert processor.num_points(cloud) == 2
    assert capsys.readouterr().out.strip() == "2"


def test_filter_cloud_crops_and_removes_roof(processor):
    cloud = PointCloud(
        [Point(0.0, 0.0, -0.7), Point(5.0, 0.0, 0.0), Point(50.0, 0.0, 0.0)]
    )
    result = processor.filter_cloud(cloud, 0.3, (-10, -6.0, -2, 1), (30, 6.5, 1, 1))
    assert list(result) == [Point(5.0, 0.0, 0.0)]


def test_separate_clouds(processor):
    cloud = PointCloud([Point(i, 0, 0) for i in range(5)])
    obstacles, plane = processor.separate_clouds([3, 1], cloud)
    assert list(plane) == [Point(3, 0, 0), Point(1, 0, 0)]
    assert list(obstacles) == [Point(0, 0, 0), Point(2, 0, 0), Point(4, 0, 0)]


def test_segment_plane_finds_ground(processor):
    cloud = ground_with_obstacles()
    obstacles, plane = processor.segment_plane(cloud, 100, 0.2)
    assert len(plane) == 25
    assert all(p.z == 0.0 for p in plane)
    assert len(obstacles) == 3
    assert all(p.z == 2.0 for p in obstacles)


def test_segment_plane_too_few_points(processor):
    cloud = PointCloud([Point(0, 0, 0), Point(1, 0, 0)])
    obstacles, plane = processor.segment_plane(cloud, 10, 0.2)
    assert len(plane) == 0
    assert list(obstacles) == list(cloud)


def test_clustering_groups_and_orders_by_size(processor):
    small = [Point(20.0 + 0.3 * i, 0.0, 0.0) for i in range(2)]
    large = [Point(0.3 * i, 0.0, 0.0) for i in range(4)]
    lone = [Point(-40.0, 0.0, 0.0)]
    cloud = PointCloud(small + lone + large)
    clusters = processor.clustering(cloud, 0.5, 2, 10)
    assert [len(c) for c in clusters] == [4, 2]
    assert list(clusters[0]) == large
    assert list(clusters[1]) == small


def test_clustering_respects_max_size(processor):
    cloud = PointCloud([Point(0.3 * i, 0.0, 0.0) for i in range(6)])
    assert processor.clustering(cloud, 0.5, 1, 5) == []
    assert len(processor.clustering(cloud, 0.5, 1, 6)) == 1


def test_clustering_rejects_non_positive_tolerance(processor):
    with pytest.raises(ValueError):
        processor.clustering(PointCloud([Point(0, 0, 0)]), 0.0, 1, 10)


def test_bounding_box(processor):
    cloud = PointCloud([Point(1, -2, 3), Point(-1, 2, 0)])
    assert processor.bounding_box(cloud) == Box(-1, -2, 0, 1, 2, 3)


def test_save_load_round_trip(processor, tmp_path):
    cloud = PointCloud([Point(1.5, -2.0, 0.25, 7.0), Point(0.0, 1.0, 2.0, 3.0)], True)
    path = tmp_path / "cloud.pcd"
    processor.save_pcd(cloud, path)
    loaded = processor.load_pcd(path)
    assert list(loaded) == list(cloud)
    assert loaded.with_intensity


def test_load_missing_file_raises(processor, tmp_path):
    with pytest.raises(PcdError):
        processor.load_pcd(tmp_path / "missing.pcd")


def test_stream_pcd_sorted(processor, tmp_path):
    for name in ("b.pcd", "a.pcd", "c.pcd"):
        (tmp_path / name).write_text("")
    assert [p.name for p in processor.stream_pcd(tmp_path)] == ["a.pcd", "b.pcd", "c.pcd"]


def test_ransac_plane_segment_partitions(processor):
    cloud = ground_with_obstacles()
    inliers, outliers = processor.ransac_plane_segment(cloud, 100, 0.2)
    assert len(inliers) + len(outliers) == len(cloud)
    assert len(inliers) == 25
    assert all(p.z == 2.0 for p in outliers)