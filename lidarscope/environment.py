"""Highway and city-block scenes that run the obstacle-detection pipeline."""

from __future__ import annotations

import argparse
import itertools
import sys
from typing import Optional

from .geometry import Box, CameraAngle, Car, Color, Vect3
from .lidar import Lidar
from .pcd import PcdError
from .pointcloud import PointCloud
from .process import ProcessPointClouds
from .render import Scene, render_box, render_highway, render_point_cloud, render_rays

DEFAULT_DATA_DIR = "../src/sensors/data/pcd/data_1"
DEFAULT_PCD = DEFAULT_DATA_DIR + "/0000000000.pcd"


def init_camera(angle: CameraAngle, viewer: Scene) -> None:
    """Set a black background and place the camera for ``angle``."""
    viewer.background = Color(0, 0, 0)
    distance = 16
    if angle is CameraAngle.XY:
        viewer.set_camera((-distance, -distance, distance), (1, 1, 0))
    elif angle is CameraAngle.TOP_DOWN:
        viewer.set_camera((0, 0, distance), (1, 0, 1))
    elif angle is CameraAngle.SIDE:
        viewer.set_camera((0, -distance, 0), (0, 0, 1))
    else:
        viewer.set_camera((-10, 0, 0), (0, 0, 1))
    if angle is not CameraAngle.FPS:
        viewer.coordinate_system = 1.0


def init_highway(render_scene: bool, viewer: Scene) -> list[Car]:
    """Create the ego car and three other cars, drawing them if ``render_scene``."""
    size = Vect3(4, 2, 2)
    blue = Color(0, 0, 1)
    cars = [
        Car(Vect3(0, 0, 0), size, Color(0, 1, 0), "egoCar"),
        Car(Vect3(15, 0, 0), size, blue, "car1"),
        Car(Vect3(8, -4, 0), size, blue, "car2"),
        Car(Vect3(-12, 4, 0), size, blue, "car3"),
    ]
    if render_scene:
        render_highway(viewer)
        for car in cars:
            car.render(viewer)
    return cars


def simple_highway(viewer: Scene) -> tuple[PointCloud, PointCloud]:
    """Scan the simulated highway, segment the road and draw both parts.

    Returns (obstacle cloud, plane cloud).
    """
    cars = init_highway(True, viewer)
    lidar = Lidar(cars, 0.0)
    cloud = lidar.scan()
    render_rays(viewer, lidar.position, cloud)

    processor = ProcessPointClouds()
    obstacles, plane = processor.segment_plane(cloud, 100, 0.2)
    render_point_cloud(viewer, obstacles, "obstCloud", Color(1, 0, 0))
    render_point_cloud(viewer, plane, "planeCloud", Color(0, 1, 0))
    return obstacles, plane


def city_block(
    viewer: Scene, processor: ProcessPointClouds, cloud: PointCloud
) -> list[PointCloud]:
    """Run filtering, segmentation and clustering on one frame and draw the result.

    Returns the obstacle clusters.
    """
    cloud = processor.filter_cloud(cloud, 0.3, (-10, -6.0, -2, 1), (30, 6.5, 1, 1))

    obstacles, plane = processor.segment_plane(cloud, 50, 0.2)
    render_point_cloud(viewer, plane, "planeCloud", Color(0.5, 0.5, 0.5))

    ego_box = Box(-1.5, -1.2, -1, 2.6, 1.2, -0.4)
    render_box(viewer, ego_box, 0, Color(1, 1, 0), 0.75)

    clusters = processor.clustering(obstacles, 0.5, 15, 400)
    colors = [Color(1, 0, 0), Color(0, 1, 0), Color(0, 0, 1)]
    for cluster_id, cluster in enumerate(clusters, start=1):
        render_point_cloud(viewer, cluster, f"obstCloud{cluster_id}", colors[cluster_id % 3])
        render_box(viewer, processor.bounding_box(cluster), cluster_id, Color(1, 0, 0), 0.5)
    return clusters


def stream_city_block(
    viewer: Scene,
    processor: ProcessPointClouds,
    directory,
    frames: Optional[int] = None,
) -> list[list[PointCloud]]:
    """Process ``frames`` frames from ``directory``, cycling through its files.

    By default every file is processed once. The viewer is cleared before each
    frame. Returns the clusters found in each frame.
    """
    stream = processor.stream_pcd(directory)
    if not stream:
        raise ValueError(f"no point cloud files in {directory}")
    count = len(stream) if frames is None else frames
    results = []
    for path in itertools.islice(itertools.cycle(stream), count):
        viewer.remove_all_point_clouds()
        viewer.remove_all_shapes()
        cloud = processor.load_pcd(path)
        results.append(city_block(viewer, processor, cloud))
    return results


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Lidar obstacle detection scenes.")
    sub = parser.add_subparsers(dest="command")
    sub.add_parser("highway", help="scan and segment the simulated highway")
    single = sub.add_parser("single", help="process one PCD file")
    single.add_argument("path", nargs="?", default=DEFAULT_PCD)
    stream = sub.add_parser("stream", help="process a directory of PCD files")
    stream.add_argument("directory", nargs="?", default=DEFAULT_DATA_DIR)
    stream.add_argument("--frames", type=int, default=None)
    return parser


def main(argv=None) -> int:
    """Run a scene from the command line and print a summary."""
    args = _build_parser().parse_args(argv)
    command = args.command or "highway"
    viewer = Scene()
    init_camera(CameraAngle.XY, viewer)
    try:
        if command == "highway":
            viewer.title = "Simple Highway Viewer"
            print("starting simple highway environment")
            obstacles, plane = simple_highway(viewer)
            print(f"{len(obstacles)} obstacle points, {len(plane)} road points")
        elif command == "single":
            viewer.title = "Single PCD Viewer"
            print("Processing single PCD file")
            processor = ProcessPointClouds()
            clusters = city_block(viewer, processor, processor.load_pcd(args.path))
            print(f"found {len(clusters)} clusters")
        else:
            viewer.title = "Stream PCD Viewer"
            print("Processing stream PCD file")
            processor = ProcessPointClouds()
            results = stream_city_block(viewer, processor, args.directory, args.frames)
            for frame, clusters in enumerate(results):
                print(f"frame {frame}: {len(clusters)} clusters")
    except (PcdError, OSError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())