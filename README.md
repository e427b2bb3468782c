# lidarscope

Obstacle detection on lidar point clouds, in pure Python with no third-party
dependencies.

The package has these parts:

- `lidarscope.geometry`: `Color`, `Vect3`, `Box`, `BoxQ`, `CameraAngle` and
  `Car`. A car has a body and a cabin, and `Car.check_collision` tests
  whether a point lies inside either.
- `lidarscope.pointcloud`: `Point` (x, y, z, intensity) and `PointCloud`.
  `PointCloud.select` picks points by index, or with `negative=True` keeps
  every point that is not listed. `PointCloud.from_xy` builds a cloud in
  the z = 0 plane.
- `lidarscope.lidar`: `Ray` and `Lidar`. The lidar is mounted at height 2.6
  and has eight vertical layers of rays that sweep all the way round.
  `Lidar.scan()` casts every ray against a sloped ground plane and the cars.
- `lidarscope.pcd`: `load_pcd` reads PCD files stored as `ascii`, `binary` or
  `binary_compressed`. `save_pcd` writes ASCII PCD. `stream_pcd` returns the
  entries of a directory in sorted order. A file that is malformed or cannot
  be read raises `PcdError`.
- `lidarscope.filters`: `voxel_grid` downsamples to voxel centroids.
  `crop_box` and `crop_box_indices` keep the points inside an inclusive box.
  `bounding_box` returns the axis-aligned box around a cloud.
- `lidarscope.ransac`: `ransac_line` and `ransac_plane` return inlier
  indices. `split_by_indices` splits a cloud by index. `create_line_data`
  generates noisy sample data along y = x.
- `lidarscope.kdtree`: a two-dimensional `KdTree` with `insert`, radius
  `search` and preorder iteration. `euclidean_cluster` clusters points
  through the tree. `tree_split_lines` returns the tree's split lines
  clipped to a window.
- `lidarscope.process`: `ProcessPointClouds` chains the stages together:
  - `filter_cloud`: voxel downsampling, a region crop, then removal of the
    ego car's roof points;
  - `segment_plane`: RANSAC plane fit, returning `(obstacles, plane)`;
  - `clustering`: Euclidean clustering with minimum and maximum cluster
    sizes, largest cluster first;
  - `bounding_box`, `load_pcd`, `save_pcd`, `stream_pcd` and
    `ransac_plane_segment`.
- `lidarscope.render`: a `Scene` that records named cubes, lines and point
  clouds together with their rendering properties. It comes with
  `render_highway`, `render_rays`, `clear_rays`, `render_point_cloud` and
  `render_box`.
- `lidarscope.environment`: the highway and city-block scenes
  (`simple_highway`, `city_block`, `stream_city_block`) and the command
  line.

Randomised parts accept a `random.Random` so that results can be
reproduced:

- `Lidar(..., rng=...)`
- `ProcessPointClouds(rng=...)`
- the `rng` argument of the RANSAC functions

## Installation

```
pip install .
```

## Command line

```
lidarscope                       # same as "lidarscope highway"
lidarscope highway
lidarscope single FRAME.pcd
lidarscope stream DIRECTORY [--frames N]
```

Each command does the following:

- `highway` scans the simulated highway with the lidar and separates the road
  from the obstacles. It prints the number of points in each part.
- `single` runs filtering, plane segmentation and clustering on one PCD file
  and prints the number of clusters it found.
- `stream` does the same for every file in a directory, in sorted order, and
  prints the cluster count for each frame. With `--frames N` it processes N
  frames, starting over from the first file when it reaches the end.

If you leave out the path or directory, `single` and `stream` fall back to a
built-in relative path. Errors from reading files or from invalid input are
printed to standard error, and the command exits with status 1.

## Library use

```python
from lidarscope.kdtree import KdTree, euclidean_cluster

points = [[-6.2, 7], [-6.3, 8.4], [-5.2, 7.1], [-5.7, 6.3],
          [7.2, 6.1], [8.0, 5.3], [7.2, 7.1],
          [0.2, -7.1], [1.7, -6.9], [-1.2, -7.2], [2.2, -8.9]]
tree = KdTree()
for point_id, point in enumerate(points):
    tree.insert(point, point_id)

nearby = tree.search([-6, 7], 3.0)
clusters = euclidean_cluster(points, tree, 3.0)
```

Processing a PCD frame:

```python
from lidarscope.process import ProcessPointClouds

processor = ProcessPointClouds()
cloud = processor.load_pcd("frame.pcd")
cloud = processor.filter_cloud(cloud, 0.3, (-10, -6.0, -2, 1), (30, 6.5, 1, 1))
obstacles, road = processor.segment_plane(cloud, 50, 0.2)
for cluster in processor.clustering(obstacles, 0.5, 15, 400):
    print(processor.bounding_box(cluster))
```

## What it does not do

There is no on-screen viewer. A `Scene` only records what would be drawn:

- shapes and point clouds, by name;
- their colours, opacity and point size;
- the camera position and view-up vector.

You can inspect a `Scene`, but it opens no window and runs no interactive
loop.

## Running the tests

```
pip install ".[test]"
pytest
```