[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "lidarscope"
version = "0.1.0"
description = "Lidar point-cloud obstacle detection: simulated lidar, PCD files, voxel filtering, RANSAC plane segmentation, kd-tree clustering and bounding boxes"
requires-python = ">=3.10"
dependencies = []
keywords = ["lidar", "point cloud", "pcd", "ransac", "kd-tree", "clustering", "obstacle detection"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Image Processing",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
lidarscope = "lidarscope.environment:main"

[tool.hatch.build.targets.wheel]
packages = ["lidarscope"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
