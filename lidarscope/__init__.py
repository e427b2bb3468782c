"""Lidar point-cloud obstacle detection: simulation, PCD I/O, filtering, segmentation and clustering."""

__version__ = "0.1.0"