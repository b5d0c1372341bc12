"""Voxel map data model: units, SDF values, coordinates, octree node state, downsampling and versioned storage."""

__version__ = "0.1.0"