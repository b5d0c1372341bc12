[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "feldspar"
version = "0.1.0"
description = "Voxel map data model: chunk coordinates, SDF values, octree node state, downsampling and a versioned chunk database"
requires-python = ">=3.10"
dependencies = []
keywords = ["voxel", "sdf", "octree", "level-of-detail", "downsampling", "versioned-database"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment",
    "Topic :: Database",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["feldspar"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
