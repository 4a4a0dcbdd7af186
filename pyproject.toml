[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "edgebreaker"
version = "0.1.0"
description = "Edgebreaker connectivity compression for triangle meshes stored as Wavefront OBJ files"
requires-python = ">=3.10"
dependencies = []
keywords = ["edgebreaker", "mesh", "compression", "obj", "triangle", "geometry"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics :: 3D Modeling",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
edgebreaker = "edgebreaker.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["edgebreaker"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
