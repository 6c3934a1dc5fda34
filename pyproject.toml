[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gridspace"
version = "0.1.0"
description = "Static 2D grid partitioning of a game world into spatial channels, with area-of-interest queries and a message-type state machine."
requires-python = ">=3.10"
dependencies = []
keywords = ["game", "spatial", "grid", "area-of-interest", "channels", "state-machine"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["gridspace"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
