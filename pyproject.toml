[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "labanalyser"
version = "1.1.1"
description = "Typed data values, device plugins, experiment files and a remote-control protocol for lab data analysis"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "laboratory",
    "measurement",
    "data acquisition",
    "experiment",
    "plugins",
    "remote control",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Framework :: AsyncIO",
    "Topic :: Scientific/Engineering :: Information Analysis",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["labanalyser"]

[tool.hatch.build.targets.sdist]
include = ["labanalyser", "tests"]

[tool.pytest.ini_options]
addopts = "-ra"
