[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "benchutil"
version = "0.1.0"
description = "Clock, statistics, number formatting and machine information helpers for benchmarking"
requires-python = ">=3.10"
dependencies = []
keywords = ["benchmark", "clock", "statistics", "cpu", "sysinfo"]
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
    "Topic :: System :: Benchmark",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["benchutil"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
