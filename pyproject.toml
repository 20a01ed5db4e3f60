[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gasmeter"
version = "0.1.0"
description = "Gas metering for Arm64 assembly: inserts bounded-execution checks at loop back-edges"
requires-python = ">=3.10"
dependencies = []
keywords = ["arm64", "aarch64", "assembly", "instrumentation", "gas", "metering", "control-flow-graph"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Programming Language :: Assembly",
    "Topic :: Software Development :: Assemblers",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
gasmeter = "gasmeter.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["gasmeter"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
