[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "playoff_bracket"
version = "0.1.0"
description = "Playoff elimination brackets: single- and double-elimination formats with automatic match scheduling."
requires-python = ">=3.10"
dependencies = []
keywords = ["tournament", "bracket", "playoffs", "elimination", "scheduling"]
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
packages = ["playoff_bracket"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
