[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "beans"
version = "0.1.0"
description = "Building blocks for a file-based issue tracker: Markdown beans with YAML front matter, configuration, link checks, filters and search"
requires-python = ">=3.10"
keywords = ["issue-tracker", "markdown", "yaml", "front-matter", "tasks"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Bug Tracking",
]
dependencies = [
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["beans"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
