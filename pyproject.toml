[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "paladin"
version = "0.1.0"
description = "Building blocks for declarative distributed computation: operations, monoids, directives, indexed streams and coordinated, acknowledged channels."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "distributed",
    "map-reduce",
    "monoid",
    "fold",
    "asyncio",
    "channels",
    "retry",
]
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
    "Framework :: AsyncIO",
    "Topic :: System :: Distributed Computing",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["paladin"]

[tool.hatch.build.targets.sdist]
include = ["paladin", "tests"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
