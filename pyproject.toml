[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "borrowviz"
version = "0.1.0"
description = "Ownership and borrowing timelines of annotated Rust examples, rendered as SVG fragments"
requires-python = ">=3.10"
dependencies = []
keywords = ["ownership", "borrowing", "lifetimes", "visualization", "svg", "teaching"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Education",
    "Topic :: Multimedia :: Graphics",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["borrowviz"]

[tool.hatch.build.targets.sdist]
include = ["borrowviz", "tests", "pyproject.toml", "README.md"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
