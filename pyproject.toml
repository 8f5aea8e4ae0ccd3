[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "preputil"
version = "0.1.0"
description = "File-descriptor helpers, a buffered token reader, exact decimal/binary number conversion and a text progress bar"
requires-python = ">=3.10"
dependencies = []
keywords = ["file", "parsing", "strtod", "dtoa", "progress", "tokenizer"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["preputil"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
