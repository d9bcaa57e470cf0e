[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "arrowconvert"
version = "0.8.1"
description = "Map Python values to Arrow-style in-memory columnar arrays and back, driven by declarative field types."
requires-python = ">=3.10"
dependencies = []
keywords = ["arrow", "columnar", "serialization", "schema", "dataclasses"]
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
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["arrowconvert"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
