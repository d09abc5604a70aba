[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cliflow"
version = "0.1.0"
description = "Building blocks for command-line applications: typed flags, parsing contexts, help templates, Markdown docs and fish completion."
requires-python = ">=3.10"
keywords = ["cli", "command-line", "flags", "arguments", "completion", "markdown"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Python Modules",
]
dependencies = [
    "jinja2",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["cliflow"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
