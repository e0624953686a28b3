[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "oak"
version = "0.0.1"
description = "Generate LogValue() methods for Go structs so they log cleanly through log/slog"
requires-python = ">=3.10"
keywords = ["go", "slog", "logging", "code-generation", "redaction"]
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
    "Topic :: Software Development :: Code Generators",
]
dependencies = [
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
oak = "oak.command:main"

[tool.hatch.build.targets.wheel]
packages = ["oak"]

[tool.pytest.ini_options]
addopts = "-ra"
