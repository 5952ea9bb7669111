[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "dotmatrix"
version = "0.1.0"
description = "Components for emulating an 8-bit handheld game console: sound, real-time clock, save states, link cable, configuration variables and input mapping"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "emulator",
    "handheld",
    "game console",
    "sound",
    "rtc",
    "save state",
    "link cable",
    "configuration",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Emulators",
    "Topic :: Games/Entertainment",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["dotmatrix"]

[tool.hatch.build.targets.sdist]
include = ["dotmatrix", "tests", "README.md"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
