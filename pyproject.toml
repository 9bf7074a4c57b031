[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "robsock"
version = "0.1.0"
description = "Client library for writing robot agents that talk to a maze-robot simulator over UDP"
requires-python = ">=3.10"
dependencies = []
keywords = ["robotics", "simulator", "agent", "udp", "micromouse", "maze"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["robsock"]

[tool.pytest.ini_options]
addopts = "-ra"
