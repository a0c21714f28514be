[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rntpsim"
version = "0.1.0"
description = "Building blocks for simulating reliable transport over wireless multihop named-data networks"
requires-python = ">=3.10"
dependencies = []
keywords = ["ndn", "named-data", "simulation", "wireless", "multihop", "transport", "tlv"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["rntpsim"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
