[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gossipmesh"
version = "0.1.0"
description = "Building blocks for a gossip-based publish/subscribe mesh: wire messages, message cache, message IDs, RPC fragmentation and peer gating"
requires-python = ">=3.10"
dependencies = []
keywords = ["gossipsub", "pubsub", "mesh", "p2p", "gossip", "networking"]
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
    "Topic :: System :: Networking",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["gossipmesh"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
