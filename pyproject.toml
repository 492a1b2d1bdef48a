[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kfilesync"
version = "0.1.0"
description = "Domain model and services for peer-to-peer LAN file sharing and folder synchronisation"
requires-python = ">=3.10"
dependencies = []
keywords = ["file-sync", "lan", "peer-to-peer", "version-vector", "conflict-resolution"]
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
    "Topic :: Communications :: File Sharing",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest", "pytest-asyncio"]

[tool.hatch.build.targets.wheel]
packages = ["kfilesync"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
