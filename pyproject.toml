[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rasvendor"
version = "0.1.0"
description = "Decoders for vendor-specific hardware error sections, with optional SQLite recording"
requires-python = ">=3.10"
dependencies = []
keywords = ["ras", "hardware errors", "cper", "non-standard", "sqlite", "monitoring"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Monitoring",
    "Topic :: System :: Hardware",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["rasvendor"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
