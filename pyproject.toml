[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ttnmapper"
version = "0.1.0"
description = "Processing rules for LoRaWAN coverage mapping: gateway locations and statuses, token claims, legacy packets and website API responses"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "lorawan",
    "coverage",
    "mapping",
    "gateways",
    "iot",
    "geolocation",
]
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
    "Topic :: Internet",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["ttnmapper"]

[tool.hatch.build.targets.sdist]
include = ["ttnmapper", "tests", "README.md"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
