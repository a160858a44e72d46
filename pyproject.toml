[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "loadtestkit"
version = "0.1.0"
description = "LoadTest resource models, defaulting, a small REST client and a defaults-file generator for gRPC load testing"
requires-python = ">=3.10"
keywords = ["grpc", "load-testing", "kubernetes", "benchmark", "custom-resource"]
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
    "Topic :: Software Development :: Testing",
    "Topic :: System :: Benchmark",
]
dependencies = [
    "pyyaml>=6.0",
    "requests>=2.28",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
    "responses>=0.23",
]

[project.scripts]
loadtestkit-configure = "loadtestkit.configure:main"

[tool.hatch.build.targets.wheel]
packages = ["loadtestkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
