[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cream-router"
version = "0.1.0"
description = "Circuit breakers, idempotency guards and routing configuration for payment dispatch"
requires-python = ">=3.10"
dependencies = []
keywords = ["payments", "routing", "circuit-breaker", "idempotency"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Framework :: AsyncIO",
    "Topic :: Office/Business :: Financial",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["cream_router"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
