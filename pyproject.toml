[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "feta"
version = "0.1.1"
description = "Feature flag evaluation with audience targeting and deterministic percentage rollouts"
requires-python = ">=3.10"
dependencies = []
keywords = ["feature flags", "feature toggles", "experiments", "rollout", "targeting"]
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
    "Topic :: Software Development :: Libraries",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["feta"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
