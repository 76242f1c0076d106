[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pgschema"
version = "0.16.2"
description = "PostgreSQL schema definition, discovery and SQL writing"
requires-python = ">=3.10"
dependencies = []
keywords = ["database", "sql", "postgres", "postgresql", "schema", "introspection"]
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
    "Topic :: Database",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["pgschema"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
