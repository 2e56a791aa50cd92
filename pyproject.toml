[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "oagen"
version = "0.1.0"
description = "Describe OpenAPI 3 documents as Go types and operations for code generation"
requires-python = ">=3.10"
keywords = ["openapi", "swagger", "codegen", "go", "schema"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Software Development :: Code Generators",
]
dependencies = [
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["oagen"]

[tool.pytest.ini_options]
addopts = "-ra"
