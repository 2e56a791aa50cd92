"""Describe OpenAPI 3 documents as Go types and operations for code generation."""

__version__ = "0.1.0"

__all__ = [
    "fields",
    "gotypes",
    "merge",
    "names",
    "operations",
    "params",
    "refs",
    "spec",
    "types",
]