"""PostgreSQL schema definitions, catalogue queries, parsing, discovery and CREATE statement writing."""

__version__ = "0.16.2"
__all__ = [
    "definitions",
    "query",
    "probe",
    "constraints_query",
    "parser",
    "writer",
    "discovery",
]