"""cognifs - semantic file indexing and tag-driven reorganization."""

__version__ = "0.3.0"
