"""Life Butler — answer questions about personal records."""

__version__ = "0.1.0"
