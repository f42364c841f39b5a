"""Search-quality regression harness for full-text and vector search backends."""

__version__ = "0.1.0"
