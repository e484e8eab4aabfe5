"""Resumable, batch-checkpointed crawler for hierarchical device catalogs."""

__version__ = "0.1.0"
