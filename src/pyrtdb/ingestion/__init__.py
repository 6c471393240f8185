"""Ingestion layer.

This package turns remote snapshots and listener firings into normalized
state actions: attachment and dispatch, snapshot normalization and
population sequencing.
"""

__all__: list[str] = []
