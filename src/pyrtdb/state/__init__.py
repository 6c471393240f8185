"""Watcher state layer.

This package owns the watcher reference counts and the registry that is the
only component allowed to change them.
"""
