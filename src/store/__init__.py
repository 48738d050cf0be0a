"""Storage layer.

This package maps containers and typed data leaves onto a directory
tree and provides the lazy object capability on top of it.
"""
