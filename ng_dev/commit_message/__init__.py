"""Commit message parsing."""
