"""Aggregators that collect listed objects into units of work."""

from .pair_grouper import classify_pairs, group_objects

__all__ = ["group_objects", "classify_pairs"]
