"""
A subpackage for accessing a bag's contents.

The :py:mod:`bag` module provides the read-only interface for examining an
existing bag, whether or not it is valid.
"""
from .bag import ReadOnlyBag, ManifestEntry, open_bag
