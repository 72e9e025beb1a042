"""Burrow: a daily digest assembled from independent content sources.

Sources are fetched concurrently with isolated failures, multi-group
sources are merged under a guaranteed-coverage rule, and the ordered
results are rendered into an email digest.
"""

__version__ = "0.1.0"
