"""
docsref - in-memory reference document corpus with bounded read-only queries

Indexes a tree of reference documents once at startup and serves filtered
listings, directory trees, paginated retrieval and regex search over it.
"""

__version__ = "1.0.0"
