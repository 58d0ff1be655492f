"""Counter storage and sliding-window counting adapters.

The rate limiter depends only on the small interfaces in ``base`` so the
in-memory store can later be replaced by Redis, Memcached or another shared
store without touching the limiter or the API layer.
"""
