"""
contrib_graph.storage - Process-lifetime storage.

Modules:
    scan_cache - ScanCache keyed by (username, repository limit).

Nothing is persisted across restarts.
"""
