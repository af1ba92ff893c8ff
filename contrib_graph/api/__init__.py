"""
contrib_graph.api - FastAPI endpoints for the view layer.

Modules:
    endpoints - create_app(): graph query, session expansion, health.
"""
