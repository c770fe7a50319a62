"""API Layer — FastAPI routes and error handlers.

Invariants:
    - Routes registered explicitly in main.create_app (no auto-discovery)
    - Every WebSocket frame sent is a complete response envelope
"""
