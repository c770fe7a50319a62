"""Route Modules — one file per concern.

Invariants:
    - Routes never contain dispatch logic (delegate to services.dispatch)
"""
