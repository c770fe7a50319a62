"""hostbridge — WebSocket bridge exposing named tools and resources to a remote caller.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""

__version__ = "1.0.0"
