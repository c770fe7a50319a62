"""Infrastructure Layer — sockets, child processes, and logging.

Invariants:
    - Infrastructure never decides protocol semantics (that lives in services/)
"""
