"""Built-in Handlers — operations the bridge answers on its own behalf.

Invariants:
    - Host-application tools are registered by callers of build_context(), not here
"""
