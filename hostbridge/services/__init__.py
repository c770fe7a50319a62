"""Services Layer — handler contract, registry, dispatch, and worker orchestration.

Invariants:
    - Registry is frozen before the first request is dispatched
    - Dispatcher never raises across its boundary
"""
