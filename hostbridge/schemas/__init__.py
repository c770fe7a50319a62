"""Pydantic Schemas — request/response envelopes exchanged over the bridge socket.

Invariants:
    - Schemas validate at the system boundary (inbound frames, outbound frames)
"""
