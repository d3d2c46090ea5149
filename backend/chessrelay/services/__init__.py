"""Room session services: store, membership, clocks and game flow.

This package contains the in-memory domain logic that the Socket.IO
handlers call into, keeping transport concerns separated from the room
state machine and clock bookkeeping.
"""
