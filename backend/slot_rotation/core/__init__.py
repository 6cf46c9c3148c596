"""Core Layer: pure rotation logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, models/ or db/
    - Given the same inputs (seed, records, now) every function returns the same output

Design Decisions:
    - Functional core separated from imperative shell: services/ does the
      async reads and writes around these functions
"""
