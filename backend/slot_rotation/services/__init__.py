"""Services Layer: async orchestration of one rotation run, stats and scheduling.

Invariants:
    - Services talk to the store only through core/repository_protocols.py
    - No service holds a module-level store handle
"""
