"""Infrastructure Layer: database sessions, SQL repositories and logging setup.

Invariants:
    - SQLAlchemy exceptions never leave this layer unmapped (StoreError)
"""
