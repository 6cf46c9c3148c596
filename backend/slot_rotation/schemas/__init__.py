"""Pydantic Schemas: response shapes for the rotation API.

Invariants:
    - Field names are snake_case in Python and camelCase on the wire
"""
