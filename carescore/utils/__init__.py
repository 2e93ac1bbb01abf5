"""
Shared helpers for carescore.

Design intent:
- Keep timestamp parsing and age arithmetic in one place.
- Stay free of domain tables and storage.
"""
