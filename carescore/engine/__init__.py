"""
Engine boundary for carescore.

Design intent:
- Route instrument names to the scale and recommendation modules.
- Orchestrate record/analyze flows against an injected repository.
- Keep scoring code unaware of storage and audit concerns.
"""
