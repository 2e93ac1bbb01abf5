"""
Recommendation boundary for carescore.

Design intent:
- Expand a tier plus raw selections into a priority-sorted checklist.
- Keep every generator pure and deterministic for identical inputs.
- Carry priority and icon as plain tags; rendering lives elsewhere.
"""
