"""
Scale definition boundary for carescore.

Design intent:
- Hold the static subscale/factor/criterion tables and tier boundaries.
- Expose pure score and tier functions per instrument.
- Never read storage or patient state.
"""
