"""
carescore package.

Design intent:
- Compute Braden, Caprini and Wells scores from categorical bedside inputs.
- Classify each score into a fixed risk tier and expand it into a care checklist.
- Keep every rule deterministic and offline; storage and rendering live outside.
"""
