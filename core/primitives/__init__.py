"""
POS Core Primitives — Reusable Building Blocks
================================================
Primitives are the shared, engine-agnostic building blocks that
the session and pricing engines consume. They are:

- Pure Python (no framework dependency)
- Immutable (frozen dataclasses)
- Deterministic (same input → same output)

Primitives:
    money   — integer minor units and the decimal boundary
"""

from core.primitives.money import (
    apply_rate,
    percent_of,
    to_cents,
    to_dollars,
)

__all__ = [
    "apply_rate",
    "percent_of",
    "to_cents",
    "to_dollars",
]
