"""Core business logic module.

Modules:
- aggregation: Grade averages and attendance pivots
- reports: Display-ready report rows built on aggregation
"""

__all__ = [
    "aggregation",
    "reports",
]
