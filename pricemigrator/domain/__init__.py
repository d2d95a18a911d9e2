"""Domain helpers for the price history fact table."""

__all__ = [
    "prices",
]
