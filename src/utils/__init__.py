"""Utilities package for the podi-tracker application."""

from .validators import to_decimal

__all__ = [
    "to_decimal",
]
