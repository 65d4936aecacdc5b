"""Utility modules for bsondump."""

from .validation import ValidationUtils

__all__ = ["ValidationUtils"]
