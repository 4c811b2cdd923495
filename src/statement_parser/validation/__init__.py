"""
Validation of finished parse results.
"""

from .validator import ExtractionValidator, validate_result

__all__ = [
    "ExtractionValidator",
    "validate_result",
]
