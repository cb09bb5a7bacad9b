"""
Collection qualification package.

Classifies a collection's publish readiness from recipe counts that the
storage layer has already computed.
"""

from .calculator import (
    QualifiedStatus,
    calculate_progress,
    calculate_qualified_status,
)

__all__ = ["QualifiedStatus", "calculate_progress", "calculate_qualified_status"]
