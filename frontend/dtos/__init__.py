"""
Frontend DTO Package

Read-only, immutable Data Transfer Objects for renderer consumption.

BOUNDARY ENFORCEMENT:
=====================
1. All DTOs are frozen (immutable)
2. All DTOs are versioned
3. Renderers receive ONLY these types, never backend records
4. Default annotations are EXPLICIT, never disguised as model output
"""

from .core import (
    DTOVersion,
    AvailabilityState,
    OrderingBasis,
)

__all__ = [
    'DTOVersion',
    'AvailabilityState',
    'OrderingBasis',
]
