"""
Core DTO Types

Foundational enums and version types for all view DTOs.

VERSIONING REQUIREMENT:
=======================
Every DTO includes a version field.
Renderers MUST fail fast on unknown versions.
"""

from __future__ import annotations
from enum import Enum


# =============================================================================
# VERSION CONSTANTS
# =============================================================================

class DTOVersion(Enum):
    """
    DTO schema versions.

    Renderers MUST reject unknown versions.
    """
    V1 = "v1"

    @classmethod
    def current(cls) -> 'DTOVersion':
        return cls.V1


# =============================================================================
# ANNOTATION AVAILABILITY (Explicit Absence)
# =============================================================================

class AvailabilityState(Enum):
    """
    Availability of a record's annotation.

    EXPLICIT ABSENCE:
    =================
    A default annotation is flagged, never passed off as a model label.
    """
    PRESENT = "present"    # Model annotation joined onto the record
    MISSING = "missing"    # Annotations arrived, none for this record
    PENDING = "pending"    # Annotation fetch has not completed yet


# =============================================================================
# ORDERING HINT (Backend-Controlled)
# =============================================================================

class OrderingBasis(Enum):
    """
    Basis for item ordering.

    Renderers display in provided order.
    """
    FIRST_SEEN = "first_seen"    # Facet option order
