"""
Feedback Lens Backend

Layered backend for annotated, facet-filterable feedback views. Each layer
communicates only through explicit contracts.

LAYER STRUCTURE:
================

1. RECORD STORE (storage/)
   - Responsibility: Read-only access to raw feedback records
   - Outputs: FeedbackRecord (immutable)
   - MUST NOT: Hide failures behind an empty list

2. CORE (core/)
   - Responsibility: Join records with annotations, track annotation lifecycle
   - Allowed inputs: FeedbackRecord, Annotation (from adapter/)
   - Outputs: EnrichedRecord (immutable, always rebuilt)
   - MUST NOT: Raise on missing, duplicate or unknown annotation ids

3. QUERY (query/)
   - Responsibility: Facet option lists and total counts
   - Allowed inputs: EnrichedRecord
   - MUST NOT: Depend on the current filter selection

4. API (api/)
   - Responsibility: HTTP query surface over the engine

CONSTRAINTS ENFORCED:
=====================
- Immutability-first: records and annotations are frozen
- Deterministic: identical inputs always produce identical outputs
- Only store failures propagate; model failures degrade to defaults
"""
