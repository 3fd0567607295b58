"""
Record Converter

Converts backend records to adapter inputs, and provider output to text.

BOUNDARY ENFORCEMENT:
=====================
This is where backend types are translated to adapter types, and where the
provider's calling convention is flattened to a plain string. Nothing past
this module knows what shape the model response had.
"""

from __future__ import annotations
from typing import Any, List, Sequence
import hashlib
import json

# Backend contracts (input)
from backend.contracts.records import FeedbackRecord

# Adapter contracts (output)
from .contracts import RecordBatchInput


# Observed cap: the first 20 records go to the model
DEFAULT_BATCH_LIMIT = 20


class RecordConverter:
    """
    Convert backend records to a model batch.

    GUARANTEES:
    ===========
    1. Deterministic conversion (same records -> same batch_id)
    2. Input order preserved; only the first `max_batch_size` are sent
    3. One JSON object per record, "id" first, newlines escaped
    """

    def __init__(self, max_batch_size: int = DEFAULT_BATCH_LIMIT):
        if max_batch_size < 1:
            raise ValueError("max_batch_size must be positive")
        self._max_batch_size = max_batch_size

    @property
    def max_batch_size(self) -> int:
        return self._max_batch_size

    def to_batch(self, records: Sequence[FeedbackRecord]) -> RecordBatchInput:
        selected = list(records[:self._max_batch_size])
        serialized = [json.dumps(r.to_dict(), ensure_ascii=False) for r in selected]

        return RecordBatchInput(
            batch_id=self._generate_batch_id(serialized),
            record_ids=tuple(r.id for r in selected),
            serialized_records=tuple(serialized),
            truncated_count=max(0, len(records) - len(selected)),
        )

    def _generate_batch_id(self, serialized: List[str]) -> str:
        content = "\n".join(serialized)
        return f"batch_{hashlib.sha256(content.encode()).hexdigest()[:12]}"


def extract_output_text(content: Any) -> str:
    """
    Flatten a provider response to plain text.

    Accepted shapes, in order:
    - a string (returned as-is)
    - an object with a string `response` field (Workers AI text models)
    - an object with a string `output_text` field
    - a Workers AI envelope {"result": {"response": ...}}
    Anything else is serialized whole as a last resort.
    """
    if content is None:
        return ""
    if isinstance(content, str):
        return content

    if isinstance(content, dict):
        for key in ("response", "output_text"):
            value = content.get(key)
            if isinstance(value, str):
                return value

        result = content.get("result")
        if isinstance(result, dict):
            nested = result.get("response")
            if isinstance(nested, str):
                return nested

    for attr in ("response", "output_text"):
        value = getattr(content, attr, None)
        if isinstance(value, str):
            return value

    try:
        return json.dumps(content, default=str)
    except (TypeError, ValueError):
        return str(content)
