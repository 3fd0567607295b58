"""
Canonical Prompt Generation
===========================

Pure functions for generating the annotation prompt from a record batch.

INVARIANT: Same batch -> same prompt_hash
No UI context, no runtime state.
"""

from __future__ import annotations
from dataclasses import dataclass
import hashlib

from .contracts import RecordBatchInput


@dataclass(frozen=True)
class CanonicalPrompt:
    """
    Frozen prompt with hash for tracing.

    INVARIANT: Same batch -> same prompt_hash
    """
    batch_id: str
    prompt_text: str
    prompt_hash: str

    @staticmethod
    def create(batch: RecordBatchInput) -> 'CanonicalPrompt':
        """Factory method; the only way to create prompts."""
        prompt_text = PromptTemplates.annotation_prompt(batch)
        return CanonicalPrompt(
            batch_id=batch.batch_id,
            prompt_text=prompt_text,
            prompt_hash=hashlib.sha256(prompt_text.encode()).hexdigest(),
        )


class PromptTemplates:
    """Prompt templates. Pure functions of batch data."""

    @staticmethod
    def annotation_prompt(batch: RecordBatchInput) -> str:
        records = "\n".join(batch.serialized_records)

        return f"""TASK: Feedback Annotation

Analyze each feedback item below. For each item, return:
  - id (copied exactly from the item)
  - theme (a short topic label, e.g. "Billing")
  - sentiment (one of: Positive, Neutral, Negative)
  - urgency (one of: High, Medium, Low)

FEEDBACK (one JSON object per line):
{records}

OUTPUT FORMAT:
Return ONLY a JSON array, no commentary:
[{{"id": <id>, "theme": "<theme>", "sentiment": "<sentiment>", "urgency": "<urgency>"}}]"""
