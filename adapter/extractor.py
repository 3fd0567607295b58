"""
Annotation Extractor
====================

Turns raw, possibly malformed model output into typed annotations.

TOLERANCE LADDER:
=================
1. Empty output            -> no annotations, "no output" diagnostic
2. Whole text is JSON      -> parse directly
3. JSON buried in prose    -> parse the first '[' .. last ']' substring
4. Nothing parseable       -> no annotations, diagnostic is the raw text

The bracket search is NOT nesting-aware. Two separate arrays in
the commentary will be glued together and fail step 3; that is the contract.

Pure function of its inputs. Nothing here raises across the boundary.
"""

from __future__ import annotations
from typing import Iterable, List, Optional, Tuple
import json
import logging
import re

from .contracts import (
    Annotation,
    ExtractionResult,
    RecordId,
    Sentiment,
    Urgency,
    DEFAULT_THEME,
    id_key,
)


logger = logging.getLogger(__name__)

NO_OUTPUT_DIAGNOSTIC = "Model produced no output"

# Wrapper keys some models use around the array they were asked for
_WRAPPER_KEYS = ("annotations", "results", "items", "feedback")

_FENCE_OPEN_RE = re.compile(r"^\s*```[a-zA-Z]*\s*", re.MULTILINE)
_FENCE_CLOSE_RE = re.compile(r"\s*```\s*$", re.MULTILINE)


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences around a JSON payload."""
    text = _FENCE_OPEN_RE.sub("", text)
    return _FENCE_CLOSE_RE.sub("", text).strip()


def locate_json_array(text: str) -> Optional[str]:
    """
    Return the substring from the first '[' to the last ']', or None.

    Greedy and non-nesting-aware by contract.
    """
    start = text.find("[")
    end = text.rfind("]")
    if start == -1 or end <= start:
        return None
    return text[start:end + 1]


def _parse_array(text: str) -> Optional[list]:
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError, ValueError):
        return None

    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        for key in _WRAPPER_KEYS:
            if isinstance(data.get(key), list):
                return data[key]
    return None


def coerce_annotation(item: object) -> Optional[Annotation]:
    """
    Coerce one parsed element into an Annotation.

    Returns None only when the element cannot be joined to a record
    (not an object, or no usable id). Bad labels are defaulted, not dropped,
    so downstream facet counts stay stable.
    """
    if not isinstance(item, dict):
        return None

    raw_id = item.get("id")
    if raw_id is None or isinstance(raw_id, (bool, list, dict)):
        return None
    if isinstance(raw_id, float) and raw_id.is_integer():
        raw_id = int(raw_id)
    if not id_key(raw_id):
        return None

    theme = item.get("theme")
    if not isinstance(theme, str) or not theme.strip():
        theme = DEFAULT_THEME

    return Annotation(
        id=raw_id,
        theme=theme.strip(),
        sentiment=Sentiment.coerce(item.get("sentiment")),
        urgency=Urgency.coerce(item.get("urgency")),
    )


class AnnotationExtractor:
    """
    Tolerant parser for model annotation output.

    GUARANTEES:
    ===========
    1. Never raises for any string input
    2. Invalid enum values map to Neutral / Medium
    3. Failed extraction returns the raw text as diagnostic
    """

    def extract(
        self,
        raw_model_text: Optional[str],
        expected_ids: Iterable[RecordId] = ()
    ) -> ExtractionResult:
        """
        Extract annotations from model output.

        `expected_ids` only feeds the diagnostic; unknown ids are kept and
        left for the merger to ignore.
        """
        if raw_model_text is None or not raw_model_text.strip():
            logger.warning("Annotation extraction skipped: empty model output")
            return ExtractionResult(annotations=(), diagnostic=NO_OUTPUT_DIAGNOSTIC)

        elements = self._parse(raw_model_text)
        if elements is None:
            logger.warning(
                "Annotation extraction failed: no JSON array in %d chars of output",
                len(raw_model_text)
            )
            return ExtractionResult(annotations=(), diagnostic=raw_model_text)

        annotations: List[Annotation] = []
        dropped = 0
        for item in elements:
            annotation = coerce_annotation(item)
            if annotation is None:
                dropped += 1
                continue
            annotations.append(annotation)

        diagnostic = self._describe(annotations, dropped, expected_ids)
        logger.debug("Annotation extraction: %s", diagnostic)
        return ExtractionResult(annotations=tuple(annotations), diagnostic=diagnostic)

    def _parse(self, raw_model_text: str) -> Optional[list]:
        text = strip_code_fences(raw_model_text)

        elements = _parse_array(text)
        if elements is not None:
            return elements

        candidate = locate_json_array(text)
        if candidate is None:
            return None
        return _parse_array(candidate)

    def _describe(
        self,
        annotations: List[Annotation],
        dropped: int,
        expected_ids: Iterable[RecordId]
    ) -> str:
        parts = [f"Parsed {len(annotations)} annotations"]
        if dropped:
            parts.append(f"dropped {dropped} elements without a usable id")

        expected = [id_key(i) for i in expected_ids]
        if expected:
            seen = {a.key for a in annotations}
            expected_set = set(expected)
            missing = [k for k in expected if k not in seen]
            unknown = _ordered_unique(a.key for a in annotations if a.key not in expected_set)
            if missing:
                parts.append("missing ids: " + ", ".join(missing))
            if unknown:
                parts.append("unknown ids: " + ", ".join(unknown))

        return "; ".join(parts)


def _ordered_unique(keys: Iterable[str]) -> List[str]:
    seen = set()
    out = []
    for key in keys:
        if key not in seen:
            seen.add(key)
            out.append(key)
    return out


def extract(
    raw_model_text: Optional[str],
    expected_ids: Iterable[RecordId] = ()
) -> Tuple[Tuple[Annotation, ...], str]:
    """Functional form: returns (annotations, diagnostic)."""
    result = AnnotationExtractor().extract(raw_model_text, expected_ids)
    return result.annotations, result.diagnostic
