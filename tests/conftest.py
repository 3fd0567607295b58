"""
Shared test fixtures.
"""

from datetime import datetime, timedelta, timezone

import pytest

from adapter.contracts import Annotation, Sentiment, Urgency
from backend.contracts.records import FeedbackRecord
from backend.core.merger import merge


BASE_TIME = datetime(2025, 1, 6, 9, 0, tzinfo=timezone.utc)


def make_record(record_id, source="Twitter", message=None, offset_minutes=0) -> FeedbackRecord:
    return FeedbackRecord(
        id=record_id,
        source=source,
        message=message or f"Feedback {record_id}",
        timestamp=BASE_TIME + timedelta(minutes=offset_minutes),
    )


def make_annotation(record_id, theme="Billing", sentiment="Negative", urgency="High") -> Annotation:
    return Annotation(
        id=record_id,
        theme=theme,
        sentiment=Sentiment(sentiment),
        urgency=Urgency(urgency),
    )


@pytest.fixture
def record_factory():
    return make_record


@pytest.fixture
def annotation_factory():
    return make_annotation


@pytest.fixture
def records():
    """Six records across three sources, in store order."""
    return [
        make_record(1, "Twitter", "Dashboard is slow", 0),
        make_record(2, "Support Email", "Charged twice", 10),
        make_record(3, "GitHub", "Docs missing headers", 20),
        make_record(4, "Twitter", "Love dark mode", 30),
        make_record(5, "Discord", "Login broken", 40),
        make_record(6, "Twitter", "Export to CSV?", 50),
    ]


@pytest.fixture
def annotations():
    """Annotations for records 1-5 (record 6 is left unannotated)."""
    return [
        make_annotation(1, "Performance", "Negative", "Medium"),
        make_annotation(2, "Billing", "Negative", "High"),
        make_annotation(3, "Documentation", "Neutral", "Low"),
        make_annotation(4, "UI", "Positive", "Low"),
        make_annotation(5, "Reliability", "Negative", "High"),
    ]


@pytest.fixture
def enriched(records, annotations):
    return merge(records, annotations)
