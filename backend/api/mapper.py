"""
API Mapper
==========

Shapes view payloads for the wire. Adds the record-set summary and the
annotation lifecycle next to the renderer view model.
"""
from datetime import datetime, timezone
from typing import Any, Dict

from ..engine import FeedbackView


def map_view_payload(view: FeedbackView, view_model: Dict[str, Any]) -> Dict[str, Any]:
    """
    Wrap a serialized FeedbackViewModel for the /view endpoint.

    Args:
        view: The view the model was rendered from.
        view_model: to_payload() output for that view.
    """
    return {
        "generated_at": datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
        "summary": view.summary(),
        "lifecycle": view.lifecycle.state.value,
        "view": view_model,
    }
