"""
Feedback Lens: API Server
=========================

Query surface over the feedback engine.

Endpoints:
- GET  /health
- GET  /api/v1/feedback   -> records, source summary, default annotations, facets
- POST /api/v1/analyze    -> {annotations, diagnostic} from the model pipeline
- POST /api/v1/view       -> filtered records + facet summaries for a selection

Filter state is owned by the client and sent with each /view call; the
server keeps no per-user state.

Usage:
    uvicorn backend.api.server:app --reload
"""
import logging
from contextlib import asynccontextmanager
from typing import Dict, List, Optional, Union

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from adapter.contracts import Annotation, Sentiment, Urgency
from frontend.state.filters import FilterEngine
from frontend.mapper import ViewModelMapper, to_payload
from ..engine import BackendConfig, FeedbackViewEngine, FeedbackView
from ..storage import RecordStoreError
from .mapper import map_view_payload


logger = logging.getLogger(__name__)

# =============================================================================
# INFRASTRUCTURE SETUP
# =============================================================================

engine_instance: Optional[FeedbackViewEngine] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the engine from environment configuration on startup."""
    global engine_instance

    if engine_instance is None:
        config = BackendConfig.from_env()
        logger.info(
            "Initializing feedback engine (store=%s, provider=%s)",
            config.store_kind, config.provider_kind
        )
        engine_instance = FeedbackViewEngine(config)

    yield

    logger.info("Shutting down feedback engine.")
    engine_instance = None


app = FastAPI(
    title="Feedback Lens API",
    version="0.1.0",
    description="Annotated, facet-filterable feedback views",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


def set_engine(engine: Optional[FeedbackViewEngine]):
    """Install an engine explicitly (tests, embedding)."""
    global engine_instance
    engine_instance = engine


def _require_engine() -> FeedbackViewEngine:
    if not engine_instance:
        raise HTTPException(status_code=503, detail="Engine not initialized")
    return engine_instance


def _open_view() -> FeedbackView:
    engine = _require_engine()
    try:
        return engine.open_view()
    except RecordStoreError as e:
        logger.error("Record store failure (%s): %s", e.code.value, e.message)
        raise HTTPException(status_code=503, detail=f"Record store failure: {e.message}")


# =============================================================================
# REQUEST MODELS
# =============================================================================

class AnnotationIn(BaseModel):
    id: Union[int, str]
    theme: str = "Unknown"
    sentiment: str = "Neutral"
    urgency: str = "Medium"

    def to_annotation(self) -> Annotation:
        return Annotation(
            id=self.id,
            theme=self.theme,
            sentiment=Sentiment.coerce(self.sentiment),
            urgency=Urgency.coerce(self.urgency),
        )


class ViewRequest(BaseModel):
    annotations: Optional[List[AnnotationIn]] = None
    selections: Dict[str, List[str]] = Field(default_factory=dict)
    diagnostic: Optional[str] = None


# =============================================================================
# ENDPOINTS
# =============================================================================

@app.get("/health")
async def health_check():
    """System status."""
    _require_engine()
    return {"status": "online"}


@app.get("/api/v1/feedback")
def get_feedback():
    """
    Initial record set.

    Annotations are the defaults; the client calls /analyze afterwards.
    """
    view = _open_view()
    return {
        "summary": view.summary(),
        "feedback": [r.to_dict() for r in view.records],
        "annotations": [a.to_dict() for a in view.default_annotations()],
        "facets": view.facets.to_dict(),
    }


@app.post("/api/v1/analyze")
def analyze():
    """
    Run the annotation pipeline.

    Model failures still answer 200 with default annotations; only a store
    failure is an error.
    """
    view = _open_view()
    result = view.annotate(_require_engine().pipeline)

    payload = result.to_payload()
    payload["lifecycle"] = view.lifecycle.state.value
    payload["fallback"] = result.fallback
    return payload


@app.post("/api/v1/view")
def post_view(request: ViewRequest):
    """
    Filtered view for a client-held selection.

    Without annotations the view is unannotated and model facets are ignored.
    """
    view = _open_view()
    if request.annotations is not None:
        view.apply_annotations(
            [a.to_annotation() for a in request.annotations],
            request.diagnostic or "",
        )

    try:
        filters = FilterEngine.from_selections(request.selections)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Unknown facet: {e}")

    filtered = filters.apply(view.enriched, annotated=view.annotated)
    view_model = ViewModelMapper().map_view(
        enriched=view.enriched,
        filtered=filtered,
        summaries=filters.summaries(view.facets),
        annotated_view=view.annotated,
        diagnostic=view.diagnostic,
    )
    return map_view_payload(view, to_payload(view_model))
