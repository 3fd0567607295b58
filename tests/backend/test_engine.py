"""
Engine Tests
============

Configuration from the environment, and one view's life from fetch to
annotated facets.
"""

from pathlib import Path

import pytest

from adapter.pipeline import InvocationConfig
from adapter.providers import MockProvider, ProviderErrorCode, WorkersAIProvider
from backend.contracts.records import FacetName
from backend.core.lifecycle import LifecycleError, LifecycleState
from backend.engine import BackendConfig, FeedbackView, FeedbackViewEngine
from backend.storage import InMemoryRecordStore, JsonFileRecordStore, RecordStoreError, StoreErrorCode


class TestBackendConfig:

    def test_defaults(self):
        config = BackendConfig.from_env({})

        assert config.store_kind == "memory"
        assert config.provider_kind == "mock"
        assert config.data_path is None
        assert config.invocation.max_batch_size == 20
        assert config.invocation.timeout_seconds == 30.0

    def test_invocation_defaults_when_omitted(self):
        assert BackendConfig().invocation == InvocationConfig()
        assert BackendConfig(invocation=None).invocation == InvocationConfig()

    def test_reads_environment(self, tmp_path):
        config = BackendConfig.from_env({
            "FEEDBACK_STORE": "json",
            "FEEDBACK_DATA_PATH": str(tmp_path / "f.json"),
            "FEEDBACK_PROVIDER": "workers_ai",
            "CF_ACCOUNT_ID": "acct",
            "CF_API_TOKEN": "token",
            "FEEDBACK_MODEL_ID": "@cf/other/model",
            "FEEDBACK_BATCH_LIMIT": "5",
            "FEEDBACK_MODEL_TIMEOUT": "2.5",
        })

        assert config.data_path == Path(tmp_path / "f.json")
        assert config.invocation.max_batch_size == 5
        assert config.invocation.timeout_seconds == 2.5
        assert isinstance(config.build_store(), JsonFileRecordStore)

        provider = config.build_provider()
        assert isinstance(provider, WorkersAIProvider)
        assert provider.get_version().model_id == "@cf/other/model"

    def test_workers_ai_without_credentials(self):
        with pytest.raises(ValueError):
            BackendConfig(provider_kind="workers_ai").build_provider()

    def test_unknown_provider(self):
        with pytest.raises(ValueError):
            BackendConfig(provider_kind="carrier_pigeon").build_provider()


class TestFeedbackView:

    def test_opens_with_defaults(self, records):
        view = FeedbackView(records)

        assert not view.annotated
        assert all(not e.annotated for e in view.enriched)
        assert view.facets.values(FacetName.THEME) == ("Unknown",)

    def test_summary(self, records):
        summary = FeedbackView(records).summary()

        assert summary["totalFeedback"] == 6
        assert summary["countsBySource"]["Twitter"] == 3

    def test_apply_annotations_rebuilds_once(self, records, annotations):
        view = FeedbackView(records)

        state = view.apply_annotations(annotations, "Parsed 5 annotations")

        assert state is LifecycleState.ANNOTATED
        assert view.facets.values(FacetName.THEME)[0] == "Performance"
        assert view.diagnostic == "Parsed 5 annotations"
        with pytest.raises(LifecycleError):
            view.apply_annotations(annotations)

    def test_empty_annotations_keep_defaults(self, records):
        view = FeedbackView(records)

        assert view.apply_annotations([], "Model produced no output") is LifecycleState.UNANNOTATED
        assert view.facets.values(FacetName.THEME) == ("Unknown",)

    def test_default_annotations_cover_every_record(self, records):
        defaults = FeedbackView(records).default_annotations()

        assert [a.id for a in defaults] == [r.id for r in records]
        assert {a.theme for a in defaults} == {"Unknown"}

    def test_annotate_through_pipeline(self, records):
        engine = FeedbackViewEngine(store=InMemoryRecordStore(records), provider=MockProvider())
        view = engine.open_view()

        result = view.annotate(engine.pipeline)

        assert not result.fallback
        assert view.annotated
        assert all(e.annotated for e in view.enriched)


class TestFeedbackViewEngine:

    def test_default_engine_serves_sample(self):
        view = FeedbackViewEngine().open_view()

        assert view.summary()["totalFeedback"] == 12

    def test_store_failure_propagates(self, tmp_path):
        engine = FeedbackViewEngine(store=JsonFileRecordStore(tmp_path / "absent.json"), provider=MockProvider())

        with pytest.raises(RecordStoreError) as exc:
            engine.open_view()
        assert exc.value.code is StoreErrorCode.NOT_FOUND

    def test_model_failure_does_not_propagate(self, records):
        engine = FeedbackViewEngine(
            store=InMemoryRecordStore(records),
            provider=MockProvider(failure_mode=ProviderErrorCode.TIMEOUT),
        )

        result = engine.analyze()

        assert result.fallback
        assert len(result.annotations) == len(records)

    def test_analyze_given_records(self, records):
        engine = FeedbackViewEngine(store=InMemoryRecordStore(), provider=MockProvider())

        result = engine.analyze(records[:2])

        assert [a.id for a in result.annotations] == [1, 2]
