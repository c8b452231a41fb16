"""
Tests for the static model catalog.
"""

from services.model_catalog import AVAILABLE_MODELS, DEFAULT_MODEL_ID, models_for_provider


def _by_id(model_id):
    return next((m for m in AVAILABLE_MODELS if m.id == model_id), None)


class TestCatalog:
    def test_default_model_is_listed(self):
        assert _by_id(DEFAULT_MODEL_ID) is not None

    def test_ids_are_unique(self):
        ids = [m.id for m in AVAILABLE_MODELS]
        assert len(ids) == len(set(ids)) == 10

    def test_models_for_provider(self):
        assert DEFAULT_MODEL_ID in models_for_provider("bytez")
        assert models_for_provider("claude") == []

    def test_wire_format(self):
        data = _by_id(DEFAULT_MODEL_ID).to_dict()
        assert data["contextLength"].startswith("262K")
        assert isinstance(data["tags"], list)
        assert "context_length" not in data
