import io
from datetime import datetime, timezone

import pytest
from rich.console import Console

from models import ReviewableItem
from store import SentenceStore


NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_item(now):
    def _make(item_id=1, **overrides):
        fields = dict(
            id=item_id,
            source_text=f"sentence {item_id}",
            target_text=f"frase {item_id}",
            target_language="es",
            next_review_at=now,
            interval_days=1,
            ease=2.5,
            repetitions=0,
        )
        fields.update(overrides)
        return ReviewableItem(**fields)
    return _make


@pytest.fixture
def store(tmp_path):
    return SentenceStore(tmp_path / "sentences.db")


@pytest.fixture
def console():
    return Console(file=io.StringIO(), width=120, color_system=None)


