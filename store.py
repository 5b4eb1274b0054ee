"""
SQLite-backed collection store for reviewable sentences.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

from pydantic import TypeAdapter, ValidationError

from models import (
    LegacySentence, ReviewableItem, ReviewHistory, ReviewLog, SentenceDB, MIN_EASE,
    get_engine, init_db, get_session,
)
from spaced_rep import new_item

logger = logging.getLogger(__name__)

_legacy_list = TypeAdapter(list[LegacySentence])


def _aware(value: datetime) -> datetime:
    # legacy timestamps without an offset are UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SentenceStore:
    def __init__(self, db_path):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.engine = get_engine(str(self.db_path))
        init_db(self.engine)

    def load_all(self) -> list[ReviewableItem]:
        """All sentences in insertion order."""
        session = get_session(self.engine)
        try:
            rows = session.query(SentenceDB).order_by(SentenceDB.id).all()
            return [ReviewableItem.model_validate(row) for row in rows]
        finally:
            session.close()

    def save_all(self, items: Iterable[ReviewableItem]) -> None:
        """Persist the whole collection, inserting or updating by id."""
        items = list(items)
        session = get_session(self.engine)
        try:
            rows = {row.id: row for row in session.query(SentenceDB).all()}
            for item in items:
                row = rows.get(item.id)
                if row is None:
                    row = SentenceDB(id=item.id)
                    session.add(row)
                row.source_text = item.source_text
                row.target_text = item.target_text
                row.target_language = item.target_language
                row.next_review_at = item.next_review_at
                row.interval_days = item.interval_days
                row.ease = item.ease
                row.repetitions = item.repetitions
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
        logger.info("Saved %d sentences to %s", len(items), self.db_path)

    def add(self, source_text: str, target_text: str, target_language: str,
            now: datetime) -> ReviewableItem:
        """Store a new sentence; the database assigns its id."""
        session = get_session(self.engine)
        try:
            row = SentenceDB(
                source_text=source_text,
                target_text=target_text,
                target_language=target_language,
                next_review_at=now,
                created_at=now,
            )
            session.add(row)
            session.commit()
            item = new_item(row.id, source_text, target_text, target_language, now)
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
        logger.info("Added sentence %d (%s)", item.id, target_language)
        return item

    def log_reviews(self, logs: Iterable[ReviewLog]) -> None:
        session = get_session(self.engine)
        try:
            for log in logs:
                session.add(ReviewHistory(
                    sentence_id=log.item_id,
                    quality=log.quality,
                    reviewed_at=log.reviewed_at,
                ))
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def history(self, item_id: int) -> list[ReviewLog]:
        session = get_session(self.engine)
        try:
            rows = (
                session.query(ReviewHistory)
                .filter(ReviewHistory.sentence_id == item_id)
                .order_by(ReviewHistory.reviewed_at, ReviewHistory.id)
                .all()
            )
            return [ReviewLog.model_validate(row) for row in rows]
        finally:
            session.close()

    def is_empty(self) -> bool:
        session = get_session(self.engine)
        try:
            return session.query(SentenceDB).count() == 0
        finally:
            session.close()

    def import_legacy_json(self, path) -> int:
        """
        Import a sentences.json file from the 1.x releases.

        Only runs against an empty store. Ids, order and scheduling state are
        kept as they were.

        Returns:
            Number of sentences imported
        """
        path = Path(path)
        if not path.exists() or not self.is_empty():
            return 0
        try:
            with open(path, "r", encoding="utf-8") as f:
                records = _legacy_list.validate_python(json.load(f))
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            logger.warning("Skipping legacy import from %s: %s", path, e)
            return 0

        items = [
            ReviewableItem(
                id=record.id,
                source_text=record.original,
                target_text=record.translated,
                target_language=record.language,
                next_review_at=_aware(record.nextReview),
                interval_days=max(1, record.interval),
                ease=max(MIN_EASE, record.ease),
                repetitions=max(0, record.repetitions),
            )
            for record in records
        ]
        self.save_all(items)
        logger.info("Imported %d sentences from %s", len(items), path)
        return len(items)
