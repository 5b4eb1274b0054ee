"""
Simplified SM-2 Spaced Repetition Algorithm

Quality ratings:
0 - Again, incorrect response
1 - Hard, correct response after difficulty
2 - Good, correct response after hesitation
3 - Easy, perfect response

Any grade below 3 restarts the interval ladder, so only a perfect recall
lets an item's interval grow.
"""

import math
from datetime import datetime, timedelta
from typing import Iterable

from models import (
    CollectionStats, ReviewableItem,
    INITIAL_EASE, INITIAL_INTERVAL, MIN_EASE,
)

QUALITY_GRADES = (0, 1, 2, 3)
PERFECT = 3
MATURE_INTERVAL = 21


class InvalidQualityGrade(ValueError):
    """Raised when a review grade is outside 0-3."""

    def __init__(self, quality):
        super().__init__(f"quality must be one of {QUALITY_GRADES}, got {quality!r}")
        self.quality = quality


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def new_item(item_id: int, source_text: str, target_text: str, target_language: str,
             now: datetime) -> ReviewableItem:
    """Initial scheduling state for a freshly added sentence."""
    return ReviewableItem(
        id=item_id,
        source_text=source_text,
        target_text=target_text,
        target_language=target_language,
        next_review_at=now,
        interval_days=INITIAL_INTERVAL,
        ease=INITIAL_EASE,
        repetitions=0,
    )


def next_ease(ease: float, quality: int) -> float:
    # EF' = EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02))
    return max(
        MIN_EASE,
        ease + (0.1 - (5 - quality) * (0.08 + (5 - quality) * 0.02))
    )


def record_review(item: ReviewableItem, quality: int, now: datetime) -> ReviewableItem:
    """
    Apply simplified SM-2 to an item after one review.

    Args:
        item: The item that was just reviewed
        quality: Response quality (0-3)
        now: Time of the review

    Returns:
        A new item with updated scheduling; `item` itself is left as is
    """
    if isinstance(quality, bool) or not isinstance(quality, int) or quality not in QUALITY_GRADES:
        raise InvalidQualityGrade(quality)

    if quality < PERFECT:
        interval = 1
    elif item.repetitions == 0:
        interval = 1
    elif item.repetitions == 1:
        interval = 6
    else:
        interval = max(1, _round_half_up(item.interval_days * item.ease))

    return item.model_copy(update={
        "interval_days": interval,
        "repetitions": item.repetitions + 1,
        "ease": next_ease(item.ease, quality),
        "next_review_at": now + timedelta(days=interval),
    })


def is_due(item: ReviewableItem, now: datetime) -> bool:
    return item.next_review_at <= now


def select_due(items: Iterable[ReviewableItem], now: datetime) -> list[ReviewableItem]:
    """Items due for review, earliest first (sorted() is stable, so ties keep input order)."""
    return sorted(
        (item for item in items if is_due(item, now)),
        key=lambda item: item.next_review_at,
    )


def collection_stats(items: Iterable[ReviewableItem], now: datetime) -> CollectionStats:
    stats = CollectionStats()
    for item in items:
        stats.total += 1
        if is_due(item, now):
            stats.due += 1
        if item.repetitions == 0:
            stats.new += 1
        elif item.interval_days < MATURE_INTERVAL:
            stats.learning += 1
        if item.interval_days >= MATURE_INTERVAL:
            stats.mature += 1
    return stats
