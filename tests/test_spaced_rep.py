"""Tests for spaced_rep.py -- simplified SM-2 scheduling."""

from datetime import timedelta

import pytest

from spaced_rep import (
    InvalidQualityGrade, collection_stats, new_item, record_review, select_due,
)


def test_first_perfect_review(make_item, now):
    """A perfect first review keeps the 1 day interval and lowers ease to 2.36."""
    item = make_item(interval_days=1, ease=2.5, repetitions=0)
    result = record_review(item, 3, now)
    assert result.repetitions == 1
    assert result.interval_days == 1
    assert result.ease == pytest.approx(2.36)
    assert result.next_review_at == now + timedelta(days=1)


def test_second_perfect_review_jumps_to_six_days(make_item, now):
    item = make_item(interval_days=1, ease=2.36, repetitions=1)
    result = record_review(item, 3, now)
    assert result.interval_days == 6
    assert result.repetitions == 2
    assert result.next_review_at == now + timedelta(days=6)


def test_later_reviews_multiply_by_previous_ease(make_item, now):
    """Interval growth uses the ease from before this review."""
    item = make_item(interval_days=10, ease=2.0, repetitions=3)
    result = record_review(item, 3, now)
    assert result.interval_days == 20
    assert result.ease == pytest.approx(1.86)


def test_interval_rounds_half_up(make_item, now):
    item = make_item(interval_days=1, ease=2.5, repetitions=2)
    assert record_review(item, 3, now).interval_days == 3


def test_failure_resets_interval_and_clamps_ease(make_item, now):
    item = make_item(interval_days=30, ease=2.0, repetitions=5)
    result = record_review(item, 0, now)
    assert result.interval_days == 1
    assert result.repetitions == 6
    assert result.ease == pytest.approx(1.3)
    assert result.next_review_at == now + timedelta(days=1)


@pytest.mark.parametrize("quality", [1, 2])
def test_correct_but_imperfect_recall_still_resets_interval(make_item, now, quality):
    """Grades 1 and 2 count as correct answers yet restart the interval ladder."""
    item = make_item(interval_days=15, ease=2.5, repetitions=4)
    result = record_review(item, quality, now)
    assert result.interval_days == 1
    assert result.repetitions == 5


@pytest.mark.parametrize("quality,delta", [(0, -0.8), (1, -0.54), (2, -0.32), (3, -0.14)])
def test_ease_adjustment_per_grade(make_item, now, quality, delta):
    item = make_item(ease=2.5, repetitions=2, interval_days=6)
    assert record_review(item, quality, now).ease == pytest.approx(2.5 + delta)


def test_next_review_counts_from_review_time(make_item, now):
    item = make_item(next_review_at=now - timedelta(days=40), interval_days=6, ease=2.5, repetitions=2)
    later = now + timedelta(hours=5)
    result = record_review(item, 3, later)
    assert result.next_review_at == later + timedelta(days=15)


def test_floors_and_repetitions_over_a_long_history(make_item, now):
    item = make_item()
    grades = [3, 3, 3, 0, 1, 2, 3, 3, 0, 0, 0, 0, 3, 3, 3, 3, 2, 3]
    for quality in grades:
        previous = item.repetitions
        item = record_review(item, quality, now)
        assert item.ease >= 1.3
        assert item.interval_days >= 1
        assert item.repetitions == previous + 1
    assert item.repetitions == len(grades)


def test_review_does_not_touch_input_or_identity(make_item, now):
    item = make_item(item_id=7, interval_days=6, ease=2.5, repetitions=2)
    result = record_review(item, 3, now)
    assert item.interval_days == 6
    assert item.repetitions == 2
    assert item.ease == 2.5
    assert (result.id, result.source_text, result.target_text, result.target_language) == \
        (item.id, item.source_text, item.target_text, item.target_language)


@pytest.mark.parametrize("quality", [4, -1, 5, True, 2.0, "3", None])
def test_invalid_quality_raises(make_item, now, quality):
    item = make_item(interval_days=6, ease=2.5, repetitions=2)
    before = item.model_copy()
    with pytest.raises(InvalidQualityGrade):
        record_review(item, quality, now)
    assert item == before


def test_invalid_quality_is_a_value_error(make_item, now):
    with pytest.raises(ValueError):
        record_review(make_item(), 4, now)


def test_select_due_filters_and_orders(make_item, now):
    late = make_item(1, next_review_at=now + timedelta(days=1))
    today = make_item(2, next_review_at=now)
    overdue = make_item(3, next_review_at=now - timedelta(days=1))
    due = select_due([late, today, overdue], now)
    assert [item.id for item in due] == [3, 2]


def test_select_due_keeps_insertion_order_on_ties(make_item, now):
    items = [make_item(i, next_review_at=now - timedelta(hours=1)) for i in (5, 2, 9)]
    assert [item.id for item in select_due(items, now)] == [5, 2, 9]


def test_select_due_empty(make_item, now):
    assert select_due([], now) == []
    assert select_due([make_item(next_review_at=now + timedelta(seconds=1))], now) == []


def test_select_due_is_idempotent(make_item, now):
    items = [make_item(i, next_review_at=now - timedelta(days=i % 3)) for i in range(1, 7)]
    assert select_due(items, now) == select_due(items, now)


def test_new_item_initial_state(now):
    item = new_item(4, "Good morning", "Buenos días", "es", now)
    assert item.id == 4
    assert item.repetitions == 0
    assert item.interval_days == 1
    assert item.ease == 2.5
    assert item.next_review_at == now


def test_collection_stats(make_item, now):
    items = [
        make_item(1),
        make_item(2, repetitions=3, interval_days=6, next_review_at=now + timedelta(days=6)),
        make_item(3, repetitions=6, interval_days=40, next_review_at=now - timedelta(days=1)),
    ]
    stats = collection_stats(items, now)
    assert stats.total == 3
    assert stats.due == 2
    assert stats.new == 1
    assert stats.learning == 1
    assert stats.mature == 1
