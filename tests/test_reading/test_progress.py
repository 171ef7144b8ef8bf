"""Tests for ProgressTracker and ProgressLog."""

from datetime import date, timedelta

import pytest

from readtrack.db.schemas import ProgressUpdate
from readtrack.errors import ValidationError
from readtrack.reading.progress import ProgressLog, ProgressTracker
from readtrack.stats.analytics import ItemProgress


@pytest.fixture
def tracker(db):
    """Create a ProgressTracker with test database."""
    return ProgressTracker(db)


@pytest.fixture
def progress_log(db):
    """Create a ProgressLog with test database."""
    return ProgressLog(db)


def update(title="Sapiens", page=0, **kwargs) -> ProgressUpdate:
    return ProgressUpdate(title=title, current_page_after=page, **kwargs)


class TestRecordProgress:
    """Tests for record_progress."""

    def test_first_update(self, tracker, user_id):
        """Test a first update on a new book."""
        result = tracker.record_progress(
            user_id, update(page=100, author="Yuval Noah Harari", total_pages=443)
        )

        assert result.item.current_page == 100
        assert result.item.total_pages == 443
        assert result.log.pages_read == 100
        assert result.log.current_page_after == 100
        assert result.log.reading_item_id == result.item.id
        assert result.log.date == date.today().isoformat()

        progress = ItemProgress.from_item(result.item)
        assert progress.status.value == "reading"
        assert progress.progress_percent == 23

    def test_forward_update(self, tracker, user_id):
        """Test that the log records the page delta."""
        tracker.record_progress(user_id, update(page=100))
        result = tracker.record_progress(user_id, update(page=150))

        assert result.pages_read == 50
        assert result.item.current_page == 150

    def test_backward_update(self, tracker, user_id):
        """Test that a backwards move logs zero and moves the page."""
        tracker.record_progress(user_id, update(page=150))
        result = tracker.record_progress(user_id, update(page=100))

        assert result.pages_read == 0
        assert result.log.current_page_after == 100
        assert result.item.current_page == 100

    def test_same_day_updates_not_merged(self, tracker, progress_log, user_id):
        """Test that every update appends its own entry."""
        day = date(2025, 3, 1)
        tracker.record_progress(user_id, update(page=10), on_date=day)
        tracker.record_progress(user_id, update(page=30), on_date=day)

        logs = progress_log.list_for_user(user_id)
        assert len(logs) == 2
        assert sorted(log.pages_read for log in logs) == [10, 20]

    def test_log_sum_matches_forward_progress(self, tracker, progress_log, user_id):
        """Test that summed deltas equal the furthest page when only moving forward."""
        for page in (12, 40, 41, 90, 200):
            result = tracker.record_progress(user_id, update(page=page))

        logs = progress_log.list_for_item(user_id, result.item.id)
        assert sum(log.pages_read for log in logs) == 200

    def test_blank_title_rejected(self, tracker, user_id, progress_log):
        """Test that a blank title writes nothing."""
        with pytest.raises(ValidationError):
            tracker.record_progress(
                user_id, ProgressUpdate.model_construct(title=" ", current_page_after=5)
            )

        assert progress_log.list_for_user(user_id) == []

    def test_logs_info_message(self, tracker, user_id, caplog):
        """Test that each update is logged."""
        with caplog.at_level("INFO", logger="readtrack"):
            tracker.record_progress(user_id, update(page=25))

        assert "Logged 25 page(s) for 'Sapiens'" in caplog.text


class TestProgressLogQueries:
    """Tests for log listing and aggregation."""

    def test_list_newest_first(self, tracker, progress_log, user_id):
        """Test that entries come back newest day first."""
        tracker.record_progress(user_id, update(page=10), on_date=date(2025, 3, 1))
        tracker.record_progress(user_id, update(page=20), on_date=date(2025, 3, 3))
        tracker.record_progress(user_id, update(page=30), on_date=date(2025, 3, 2))

        dates = [log.date for log in progress_log.list_for_user(user_id)]
        assert dates == ["2025-03-03", "2025-03-02", "2025-03-01"]

    def test_list_with_range_and_limit(self, tracker, progress_log, user_id):
        """Test date range and limit filters."""
        start = date(2025, 3, 1)
        for i in range(5):
            tracker.record_progress(
                user_id, update(page=(i + 1) * 10), on_date=start + timedelta(days=i)
            )

        ranged = progress_log.list_for_user(
            user_id, start_date=date(2025, 3, 2), end_date=date(2025, 3, 4)
        )
        assert len(ranged) == 3

        limited = progress_log.list_for_user(user_id, limit=2)
        assert [log.date for log in limited] == ["2025-03-05", "2025-03-04"]

    def test_pages_by_day(self, tracker, progress_log, user_id):
        """Test per-day totals across items."""
        day = date(2025, 3, 1)
        tracker.record_progress(user_id, update(page=10), on_date=day)
        tracker.record_progress(user_id, update(title="Other", page=5), on_date=day)
        tracker.record_progress(user_id, update(page=25), on_date=day + timedelta(days=1))

        totals = progress_log.pages_by_day(user_id)
        assert totals == {day: 15, day + timedelta(days=1): 15}

    def test_logs_isolated_per_user(self, tracker, progress_log, user_id, other_user_id):
        """Test that users only see their own entries."""
        tracker.record_progress(user_id, update(page=10))

        assert progress_log.list_for_user(other_user_id) == []
