"""Unit tests for extraction run entities."""
from datetime import datetime, timedelta

import pytest

from fieldops_api.domain.entities.extraction_run import (
    ExtractionRun,
    ExtractionRunItem,
    ExtractionRunItemStatus,
    ExtractionRunStatus,
    ExtractionSession,
    final_run_status,
)


@pytest.mark.unit
class TestFinalRunStatus:
    """Tests for final_run_status."""

    def test_no_failures_is_completed(self):
        assert final_run_status(3, 0) == ExtractionRunStatus.COMPLETED

    def test_empty_run_is_completed(self):
        assert final_run_status(0, 0) == ExtractionRunStatus.COMPLETED

    def test_mixed_is_completed_with_errors(self):
        assert final_run_status(1, 2) == ExtractionRunStatus.COMPLETED_WITH_ERRORS

    def test_only_failures_is_failed(self):
        assert final_run_status(0, 4) == ExtractionRunStatus.FAILED


@pytest.mark.unit
class TestExtractionRun:
    """Tests for ExtractionRun aggregate."""

    def test_queued_items_in_ascending_id_order(self):
        run = ExtractionRun(id=1, session_id=1, items=[
            ExtractionRunItem(id=7, run_id=1, property_id=30),
            ExtractionRunItem(id=2, run_id=1, property_id=10, status=ExtractionRunItemStatus.SUCCEEDED),
            ExtractionRunItem(id=5, run_id=1, property_id=20),
        ])

        assert [item.id for item in run.queued_items()] == [5, 7]

    def test_to_dict_includes_items(self):
        run = ExtractionRun(id=1, session_id=2, items=[ExtractionRunItem(id=1, run_id=1, property_id=9)])

        result = run.to_dict()

        assert result["status"] == "PENDING"
        assert result["items"][0]["property_id"] == 9
        assert result["items"][0]["status"] == "QUEUED"


@pytest.mark.unit
class TestExtractionSession:
    """Tests for ExtractionSession entity."""

    def test_is_expired(self, sample_datetime: datetime):
        session = ExtractionSession(id=1, label="a", encrypted_state="x", expires_at=sample_datetime)

        assert session.is_expired(now=sample_datetime + timedelta(seconds=1))
        assert not session.is_expired(now=sample_datetime - timedelta(hours=1))

    def test_public_dict_hides_encrypted_state(self, sample_datetime: datetime):
        session = ExtractionSession(id=1, label="a", encrypted_state="secret", expires_at=sample_datetime)

        result = session.to_public_dict()

        assert "encrypted_state" not in result
        assert "secret" not in result.values()
        assert result["label"] == "a"
