"""
Test suite for the analysis start and status endpoints.

System role: Verification of the client-facing job API
"""

from unittest.mock import AsyncMock

import pytest

from thesis_review.api.deps import get_analysis_service
from thesis_review.application.services.analysis_service import StartedAnalysis
from thesis_review.core.exceptions import (
    DocumentNotFoundError,
    InsufficientCreditsError,
    QueueUnavailableError,
)

START_BODY = {
    "owner_id": "owner-1",
    "file_ref": "uploads/owner-1/thesis.txt",
    "file_name": "thesis.txt",
    "char_count": 110_000,
}


@pytest.fixture
def mock_analysis_service(app):
    service = AsyncMock()
    app.dependency_overrides[get_analysis_service] = lambda: service
    return service


class TestStartAnalysis:
    """Test suite for POST /api/analyses/start."""

    def test_start_should_return_202(self, client, mock_analysis_service) -> None:
        # Arrange
        mock_analysis_service.start_analysis.return_value = StartedAnalysis(
            job_id="job-1",
            tier="standard",
            credits_used=25,
            new_balance=75,
            estimated_pages=40,
            total_steps=4,
            message_id="msg_1",
        )

        # Act
        response = client.post("/api/analyses/start", json=START_BODY)

        # Assert
        assert response.status_code == 202
        assert response.json() == {
            "success": True,
            "job_id": "job-1",
            "tier": "standard",
            "credits_used": 25,
            "new_balance": 75,
            "estimated_pages": 40,
            "total_steps": 4,
        }
        mock_analysis_service.start_analysis.assert_awaited_once_with(
            owner_id="owner-1",
            file_ref="uploads/owner-1/thesis.txt",
            file_name="thesis.txt",
            char_count=110_000,
        )

    def test_insufficient_credits_should_return_402(self, client, mock_analysis_service) -> None:
        mock_analysis_service.start_analysis.side_effect = InsufficientCreditsError("owner-1", 25, 5)

        response = client.post("/api/analyses/start", json=START_BODY)

        assert response.status_code == 402
        assert response.json()["detail"] == {
            "error": "Insufficient credits",
            "required": 25,
            "balance": 5,
        }

    def test_queue_down_should_return_503(self, client, mock_analysis_service) -> None:
        mock_analysis_service.start_analysis.side_effect = QueueUnavailableError("broker down")

        response = client.post("/api/analyses/start", json=START_BODY)

        assert response.status_code == 503

    def test_negative_char_count_should_return_422(self, client, mock_analysis_service) -> None:
        response = client.post("/api/analyses/start", json={**START_BODY, "char_count": -1})

        assert response.status_code == 422
        mock_analysis_service.start_analysis.assert_not_called()


class TestJobStatus:
    """Test suite for GET /api/jobs/status."""

    def test_status_should_return_merged_record(self, client, mock_analysis_service) -> None:
        # Arrange
        mock_analysis_service.get_job_status.return_value = {
            "job_id": "job-1",
            "status": "processing",
            "processing": {"step": 3, "totalSteps": 4, "progress": 58, "status": "running"},
            "is_completed": False,
            "is_failed": False,
            "overall_score": None,
            "analyzed_at": None,
        }

        # Act
        response = client.get("/api/jobs/status", params={"job_id": "job-1"})

        # Assert
        assert response.status_code == 200
        assert response.json()["processing"]["progress"] == 58
        mock_analysis_service.get_job_status.assert_awaited_once_with("job-1")

    def test_unknown_job_should_return_404(self, client, mock_analysis_service) -> None:
        mock_analysis_service.get_job_status.side_effect = DocumentNotFoundError("job-x")

        response = client.get("/api/jobs/status", params={"job_id": "job-x"})

        assert response.status_code == 404
        assert "not found" in response.json()["detail"]["error"].lower()

    def test_missing_job_id_should_return_422(self, client, mock_analysis_service) -> None:
        response = client.get("/api/jobs/status")

        assert response.status_code == 422
