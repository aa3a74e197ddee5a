"""
Unit tests for API Pydantic models.

Tests request validation and response serialization.
"""

import uuid
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from commandstack.api.models import (
    CommandRequest,
    ContextRequest,
    HealthResponse,
    TaskRequest,
    TaskResponse,
)
from commandstack.models import WorkStatus, WorkType


class TestWorkItemRequest:
    """Test command and task request validation."""

    def test_camel_case_input(self):
        """Clients send camelCase; snake_case also works."""
        context_id = uuid.uuid4()

        by_alias = TaskRequest.model_validate(
            {"syntax": "x", "contextId": str(context_id), "syncToGoogle": True}
        )
        by_name = TaskRequest(syntax="x", context_id=context_id)

        assert by_alias.context_id == context_id
        assert by_alias.sync_to_google is True
        assert by_name.sync_to_google is None

    def test_syntax_trimmed(self):
        request = CommandRequest(syntax="  git push  ", context_id=uuid.uuid4())

        assert request.syntax == "git push"
        assert request.type == WorkType.TASK

    def test_blank_syntax(self):
        with pytest.raises(ValidationError) as exc_info:
            CommandRequest(syntax="   ", context_id=uuid.uuid4())

        assert "syntax" in str(exc_info.value)

    def test_naive_deadline_read_as_local(self):
        """Asia/Seoul is UTC+9."""
        request = CommandRequest(
            syntax="x", context_id=uuid.uuid4(), deadline=datetime(2026, 5, 1, 18, 0)
        )

        assert request.deadline == datetime(2026, 5, 1, 9, 0, tzinfo=timezone.utc)

    def test_aware_deadline_converted(self):
        request = CommandRequest.model_validate(
            {"syntax": "x", "contextId": str(uuid.uuid4()), "deadline": "2026-05-01T18:00:00Z"}
        )

        assert request.deadline == datetime(2026, 5, 1, 18, 0, tzinfo=timezone.utc)

    def test_invalid_type(self):
        with pytest.raises(ValidationError):
            CommandRequest(syntax="x", context_id=uuid.uuid4(), type="CHORE")


class TestContextRequest:
    """Test ContextRequest validation."""

    @pytest.mark.parametrize("color", ["#abcdef", "#ABC123", None])
    def test_valid_colors(self, color):
        assert ContextRequest(namespace="home", color=color).color == color

    @pytest.mark.parametrize("color", ["abcdef", "#abc", "#gggggg"])
    def test_invalid_colors(self, color):
        with pytest.raises(ValidationError):
            ContextRequest(namespace="home", color=color)

    def test_blank_namespace(self):
        with pytest.raises(ValidationError):
            ContextRequest(namespace="  ")


class TestResponses:
    """Test response serialization."""

    def test_task_response_json(self):
        """Times render in local time with camelCase keys."""
        stamp = datetime(2026, 5, 1, 9, 0, tzinfo=timezone.utc)
        response = TaskResponse(
            id=uuid.uuid4(),
            syntax="Dentist",
            status=WorkStatus.PENDING,
            type=WorkType.SCHEDULE,
            context_id=uuid.uuid4(),
            deadline=stamp,
            created_at=stamp,
            updated_at=stamp,
        )

        data = response.model_dump(mode="json", by_alias=True)

        assert data["deadline"] == "2026-05-01T18:00:00+09:00"
        assert data["syncToGoogle"] is False
        assert data["googleEventId"] is None
        assert data["startedAt"] is None

    def test_health_response(self):
        response = HealthResponse(status="healthy", version="0.1.0", database_connected=True)

        assert response.model_dump(by_alias=True)["databaseConnected"] is True
