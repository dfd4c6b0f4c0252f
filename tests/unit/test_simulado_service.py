"""
Unit tests for SimuladoService: generation, fallback and replication.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from simulado.core.errors import SimuladoApiError
from simulado.core.mock_data import is_offline_exam
from simulado.core.models import ExamForUser, SimuladoConfig
from simulado.core.simulado_service import SimuladoService, convert_exam_questions
from simulado.integrations.exam_client import ExamResponse


def exam_with(count: int) -> ExamForUser:
    return ExamForUser.from_dict(
        {
            "id": "exam-001",
            "status": "not_started",
            "total_questions": count,
            "answered_questions": 0,
            "questions": [
                {"id": f"q{i}", "alternatives": [{"letter": "A", "text": "a"}]}
                for i in range(count)
            ],
        }
    )


@pytest.fixture
def exam_client():
    client = MagicMock()
    client.create_exam = AsyncMock(return_value=ExamResponse(exam_id="exam-001"))
    client.get_exam = AsyncMock(side_effect=lambda exam_id: exam_with(client.requested))
    client.requested = 0

    async def create_exam(question_count=25, topics=None, years=None, replicate_from=None):
        client.requested = question_count
        return ExamResponse(exam_id="exam-001")

    client.create_exam.side_effect = create_exam
    return client


class TestGenerate:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("count", [1, 25, 100])
    async def test_returns_requested_count(self, exam_client, count):
        service = SimuladoService(exam_client)

        result = await service.generate(SimuladoConfig(total_questions=count))

        assert len(result.questions) == count
        assert result.exam_id == "exam-001"
        assert result.offline is False

    @pytest.mark.asyncio
    async def test_topics_passed_only_when_selected(self, exam_client):
        service = SimuladoService(exam_client)

        await service.generate(SimuladoConfig(total_questions=5))
        await service.generate(SimuladoConfig(total_questions=5, topic_ids=["t1", "t2"]))

        first, second = exam_client.create_exam.await_args_list
        assert first.kwargs["topics"] is None
        assert second.kwargs["topics"] == ["t1", "t2"]

    @pytest.mark.asyncio
    async def test_api_failure_falls_back_to_full_placeholder_set(self, exam_client):
        exam_client.create_exam.side_effect = SimuladoApiError("Failed to create exam")
        service = SimuladoService(exam_client)

        result = await service.generate(SimuladoConfig(total_questions=12))

        assert result.offline is True
        assert is_offline_exam(result.exam_id)
        assert len(result.questions) == 12

    @pytest.mark.asyncio
    async def test_short_exam_falls_back(self, exam_client):
        exam_client.get_exam.side_effect = lambda exam_id: exam_with(3)
        service = SimuladoService(exam_client)

        result = await service.generate(SimuladoConfig(total_questions=10))

        assert result.offline is True
        assert len(result.questions) == 10

    @pytest.mark.asyncio
    async def test_mock_mode_skips_network(self, exam_client):
        service = SimuladoService(exam_client, use_mock_data=True)

        result = await service.generate(SimuladoConfig(total_questions=7))

        assert result.offline is True
        assert len(result.questions) == 7
        exam_client.create_exam.assert_not_awaited()


class TestReplicate:

    @pytest.mark.asyncio
    async def test_replicate_sends_source_exam(self, exam_client):
        service = SimuladoService(exam_client)

        result = await service.replicate_exam("exam-000", 4)

        assert len(result.questions) == 4
        kwargs = exam_client.create_exam.await_args.kwargs
        assert kwargs["replicate_from"] == "exam-000"
        assert kwargs["question_count"] == 4

    @pytest.mark.asyncio
    async def test_replicate_failure_propagates(self, exam_client):
        exam_client.create_exam.side_effect = SimuladoApiError("Failed to create exam")
        service = SimuladoService(exam_client)

        with pytest.raises(SimuladoApiError):
            await service.replicate_exam("exam-000")


class TestConvertExamQuestions:

    def test_malformed_questions_are_skipped(self, sample_exam):
        raw = sample_exam["questions"] + [{"id": "broken"}, {"alternatives": []}]

        questions = convert_exam_questions(raw)

        assert [q.id for q in questions] == ["q1", "q2", "q3"]
