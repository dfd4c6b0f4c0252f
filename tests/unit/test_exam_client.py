"""
Unit tests for the exam service client.
"""

import json

import httpx
import pytest
import pytest_asyncio
from httpx import Request, Response

from simulado.core.errors import SimuladoApiError
from simulado.core.models import ExamStatus
from simulado.integrations.exam_client import ExamClient, build_create_payload

BASE_URL = "http://exams.test/api/v1/exams"
USER_ID = "507f1f77bcf86cd799439011"


class Recorder:
    """MockTransport handler that records requests and replays responses."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests: list[Request] = []

    def __call__(self, request: Request) -> Response:
        self.requests.append(request)
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response


def make_client(handler) -> ExamClient:
    return ExamClient(
        BASE_URL,
        user_id=USER_ID,
        retry_backoff=0,
        transport=httpx.MockTransport(handler),
    )


class TestBuildCreatePayload:

    def test_no_topics_key_without_topics(self):
        payload = build_create_payload(USER_ID, 25)

        assert payload == {"user_id": USER_ID, "question_count": 25}
        assert "topics" not in payload

    def test_empty_topics_are_omitted(self):
        assert "topics" not in build_create_payload(USER_ID, 25, topics=[])

    def test_topics_are_sent_in_order(self):
        payload = build_create_payload(USER_ID, 25, topics=["t1", "t2"])

        assert payload["topics"] == ["t1", "t2"]

    def test_replication(self):
        payload = build_create_payload(USER_ID, 10, replicate_from="exam-001")

        assert payload["examReplicId"] == "exam-001"


class TestExamLifecycle:

    @pytest.mark.asyncio
    async def test_create_exam(self):
        recorder = Recorder(Response(200, json={"exam_id": "exam-001", "status": "created"}))

        async with make_client(recorder) as client:
            result = await client.create_exam(question_count=25, topics=["t1", "t2"])

        assert result.exam_id == "exam-001"
        sent = recorder.requests[0]
        assert sent.method == "POST"
        assert sent.url.path == "/api/v1/exams/create"
        assert json.loads(sent.content) == {
            "user_id": USER_ID,
            "question_count": 25,
            "topics": ["t1", "t2"],
        }

    @pytest.mark.asyncio
    async def test_get_exam(self, sample_exam):
        recorder = Recorder(Response(200, json=sample_exam))

        async with make_client(recorder) as client:
            exam = await client.get_exam("exam-001")

        assert exam.id == "exam-001"
        assert exam.status == ExamStatus.IN_PROGRESS
        assert recorder.requests[0].url.params["user_id"] == USER_ID

    @pytest.mark.asyncio
    async def test_update_answer(self):
        recorder = Recorder(Response(200, json={"exam_id": "exam-001", "status": "ok"}))

        async with make_client(recorder) as client:
            await client.update_answer("exam-001", "q2", "B")

        sent = recorder.requests[0]
        assert sent.method == "PATCH"
        assert sent.url.path.endswith("/exam-001/answer")
        assert json.loads(sent.content) == {"question_id": "q2", "user_answer": "B"}

    @pytest.mark.asyncio
    async def test_finalize_and_details(self, sample_exam_details):
        recorder = Recorder(
            Response(200, json={"exam_id": "exam-001", "status": "finished"}),
            Response(200, json=sample_exam_details),
        )

        async with make_client(recorder) as client:
            await client.finalize_exam("exam-001")
            details = await client.get_exam_details("exam-001")

        assert [r.url.path for r in recorder.requests] == [
            "/api/v1/exams/exam-001/finalize",
            "/api/v1/exams/exam-001/details",
        ]
        assert details.total_correct_answers == 1

    @pytest.mark.asyncio
    async def test_bearer_token_attached(self):
        recorder = Recorder(Response(200, json={"exam_id": "e"}))
        client = ExamClient(
            BASE_URL,
            token_provider=lambda: "tok-123",
            transport=httpx.MockTransport(recorder),
        )

        await client.create_exam()
        await client.close()

        assert recorder.requests[0].headers["Authorization"] == "Bearer tok-123"


class TestHistory:

    @pytest.mark.asyncio
    async def test_list_user_exams_filters(self):
        recorder = Recorder(Response(200, json={"exams": [], "pagination": {"total": 0}}))

        async with make_client(recorder) as client:
            page = await client.list_user_exams(skip=10, limit=5, status="finished")

        sent = recorder.requests[0]
        assert sent.url.path == f"/api/v1/exams/user/{USER_ID}"
        assert sent.url.params["skip"] == "10"
        assert sent.url.params["limit"] == "5"
        assert sent.url.params["status"] == "finished"
        assert page.exams == []

    @pytest.mark.asyncio
    async def test_totalizers(self):
        recorder = Recorder(Response(200, json={"total_exams": 3, "finished_exams": 2}))

        async with make_client(recorder) as client:
            totals = await client.get_user_totalizers()

        assert recorder.requests[0].url.path == f"/api/v1/exams/totalizers/user/{USER_ID}"
        assert totals.finished_exams == 2

    @pytest.mark.asyncio
    async def test_delete_exam(self):
        recorder = Recorder(Response(200, json={"deleted": True}))

        async with make_client(recorder) as client:
            await client.delete_exam("exam-001")

        assert recorder.requests[0].method == "DELETE"


class TestMalformedResponses:

    @pytest.mark.asyncio
    async def test_unknown_status_raises_api_error(self, sample_exam):
        recorder = Recorder(Response(200, json=dict(sample_exam, status="expired")))

        async with make_client(recorder) as client:
            with pytest.raises(SimuladoApiError) as exc_info:
                await client.get_exam("exam-001")

        assert "malformed response" in str(exc_info.value)
        assert "expired" in exc_info.value.detail

    @pytest.mark.asyncio
    async def test_non_json_body_raises_api_error(self):
        recorder = Recorder(Response(200, text="<html>Bad Gateway</html>"))

        async with make_client(recorder) as client:
            with pytest.raises(SimuladoApiError) as exc_info:
                await client.get_exam_details("exam-001")

        assert exc_info.value.status_code == 200

    @pytest.mark.asyncio
    async def test_unreadable_finalize_acknowledgement_is_accepted(self):
        recorder = Recorder(Response(200, text=""))

        async with make_client(recorder) as client:
            result = await client.finalize_exam("exam-001")

        assert result.exam_id == "exam-001"

    @pytest.mark.asyncio
    async def test_malformed_history_rows_are_skipped(self):
        recorder = Recorder(
            Response(
                200,
                json={
                    "exams": [
                        {"id": "exam-001", "status": "finished"},
                        {"id": "exam-002", "status": "archived"},
                    ],
                    "pagination": {"total": 2},
                },
            )
        )

        async with make_client(recorder) as client:
            page = await client.list_user_exams()

        assert [e.id for e in page.exams] == ["exam-001"]


class TestRetries:

    @pytest.mark.asyncio
    async def test_read_retries_on_server_error(self, sample_exam):
        recorder = Recorder(
            Response(503, json={"detail": "busy"}),
            Response(200, json=sample_exam),
        )

        async with make_client(recorder) as client:
            exam = await client.get_exam("exam-001")

        assert len(recorder.requests) == 2
        assert exam.id == "exam-001"

    @pytest.mark.asyncio
    async def test_read_retries_on_timeout(self, sample_exam):
        recorder = Recorder(
            httpx.ReadTimeout("Timeout"),
            Response(200, json=sample_exam),
        )

        async with make_client(recorder) as client:
            await client.get_exam("exam-001")

        assert len(recorder.requests) == 2

    @pytest.mark.asyncio
    async def test_client_error_not_retried(self):
        recorder = Recorder(Response(404, json={"detail": "Exam not found"}))

        async with make_client(recorder) as client:
            with pytest.raises(SimuladoApiError) as exc_info:
                await client.get_exam("missing")

        assert len(recorder.requests) == 1
        assert exc_info.value.status_code == 404
        assert exc_info.value.detail == "Exam not found"

    @pytest.mark.asyncio
    async def test_all_retries_exhausted(self):
        recorder = Recorder(httpx.ConnectError("refused"))

        async with make_client(recorder) as client:
            with pytest.raises(SimuladoApiError):
                await client.get_exam_details("exam-001")

        assert len(recorder.requests) == 3

    @pytest.mark.asyncio
    async def test_finalize_is_never_retried(self):
        recorder = Recorder(Response(500, json={"detail": "boom"}))

        async with make_client(recorder) as client:
            with pytest.raises(SimuladoApiError):
                await client.finalize_exam("exam-001")

        assert len(recorder.requests) == 1


class TestMonkeypatchedTransport:
    """The lazily created httpx client can also be patched directly."""

    @pytest_asyncio.fixture
    async def client(self):
        client = ExamClient(BASE_URL, user_id=USER_ID, retry_backoff=0)
        await client._ensure_client()
        yield client
        await client.close()

    @pytest.mark.asyncio
    async def test_patched_request(self, client, monkeypatch):
        async def mock_request(method, url, **kwargs):
            request = Request(method, f"{BASE_URL}{url}")
            return Response(200, json={"exam_id": "exam-002"}, request=request)

        monkeypatch.setattr(client._client, "request", mock_request)

        result = await client.create_exam(question_count=5)

        assert result.exam_id == "exam-002"
