"""
Exam service client.

Covers the whole remote exam lifecycle: create (optionally replicating an
existing exam), fetch ungraded questions, patch single answers, finalize,
fetch graded details, list/delete past exams and aggregate totals. Every
call is scoped by the user id passed as a query parameter.

Usage:
    async with ExamClient(settings.exams_url, user_id=settings.user_id) as client:
        created = await client.create_exam(question_count=25)
        exam = await client.get_exam(created.exam_id)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx
from loguru import logger

from simulado.config import DEFAULT_USER_ID
from simulado.core.models import (
    ExamDetails,
    ExamForUser,
    ExamPage,
    ExamStatus,
    ExamTotalizers,
)
from simulado.integrations.base import BaseApiClient


@dataclass
class ExamResponse:
    """Acknowledgement returned by create, answer and finalize."""

    exam_id: str
    status: str = ""
    message: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExamResponse:
        return cls(
            exam_id=data.get("exam_id", ""),
            status=data.get("status", ""),
            message=data.get("message", ""),
        )


def build_create_payload(
    user_id: str,
    question_count: int,
    topics: list[str] | None = None,
    years: list[int] | None = None,
    replicate_from: str | None = None,
) -> dict[str, Any]:
    """
    Build the body for POST /create.

    Optional filters are left out entirely when empty, so an unfiltered
    simulado never sends a `topics` key.
    """
    payload: dict[str, Any] = {"user_id": user_id, "question_count": question_count}
    if topics:
        payload["topics"] = list(topics)
    if years:
        payload["years"] = list(years)
    if replicate_from:
        payload["examReplicId"] = replicate_from
    return payload


class ExamClient(BaseApiClient):
    """HTTP client for the exam service."""

    def __init__(self, base_url: str, user_id: str = DEFAULT_USER_ID, **kwargs: Any):
        super().__init__(base_url, **kwargs)
        self.user_id = user_id

    @property
    def _user_params(self) -> dict[str, str]:
        return {"user_id": self.user_id}

    # =========================================================================
    # Exam lifecycle
    # =========================================================================

    async def create_exam(
        self,
        question_count: int = 25,
        topics: list[str] | None = None,
        years: list[int] | None = None,
        replicate_from: str | None = None,
    ) -> ExamResponse:
        """
        Create a new exam.

        Args:
            question_count: Number of questions (service maximum is 100)
            topics: Topic ids to draw questions from
            years: Exam years to draw questions from
            replicate_from: Reuse the question set of this existing exam
        """
        payload = build_create_payload(
            self.user_id, question_count, topics=topics, years=years, replicate_from=replicate_from
        )
        response = await self._request("POST", "/create", "create exam", json=payload)
        result = self._parse(response, "create exam", ExamResponse.from_dict)
        logger.info(f"Created exam {result.exam_id} with {question_count} questions")
        return result

    async def get_exam(self, exam_id: str) -> ExamForUser:
        """Fetch an exam for answering (no answer key)."""
        response = await self._request(
            "GET", f"/{exam_id}", "fetch exam", retry=True, params=self._user_params
        )
        return self._parse(response, "fetch exam", ExamForUser.from_dict)

    async def get_exam_details(self, exam_id: str) -> ExamDetails:
        """Fetch the graded exam (only meaningful after finalize)."""
        response = await self._request(
            "GET", f"/{exam_id}/details", "fetch exam details", retry=True, params=self._user_params
        )
        return self._parse(response, "fetch exam details", ExamDetails.from_dict)

    async def update_answer(self, exam_id: str, question_id: str, user_answer: str) -> ExamResponse:
        """Record the answer letter (A-E) for one question. Idempotent per question."""
        response = await self._request(
            "PATCH",
            f"/{exam_id}/answer",
            "update exam answer",
            params=self._user_params,
            json={"question_id": question_id, "user_answer": user_answer},
        )
        logger.debug(f"Saved answer {user_answer} for question {question_id} of exam {exam_id}")
        return self._acknowledgement(response, exam_id)

    async def finalize_exam(self, exam_id: str) -> ExamResponse:
        """Close the exam for grading. Never retried: one call, one finalize."""
        response = await self._request(
            "POST", f"/{exam_id}/finalize", "finalize exam", params=self._user_params
        )
        logger.info(f"Finalized exam {exam_id}")
        return self._acknowledgement(response, exam_id)

    def _acknowledgement(self, response: httpx.Response, exam_id: str) -> ExamResponse:
        # The 2xx status is what counts; an unreadable body must not undo it
        try:
            return ExamResponse.from_dict(response.json())
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning(f"Unreadable acknowledgement for exam {exam_id}: {e}")
            return ExamResponse(exam_id=exam_id)

    # =========================================================================
    # History
    # =========================================================================

    async def list_user_exams(
        self,
        skip: int | None = None,
        limit: int | None = None,
        status: ExamStatus | str | None = None,
        created_after: str | None = None,
        created_before: str | None = None,
    ) -> ExamPage:
        """List the user's exams, newest first, with optional filters."""
        params: dict[str, Any] = {}
        if skip is not None:
            params["skip"] = skip
        if limit is not None:
            params["limit"] = limit
        if status:
            params["status"] = ExamStatus(status).value
        if created_after:
            params["created_after"] = created_after
        if created_before:
            params["created_before"] = created_before

        response = await self._request(
            "GET", f"/user/{self.user_id}", "fetch user exams", retry=True, params=params
        )
        return self._parse(response, "fetch user exams", ExamPage.from_dict)

    async def get_user_totalizers(self) -> ExamTotalizers:
        """Aggregate statistics across every exam of the user."""
        response = await self._request(
            "GET", f"/totalizers/user/{self.user_id}", "fetch user totalizers", retry=True
        )
        return self._parse(response, "fetch user totalizers", ExamTotalizers.from_dict)

    async def delete_exam(self, exam_id: str) -> dict[str, Any]:
        response = await self._request(
            "DELETE", f"/{exam_id}", "delete exam", params=self._user_params
        )
        logger.info(f"Deleted exam {exam_id}")
        return self._parse(response, "delete exam")
