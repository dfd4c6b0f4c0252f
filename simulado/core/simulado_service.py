"""
Simulado generation.

Turns a SimuladoConfig into a question set backed by a remote exam. When
the exam service cannot deliver (unreachable, error status, or fewer usable
questions than requested) a full placeholder set of the requested size is
built instead, so the taker can always proceed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from loguru import logger

from simulado.core.errors import SimuladoApiError
from simulado.core.mock_data import generate_placeholder_questions, new_offline_exam_id
from simulado.core.models import Question, SimuladoConfig
from simulado.integrations.exam_client import ExamClient


@dataclass
class GeneratedSimulado:
    exam_id: str
    questions: list[Question]
    offline: bool = False


def convert_exam_questions(raw_questions: list[dict[str, Any]]) -> list[Question]:
    """Convert exam payload questions, skipping (and logging) malformed ones."""
    questions: list[Question] = []
    for raw in raw_questions:
        if not isinstance(raw, dict):
            logger.warning(f"Skipping malformed question payload {raw!r}")
            continue
        try:
            questions.append(Question.from_exam_payload(raw, len(questions)))
        except (ValueError, TypeError, KeyError) as e:
            logger.warning(f"Skipping malformed question {raw.get('id', '?')}: {e}")
    return questions


class SimuladoService:
    """Creates exams on the exam service and loads their questions."""

    def __init__(self, exam_client: ExamClient, use_mock_data: bool = False):
        self.exam_client = exam_client
        self.use_mock_data = use_mock_data

    def _offline(self, count: int) -> GeneratedSimulado:
        exam_id = new_offline_exam_id()
        logger.warning(f"Using {count} offline placeholder questions (exam {exam_id})")
        return GeneratedSimulado(
            exam_id=exam_id, questions=generate_placeholder_questions(count), offline=True
        )

    async def _create_and_load(
        self, count: int, topics: list[str] | None = None, replicate_from: str | None = None
    ) -> GeneratedSimulado:
        created = await self.exam_client.create_exam(
            question_count=count, topics=topics, replicate_from=replicate_from
        )
        exam = await self.exam_client.get_exam(created.exam_id)
        questions = convert_exam_questions(exam.questions)
        logger.info(f"Loaded {len(questions)} questions for exam {created.exam_id}")
        return GeneratedSimulado(exam_id=created.exam_id, questions=questions)

    async def generate(self, config: SimuladoConfig) -> GeneratedSimulado:
        """
        Generate a simulado for the config.

        Always returns exactly `config.total_questions` questions: the remote
        set when it is complete, otherwise a placeholder set.
        """
        count = config.total_questions
        if self.use_mock_data:
            return self._offline(count)

        try:
            result = await self._create_and_load(count, topics=config.topic_ids or None)
        except SimuladoApiError as e:
            logger.error(f"Exam service failed, falling back to offline questions: {e}")
            return self._offline(count)

        if len(result.questions) != count:
            logger.warning(
                f"Exam {result.exam_id} returned {len(result.questions)} usable questions, "
                f"expected {count}"
            )
            return self._offline(count)
        return result

    async def replicate_exam(self, existing_exam_id: str, question_count: int = 25) -> GeneratedSimulado:
        """
        Create a new exam reusing the question set of an existing one.

        Unlike `generate` there is no offline fallback: failures propagate.
        """
        logger.info(f"Replicating exam {existing_exam_id}")
        return await self._create_and_load(question_count, replicate_from=existing_exam_id)
