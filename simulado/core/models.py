"""
Domain models for simulados and exams.

Wire payloads from the exam service are parsed with `from_dict` and written
back to the persisted store with `to_dict`, so every model round-trips
through plain JSON.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

from loguru import logger
from pydantic import BaseModel, Field, ValidationError

from simulado.core.errors import SimuladoValidationError

LETTERS = "ABCDE"


def letter_for_index(index: int) -> str:
    """Map an alternative index (0-based) to its letter: 0 -> "A"."""
    if index < 0:
        raise ValueError(f"Alternative index must be >= 0, got {index}")
    return chr(ord("A") + index)


def index_for_letter(letter: str) -> int:
    """Map an alternative letter to its index: "A" -> 0."""
    letter = letter.strip().upper()
    if len(letter) != 1 or not letter.isalpha():
        raise ValueError(f"Invalid alternative letter: {letter!r}")
    return ord(letter) - ord("A")


class ExamStatus(str, Enum):
    """Lifecycle status of a remote exam."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"


# =============================================================================
# Simulado configuration
# =============================================================================


class SimuladoConfig(BaseModel):
    """What the builder asks the exam service for."""

    description: str = ""
    total_questions: int = Field(default=25, ge=1, le=100)
    time_limit: int = Field(default=60, ge=15, le=300, description="Minutes")
    topic_ids: list[str] = Field(default_factory=list)

    @classmethod
    def build(cls, **values: Any) -> SimuladoConfig:
        """Validate builder input, raising SimuladoValidationError on bad ranges."""
        try:
            return cls(**values)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise SimuladoValidationError(f"Invalid simulado configuration: {problems}") from e

    @property
    def time_limit_seconds(self) -> int:
        return self.time_limit * 60


# =============================================================================
# Questions
# =============================================================================


@dataclass
class Alternative:
    """One answer option. Images arrive as base64 payloads."""

    letter: str
    text: str | None = None
    base64_file: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Alternative:
        return cls(
            letter=data.get("letter", ""),
            text=data.get("text"),
            base64_file=data.get("base64File") or data.get("base64_file") or data.get("file"),
        )


@dataclass
class Question:
    """Client view of a question. The correct answer is withheld by the server."""

    id: str
    discipline: str
    year: int | None
    context: str
    alternatives_introduction: str
    alternatives: list[Alternative]
    title: str = ""
    # Echoed by the server for exams already in progress
    user_answer: str | None = None
    # Only set for offline placeholder questions
    correct_letter: str | None = None

    @classmethod
    def from_exam_payload(cls, data: dict[str, Any], index: int) -> Question:
        """
        Convert a question from an exam payload.

        Raises:
            ValueError: When the payload lacks an id or its alternatives.
        """
        question_id = data.get("id") or data.get("question_id") or data.get("_id")
        if not question_id:
            raise ValueError("question payload has no id")
        raw_alternatives = data.get("alternatives")
        if not isinstance(raw_alternatives, list):
            raise ValueError(f"question {question_id} has no alternatives list")

        return cls(
            id=str(question_id),
            discipline=data.get("discipline", ""),
            year=data.get("year"),
            context=data.get("context", ""),
            alternatives_introduction=data.get("alternatives_introduction")
            or data.get("alternativesIntroduction")
            or "",
            alternatives=[Alternative.from_dict(alt) for alt in raw_alternatives],
            title=data.get("title") or f"Questão {index + 1}",
            user_answer=data.get("user_answer"),
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Question:
        values = dict(data)
        values["alternatives"] = [Alternative(**alt) for alt in data.get("alternatives", [])]
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def alternative_text(self, index: int) -> str:
        alt = self.alternatives[index]
        if alt.text:
            return alt.text
        return "[imagem]" if alt.base64_file else ""


# =============================================================================
# Exams
# =============================================================================


@dataclass
class ExamForUser:
    """An exam as served while it is being answered (no answer key)."""

    id: str
    status: ExamStatus
    total_questions: int
    answered_questions: int
    questions: list[dict[str, Any]]
    created_at: str = ""
    finished_at: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExamForUser:
        return cls(
            id=data.get("id", ""),
            status=ExamStatus(data.get("status", ExamStatus.NOT_STARTED.value)),
            total_questions=data.get("total_questions", 0),
            answered_questions=data.get("answered_questions", 0),
            questions=list(data.get("questions") or []),
            created_at=data.get("created_at", ""),
            finished_at=data.get("finished_at"),
        )

    @property
    def is_finished(self) -> bool:
        return self.status == ExamStatus.FINISHED


@dataclass
class ExamQuestionResult:
    """Per-question grading after finalization."""

    question_id: str
    correct_answer: str
    user_answer: str | None = None
    is_correct: bool | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExamQuestionResult:
        return cls(
            question_id=data.get("question_id", ""),
            correct_answer=data.get("correct_answer", ""),
            user_answer=data.get("user_answer"),
            is_correct=data.get("is_correct"),
        )


@dataclass
class ExamDetails:
    """Graded view of a finalized exam."""

    id: str
    user_id: str
    total_questions: int
    questions: list[ExamQuestionResult]
    total_correct_answers: int
    total_wrong_answers: int
    status: ExamStatus
    created_at: str = ""
    updated_at: str = ""
    finished_at: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExamDetails:
        return cls(
            id=data.get("id", ""),
            user_id=data.get("user_id", ""),
            total_questions=data.get("total_questions", 0),
            questions=[ExamQuestionResult.from_dict(q) for q in data.get("questions") or []],
            total_correct_answers=data.get("total_correct_answers", 0),
            total_wrong_answers=data.get("total_wrong_answers", 0),
            status=ExamStatus(data.get("status", ExamStatus.FINISHED.value)),
            created_at=data.get("created_at", ""),
            updated_at=data.get("updated_at", ""),
            finished_at=data.get("finished_at"),
        )

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        return data

    @property
    def score_percent(self) -> int:
        if self.total_questions == 0:
            return 0
        return round(self.total_correct_answers / self.total_questions * 100)

    @property
    def unanswered(self) -> int:
        return sum(1 for q in self.questions if not q.user_answer)

    def result_for(self, question_id: str) -> ExamQuestionResult | None:
        for result in self.questions:
            if result.question_id == question_id:
                return result
        return None


def score_message(score: int) -> str:
    """Feedback line shown under the final score."""
    if score >= 90:
        return "Excelente! Você está muito bem preparado!"
    if score >= 80:
        return "Muito bom! Continue assim!"
    if score >= 70:
        return "Bom desempenho! Você está no caminho certo!"
    if score >= 60:
        return "Razoável. Continue estudando para melhorar!"
    return "É importante revisar os conteúdos e praticar mais!"


# =============================================================================
# History
# =============================================================================


@dataclass
class ExamSummary:
    """One row of the exam history."""

    id: str
    user_id: str
    total_questions: int
    answered_questions: int
    total_correct_answers: int
    total_wrong_answers: int
    status: ExamStatus
    created_at: str = ""
    updated_at: str = ""
    finished_at: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExamSummary:
        return cls(
            id=data.get("id", ""),
            user_id=data.get("user_id", ""),
            total_questions=data.get("total_questions", 0),
            answered_questions=data.get("answered_questions", 0),
            total_correct_answers=data.get("total_correct_answers", 0),
            total_wrong_answers=data.get("total_wrong_answers", 0),
            status=ExamStatus(data.get("status", ExamStatus.NOT_STARTED.value)),
            created_at=data.get("created_at", ""),
            updated_at=data.get("updated_at", ""),
            finished_at=data.get("finished_at"),
        )

    @property
    def score_percent(self) -> int:
        if self.total_questions == 0:
            return 0
        return round(self.total_correct_answers / self.total_questions * 100)


@dataclass
class Pagination:
    skip: int = 0
    limit: int = 10
    total: int = 0
    returned: int = 0


@dataclass
class ExamPage:
    """A page of the user's exams plus the aggregate stats sent alongside."""

    exams: list[ExamSummary]
    pagination: Pagination
    stats: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExamPage:
        exams = []
        for raw in data.get("exams") or []:
            try:
                exams.append(ExamSummary.from_dict(raw))
            except (ValueError, TypeError, AttributeError) as e:
                logger.warning(f"Skipping malformed exam in history: {e}")
        return cls(
            exams=exams,
            pagination=Pagination(**(data.get("pagination") or {})),
            stats=data.get("stats") or {},
        )


@dataclass
class ExamTotalizers:
    """Aggregate per-user totals."""

    total_exams: int = 0
    finished_exams: int = 0
    in_progress_exams: int = 0
    not_started_exams: int = 0
    total_questions_answered: int = 0
    total_correct_answers: int = 0
    total_wrong_answers: int = 0
    average_score: float = 0.0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExamTotalizers:
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**known)
