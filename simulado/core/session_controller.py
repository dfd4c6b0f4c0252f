"""
Simulado session lifecycle.

The controller owns every screen transition:

    builder --generate--> simulado --finish--> results
       ^                     ^                    |
       |                     +--restart/replicate-+
       +--new (full reset)--------------------------+
    builder <--> history --resume--> simulado | viewHistoryExam
    builder | history | profile --continue--> simulado (unfinished exam)

State lives in the injected AppStateStore; the controller only decides what
to write and when. Remote results that arrive after the session moved on to
another exam are dropped instead of committed.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable

from loguru import logger

from simulado.core.answer_pipeline import AnswerSubmissionPipeline, CountdownTimer
from simulado.core.app_state import AppState, AppStateStore
from simulado.core.errors import (
    ExamLoadError,
    SimuladoApiError,
    SimuladoValidationError,
)
from simulado.core.models import (
    ExamDetails,
    ExamPage,
    ExamStatus,
    ExamTotalizers,
    Question,
    SimuladoConfig,
    index_for_letter,
)
from simulado.core.simulado_service import (
    GeneratedSimulado,
    SimuladoService,
    convert_exam_questions,
)
from simulado.integrations.exam_client import ExamClient

RESUMED_DESCRIPTION = "Continuando exame anterior"
RESUMED_TIME_LIMIT = 60
REPLICATED_DESCRIPTION = "Replicando exame anterior"
DEFAULT_REPLICA_SIZE = 25


def answers_from_letters(pairs: list[tuple[str, str | None]]) -> dict[str, int]:
    """Build an answer map from (question id, letter) pairs, skipping blanks."""
    answers: dict[str, int] = {}
    for question_id, letter in pairs:
        if not letter:
            continue
        try:
            answers[question_id] = index_for_letter(letter)
        except ValueError:
            logger.warning(f"Ignoring invalid answer {letter!r} for question {question_id}")
    return answers


class SessionController:
    """Drives the simulado flow over an AppStateStore."""

    def __init__(
        self,
        app_state: AppStateStore,
        service: SimuladoService,
        exam_client: ExamClient,
        timer_interval: float = 1.0,
    ):
        self.app_state = app_state
        self.service = service
        self.exam_client = exam_client
        self.timer_interval = timer_interval
        self.timer: CountdownTimer | None = None
        self._pipeline: AnswerSubmissionPipeline | None = None

    @property
    def state(self) -> AppState:
        return self.app_state.current_state

    def _go(self, state: AppState) -> None:
        previous = self.app_state.current_state
        self.app_state.current_state = state
        logger.info(f"State {previous.value} -> {state.value}")

    # =========================================================================
    # Builder
    # =========================================================================

    async def generate(self, config: SimuladoConfig | None = None, **values: Any) -> GeneratedSimulado:
        """
        Generate a simulado and enter it.

        Raises:
            SimuladoValidationError: For an out-of-range config or when a
                generation is already running. Nothing is sent in that case.
        """
        config = config or SimuladoConfig.build(**values)
        if self.app_state.is_generating:
            raise SimuladoValidationError("A simulado is already being generated")

        self.app_state.is_generating = True
        try:
            result = await self.service.generate(config)
        finally:
            self.app_state.is_generating = False

        self._enter_exam(result.exam_id, result.questions)
        self.app_state.config = config
        self._go(AppState.SIMULADO)
        return result

    def _enter_exam(
        self,
        exam_id: str,
        questions: list[Question],
        answers: dict[str, int] | None = None,
        finalized: bool = False,
    ) -> None:
        self.stop_timer()
        self._pipeline = None
        self.app_state.current_simulado = questions
        self.app_state.exam_id = exam_id
        self.app_state.finalized_exam_id = exam_id if finalized else ""
        self.app_state.exam_details = None
        self.app_state.answers = answers or {}

    def new_simulado(self) -> None:
        """Discard everything and go back to an empty builder."""
        self.stop_timer()
        self._pipeline = None
        self.app_state.reset()

    def back_to_builder(self) -> None:
        """Leave the current screen for the builder, keeping all state."""
        self.stop_timer()
        self._go(AppState.BUILDER)

    def continue_simulado(self) -> None:
        """Return to the unfinished simulado after visiting another screen."""
        if not self.app_state.exam_id or not self.app_state.current_simulado:
            raise SimuladoValidationError("No simulado in progress")
        if self.app_state.exam_details is not None:
            raise SimuladoValidationError("This simulado is already finished. Use restart or new.")
        self._go(AppState.SIMULADO)

    # =========================================================================
    # Taking the simulado
    # =========================================================================

    @property
    def pipeline(self) -> AnswerSubmissionPipeline:
        exam_id = self.app_state.exam_id
        if not exam_id:
            raise SimuladoValidationError("No simulado in progress")
        if self._pipeline is None or self._pipeline.exam_id != exam_id:
            self._pipeline = AnswerSubmissionPipeline(self.app_state, self.exam_client, exam_id)
        return self._pipeline

    def select_answer(self, question_id: str, index: int) -> asyncio.Task | None:
        """Record an answer for a question of the current simulado."""
        if self.state != AppState.SIMULADO:
            raise SimuladoValidationError("Answers can only be given while taking a simulado")
        question = next((q for q in self.app_state.current_simulado if q.id == question_id), None)
        if question is None:
            raise SimuladoValidationError(f"Question {question_id} is not part of this simulado")
        if not 0 <= index < len(question.alternatives):
            raise SimuladoValidationError(
                f"Question {question_id} has {len(question.alternatives)} alternatives"
            )
        return self.pipeline.select(question_id, index)

    async def finish(self) -> ExamDetails | None:
        """
        Finalize the current simulado and show its results.

        Manual finish and timer expiry both land here; the pipeline makes
        sure only one finalize reaches the service.

        Returns:
            The graded details, or None when a finalize is already running.

        Raises:
            SimuladoValidationError: Outside the simulado screen with no
                grading for the current exam.
            FinalizeError: The session stays in the simulado screen.
        """
        exam_id = self.app_state.exam_id
        if not exam_id:
            raise SimuladoValidationError("No simulado in progress")

        existing = self.app_state.exam_details
        if existing and existing.id == exam_id:
            # Results and the read-only history view already hold the grading
            return existing
        if self.state != AppState.SIMULADO:
            raise SimuladoValidationError("Only a simulado being taken can be finished")

        details = await self.pipeline.finalize()
        if details is None:
            return None
        if self.app_state.exam_id != exam_id:
            logger.warning(f"Discarding results for exam {exam_id}: session moved on")
            return details

        self.stop_timer()
        self.app_state.exam_details = details
        self._go(AppState.RESULTS)
        return details

    def start_timer(self, on_tick: Callable[[int], None] | None = None) -> CountdownTimer:
        """Start the countdown for the current simulado; expiry finishes it."""
        config = self.app_state.config
        seconds = (config or SimuladoConfig()).time_limit_seconds
        self.stop_timer()
        self.timer = CountdownTimer(
            seconds, self.finish, interval=self.timer_interval, on_tick=on_tick
        )
        self.timer.start()
        return self.timer

    def stop_timer(self) -> None:
        if self.timer:
            # An expired timer is the caller here; its task ends on its own
            if not self.timer.expired:
                self.timer.stop()
            self.timer = None

    async def close_timer(self) -> None:
        """Stop the countdown, letting an automatic finish it started complete."""
        timer = self.timer
        self.stop_timer()
        if timer is not None and timer.expired:
            await timer.wait()

    # =========================================================================
    # Results
    # =========================================================================

    def restart(self) -> None:
        """Take the same question set again with a clean answer sheet."""
        if not self.app_state.current_simulado:
            raise SimuladoValidationError("No simulado to restart")
        self._pipeline = None
        self.app_state.exam_details = None
        self.app_state.finalized_exam_id = ""
        self.app_state.answers = {}
        self._go(AppState.SIMULADO)

    async def replicate(self, exam_id: str | None = None) -> GeneratedSimulado:
        """
        Start a new exam with the question set of an existing one.

        Raises:
            SimuladoApiError: Replication has no offline fallback.
        """
        source_id = exam_id or self.app_state.exam_id
        if not source_id:
            raise SimuladoValidationError("No exam to replicate")
        details = self.app_state.exam_details
        count = (details.total_questions if details else 0) or DEFAULT_REPLICA_SIZE

        self.app_state.is_generating = True
        try:
            result = await self.service.replicate_exam(source_id, count)
        except SimuladoApiError as e:
            logger.error(f"Error replicating exam {source_id}: {e}")
            raise
        finally:
            self.app_state.is_generating = False

        self._enter_exam(result.exam_id, result.questions)
        if self.app_state.config is None:
            self.app_state.config = SimuladoConfig(
                description=REPLICATED_DESCRIPTION, total_questions=min(max(count, 1), 100)
            )
        self._go(AppState.SIMULADO)
        return result

    # =========================================================================
    # History
    # =========================================================================

    def view_history(self) -> None:
        self.stop_timer()
        self._go(AppState.HISTORY)

    def back_from_history(self) -> None:
        self._go(AppState.BUILDER)

    def back_from_history_exam(self) -> None:
        self._go(AppState.HISTORY)

    def open_profile(self) -> None:
        self._go(AppState.PROFILE)

    def back_from_profile(self) -> None:
        self._go(AppState.BUILDER)

    async def list_history(self, **filters: Any) -> ExamPage:
        return await self.exam_client.list_user_exams(**filters)

    async def totalizers(self) -> ExamTotalizers:
        return await self.exam_client.get_user_totalizers()

    async def delete_exam(self, exam_id: str) -> None:
        await self.exam_client.delete_exam(exam_id)

    async def resume(self, exam_id: str) -> AppState:
        """
        Open an exam from history.

        Finished exams open read-only with their graded details; unfinished
        ones continue in the simulado screen with the answers the server
        already has.

        Raises:
            ExamLoadError: The exam could not be loaded; state is untouched.
        """
        try:
            exam = await self.exam_client.get_exam(exam_id)
            if exam.is_finished:
                details = await self.exam_client.get_exam_details(exam_id)
            else:
                details = None
        except SimuladoApiError as e:
            logger.error(f"Error loading exam {exam_id} from history: {e}")
            raise ExamLoadError(f"Could not load exam {exam_id}. Please try again.") from e

        if details is not None:
            return self._open_finished(exam_id, exam.questions, details)
        return self._open_unfinished(exam_id, exam.questions, exam.status)

    def _open_finished(
        self, exam_id: str, raw_questions: list[dict[str, Any]], details: ExamDetails
    ) -> AppState:
        by_id = {str(q.get("id")): q for q in raw_questions if isinstance(q, dict)}
        paired: list[dict[str, Any]] = []
        for result in details.questions:
            raw = by_id.get(result.question_id)
            if raw is None:
                logger.warning(f"Exam {exam_id} has no payload for question {result.question_id}")
                continue
            paired.append(raw)

        questions = convert_exam_questions(paired)
        answers = answers_from_letters([(r.question_id, r.user_answer) for r in details.questions])
        self._enter_exam(exam_id, questions, answers, finalized=True)
        self.app_state.exam_details = details
        self._go(AppState.VIEW_HISTORY_EXAM)
        return AppState.VIEW_HISTORY_EXAM

    def _open_unfinished(
        self, exam_id: str, raw_questions: list[dict[str, Any]], status: ExamStatus
    ) -> AppState:
        questions = convert_exam_questions(raw_questions)
        if not questions:
            raise ExamLoadError(f"Exam {exam_id} has no usable questions")
        try:
            config = SimuladoConfig.build(
                description=RESUMED_DESCRIPTION,
                total_questions=len(questions),
                time_limit=RESUMED_TIME_LIMIT,
                topic_ids=[],
            )
        except SimuladoValidationError as e:
            raise ExamLoadError(f"Exam {exam_id} cannot be resumed: {e}") from e

        answers = answers_from_letters([(q.id, q.user_answer) for q in questions])
        self._enter_exam(exam_id, questions, answers)
        self.app_state.config = config
        logger.info(f"Resuming {status.value} exam {exam_id} with {len(answers)} answers")
        self._go(AppState.SIMULADO)
        return AppState.SIMULADO
