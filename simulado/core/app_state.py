"""
App-wide simulado state.

One explicit object owns everything the screens share: which screen is
active, the current question set, its config, the exam id, the graded
details and the local answer map. Everything except `is_generating` is kept
in the PersistedStore, so a new CLI invocation resumes where the last one
stopped. `reset()` is the only way to start over.
"""

from __future__ import annotations

from enum import Enum

from loguru import logger

from simulado.core.models import ExamDetails, Question, SimuladoConfig
from simulado.core.persisted_store import PersistedStore


class AppState(str, Enum):
    """Screens of the simulado flow."""

    BUILDER = "builder"
    SIMULADO = "simulado"
    RESULTS = "results"
    HISTORY = "history"
    VIEW_HISTORY_EXAM = "viewHistoryExam"
    PROFILE = "profile"


APP_STATE_KEY = "simulado-app-state"
CURRENT_SIMULADO_KEY = "simulado-current-simulado"
CONFIG_KEY = "simulado-config"
EXAM_DETAILS_KEY = "simulado-exam-details"
EXAM_ID_KEY = "simulado-exam-id"
ANSWERS_KEY = "simulado-answers"
FINALIZED_EXAM_KEY = "simulado-finalized-exam-id"

SESSION_KEYS = [
    APP_STATE_KEY,
    CURRENT_SIMULADO_KEY,
    CONFIG_KEY,
    EXAM_DETAILS_KEY,
    EXAM_ID_KEY,
    ANSWERS_KEY,
    FINALIZED_EXAM_KEY,
]


class AppStateStore:
    """Typed view over the persisted session keys."""

    def __init__(self, store: PersistedStore):
        self.store = store
        # Never persisted: a crash mid-generation must not leave it stuck on
        self.is_generating = False

    # =========================================================================
    # Screen
    # =========================================================================

    @property
    def current_state(self) -> AppState:
        raw = self.store.get(APP_STATE_KEY, AppState.BUILDER.value)
        try:
            return AppState(raw)
        except ValueError:
            logger.warning(f"Unknown persisted app state {raw!r}, using builder")
            return AppState.BUILDER

    @current_state.setter
    def current_state(self, state: AppState) -> None:
        self.store.set(APP_STATE_KEY, AppState(state).value)

    # =========================================================================
    # Simulado data
    # =========================================================================

    @property
    def current_simulado(self) -> list[Question]:
        return [Question.from_dict(q) for q in self.store.get(CURRENT_SIMULADO_KEY, [])]

    @current_simulado.setter
    def current_simulado(self, questions: list[Question]) -> None:
        self.store.set(CURRENT_SIMULADO_KEY, [q.to_dict() for q in questions] or None)

    @property
    def config(self) -> SimuladoConfig | None:
        raw = self.store.get(CONFIG_KEY)
        return SimuladoConfig.model_validate(raw) if raw else None

    @config.setter
    def config(self, config: SimuladoConfig | None) -> None:
        self.store.set(CONFIG_KEY, config.model_dump() if config else None)

    @property
    def exam_details(self) -> ExamDetails | None:
        raw = self.store.get(EXAM_DETAILS_KEY)
        return ExamDetails.from_dict(raw) if raw else None

    @exam_details.setter
    def exam_details(self, details: ExamDetails | None) -> None:
        self.store.set(EXAM_DETAILS_KEY, details.to_dict() if details else None)

    @property
    def exam_id(self) -> str:
        return self.store.get(EXAM_ID_KEY, "")

    @exam_id.setter
    def exam_id(self, exam_id: str) -> None:
        self.store.set(EXAM_ID_KEY, exam_id or None)

    @property
    def finalized_exam_id(self) -> str:
        """Exam whose finalize request the service already accepted."""
        return self.store.get(FINALIZED_EXAM_KEY, "")

    @finalized_exam_id.setter
    def finalized_exam_id(self, exam_id: str) -> None:
        self.store.set(FINALIZED_EXAM_KEY, exam_id or None)

    # =========================================================================
    # Answers
    # =========================================================================

    @property
    def answers(self) -> dict[str, int]:
        return self.store.get(ANSWERS_KEY, {})

    @answers.setter
    def answers(self, answers: dict[str, int]) -> None:
        self.store.set(ANSWERS_KEY, answers or None)

    def set_answer(self, question_id: str, index: int) -> None:
        answers = self.answers
        answers[question_id] = index
        self.answers = answers

    # =========================================================================
    # Reset
    # =========================================================================

    def reset(self) -> None:
        """Clear every session key and return to the builder."""
        self.current_simulado = []
        self.config = None
        self.exam_details = None
        self.exam_id = ""
        self.finalized_exam_id = ""
        self.answers = {}
        self.is_generating = False
        self.current_state = AppState.BUILDER
        logger.info("App state reset")
