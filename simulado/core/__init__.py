"""
Core Module - simulado state, flow and domain models.

Components:
- persisted_store: JSON-file key-value store with change notification
- app_state: typed app-wide state over the persisted store
- session_controller: screen transitions (builder, simulado, results, history)
- answer_pipeline: local-first answer sync, single-flight finalize, countdown
- topic_filter: cascading topic selection resolved to topic ids
- simulado_service: exam generation with offline fallback, replication
- mock_data: offline placeholder questions and local grading
"""

from simulado.core.app_state import AppState, AppStateStore
from simulado.core.errors import (
    ExamLoadError,
    FinalizeError,
    SimuladoApiError,
    SimuladoError,
    SimuladoValidationError,
)
from simulado.core.persisted_store import PersistedStore

__all__ = [
    "AppState",
    "AppStateStore",
    "ExamLoadError",
    "FinalizeError",
    "PersistedStore",
    "SimuladoApiError",
    "SimuladoError",
    "SimuladoValidationError",
]
