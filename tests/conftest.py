"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from simulado.core.app_state import AppStateStore  # noqa: E402
from simulado.core.persisted_store import PersistedStore  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def state_path(tmp_path):
    """Path of a fresh state file."""
    return tmp_path / "state.json"


@pytest.fixture
def store(state_path):
    """PersistedStore backed by a temporary file."""
    return PersistedStore(state_path)


@pytest.fixture
def app_state(store):
    """AppStateStore over the temporary store."""
    return AppStateStore(store)


def make_exam_question(number: int, user_answer=None):
    """One question as the exam service serves it."""
    return {
        "id": f"q{number}",
        "title": f"Questão {number}",
        "discipline": "matematica",
        "year": 2022,
        "context": f"Enunciado da questão {number}",
        "alternatives_introduction": "Assinale a alternativa correta:",
        "alternatives": [
            {"letter": letter, "text": f"Alternativa {letter}"} for letter in "ABCDE"
        ],
        "user_answer": user_answer,
    }


@pytest.fixture
def sample_exam():
    """An in-progress exam with three questions, one already answered."""
    return {
        "id": "exam-001",
        "status": "in_progress",
        "total_questions": 3,
        "answered_questions": 1,
        "questions": [
            make_exam_question(1, user_answer="C"),
            make_exam_question(2),
            make_exam_question(3),
        ],
        "created_at": "2024-05-01T10:00:00",
        "finished_at": None,
    }


@pytest.fixture
def sample_exam_details():
    """Graded details for exam-001."""
    return {
        "id": "exam-001",
        "user_id": "507f1f77bcf86cd799439011",
        "total_questions": 3,
        "questions": [
            {"question_id": "q1", "user_answer": "C", "correct_answer": "C", "is_correct": True},
            {"question_id": "q2", "user_answer": "A", "correct_answer": "B", "is_correct": False},
            {"question_id": "q3", "user_answer": None, "correct_answer": "D", "is_correct": None},
        ],
        "total_correct_answers": 1,
        "total_wrong_answers": 1,
        "status": "finished",
        "created_at": "2024-05-01T10:00:00",
        "updated_at": "2024-05-01T11:00:00",
        "finished_at": "2024-05-01T11:00:00",
    }


@pytest.fixture
def sample_topics():
    """Topic records for two areas of one field."""

    def topic(topic_id, area_code, general_code, specific):
        return {
            "id": topic_id,
            "field": "Matemática",
            "field_code": "MAT",
            "area": f"Área {area_code}",
            "area_code": area_code,
            "general_topic": f"Tópico {general_code}",
            "general_topic_code": general_code,
            "specific_topic": specific,
        }

    return [
        topic("t1", "ALG", "EQ", "Equações do 1º grau"),
        topic("t2", "ALG", "EQ", "Equações do 2º grau"),
        topic("t3", "ALG", "FN", "Funções afins"),
        topic("t4", "GEO", "TR", "Triângulos"),
    ]
