"""
Offline placeholder simulados.

Used when the exam service is unreachable (or SIMULADO_USE_MOCK_DATA is
set). A placeholder set always has exactly the requested number of
questions: the small bank below is shuffled and cycled, and each copy gets
its own id. Placeholder questions carry their correct letter so the exam
can be graded locally.
"""

from __future__ import annotations

import random
import uuid
from datetime import datetime

from simulado.core.models import (
    Alternative,
    ExamDetails,
    ExamQuestionResult,
    ExamStatus,
    Question,
    letter_for_index,
)

OFFLINE_EXAM_PREFIX = "offline-"

# (discipline, statement, alternatives, correct index)
_QUESTION_BANK: list[tuple[str, str, list[str], int]] = [
    (
        "matematica",
        "Qual é o resultado da expressão 2³ + 3² - 4¹?",
        ["11", "13", "15", "17", "9"],
        1,
    ),
    (
        "ciencias-natureza",
        "O número de prótons no núcleo de um átomo determina:",
        [
            "Sua massa atômica",
            "Seu número atômico",
            "Seu número de nêutrons",
            "Sua configuração eletrônica",
            "Sua carga elétrica total",
        ],
        1,
    ),
    (
        "ciencias-natureza",
        "Um objeto é lançado verticalmente para cima a 20 m/s. Com g = 10 m/s² e sem "
        "resistência do ar, qual é a altura máxima atingida?",
        ["10 m", "15 m", "20 m", "30 m", "40 m"],
        2,
    ),
    (
        "ciencias-humanas",
        "O período da 'República Velha' no Brasil (1889-1930) foi caracterizado por:",
        [
            "Alternância democrática entre partidos",
            "Domínio das oligarquias rurais e coronelismo",
            "Forte centralização política",
            "Participação política ampla de todas as classes",
            "Predomínio dos militares no governo",
        ],
        1,
    ),
    (
        "ciencias-humanas",
        "O clima predominante na região Amazônica é:",
        ["Semiárido", "Tropical de altitude", "Equatorial", "Subtropical", "Temperado"],
        2,
    ),
    (
        "linguagens",
        "Choose the correct alternative: \"If I _____ more time, I _____ visit my "
        "grandparents more often.\"",
        ["have / will", "had / would", "had / will", "have / would", "would have / will"],
        1,
    ),
]


def is_offline_exam(exam_id: str) -> bool:
    return exam_id.startswith(OFFLINE_EXAM_PREFIX)


def new_offline_exam_id() -> str:
    return f"{OFFLINE_EXAM_PREFIX}{uuid.uuid4().hex[:12]}"


def generate_placeholder_questions(count: int, rng: random.Random | None = None) -> list[Question]:
    """Build exactly `count` placeholder questions."""
    rng = rng or random.Random()
    order = list(range(len(_QUESTION_BANK)))
    questions: list[Question] = []

    while len(questions) < count:
        rng.shuffle(order)
        for bank_index in order:
            if len(questions) == count:
                break
            discipline, statement, alternatives, correct = _QUESTION_BANK[bank_index]
            number = len(questions) + 1
            questions.append(
                Question(
                    id=f"mock-{number}",
                    discipline=discipline,
                    year=2023,
                    context=statement,
                    alternatives_introduction="Escolha a alternativa correta:",
                    alternatives=[
                        Alternative(letter=letter_for_index(i), text=text)
                        for i, text in enumerate(alternatives)
                    ],
                    title=f"Questão Mock {number}",
                    correct_letter=letter_for_index(correct),
                )
            )

    return questions


def grade_offline(exam_id: str, questions: list[Question], answers: dict[str, int]) -> ExamDetails:
    """Grade a placeholder exam locally, mirroring the service's ExamDetails."""
    results: list[ExamQuestionResult] = []
    correct = wrong = 0

    for question in questions:
        index = answers.get(question.id)
        user_answer = letter_for_index(index) if index is not None else None
        is_correct = user_answer is not None and user_answer == question.correct_letter
        if is_correct:
            correct += 1
        elif user_answer is not None:
            wrong += 1
        results.append(
            ExamQuestionResult(
                question_id=question.id,
                correct_answer=question.correct_letter or "",
                user_answer=user_answer,
                is_correct=is_correct if user_answer is not None else None,
            )
        )

    now = datetime.now().isoformat()
    return ExamDetails(
        id=exam_id,
        user_id="",
        total_questions=len(questions),
        questions=results,
        total_correct_answers=correct,
        total_wrong_answers=wrong,
        status=ExamStatus.FINISHED,
        created_at=now,
        updated_at=now,
        finished_at=now,
    )
