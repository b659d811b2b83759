"""Read-only view over quizzes and questions held in the key-value store.

The admin side (question import, console) registers quizzes and questions
through the helpers at the bottom of ``QuestionStore``; the engine only
resolves them.
"""

from __future__ import annotations

import random
from uuid import uuid4

from proctor_app.constants.assessment_constants import (
    ACCESS_CODE_ALPHABET,
    ACCESS_CODE_LENGTH,
    DEFAULT_SECONDS_PER_QUESTION,
    QUESTIONS_KEY,
    QUIZZES_KEY,
)
from proctor_app.core.models import Question, Quiz, QuizStatus, validate_question
from proctor_app.core.services.kv_store import KeyValueStore

_code_rng = random.SystemRandom()


def generate_access_code(rng: random.Random | None = None) -> str:
    chooser = rng or _code_rng
    return "".join(chooser.choice(ACCESS_CODE_ALPHABET) for _ in range(ACCESS_CODE_LENGTH))


def normalize_code(code: str) -> str:
    return code.strip().upper()


class QuestionStore:
    """Resolves quizzes and their ordered questions."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    def get_quiz(self, quiz_id: str) -> Quiz | None:
        record = self._store.get_record(QUIZZES_KEY, quiz_id)
        return None if record is None else Quiz.from_dict(record)

    def list_quizzes(self) -> list[Quiz]:
        return [Quiz.from_dict(record) for record in self._store.list_records(QUIZZES_KEY)]

    def find_active_quiz(self, access_code: str) -> Quiz | None:
        code = normalize_code(access_code)
        if not code:
            return None
        for quiz in self.list_quizzes():
            if quiz.access_code == code and quiz.status is QuizStatus.ACTIVE:
                return quiz
        return None

    def get_question(self, question_id: str) -> Question | None:
        record = self._store.get_record(QUESTIONS_KEY, question_id)
        return None if record is None else Question.from_dict(record)

    def resolve_questions(self, quiz: Quiz) -> list[Question]:
        """Return the quiz's questions in quiz order, skipping ids that no longer resolve."""
        questions: list[Question] = []
        for question_id in quiz.question_ids:
            question = self.get_question(question_id)
            if question is not None:
                questions.append(question)
        return questions

    @staticmethod
    def time_budget(quiz: Quiz, question: Question) -> int:
        if question.time_per_question:
            return question.time_per_question
        return quiz.seconds_per_question or DEFAULT_SECONDS_PER_QUESTION

    # --- Admin-side registration ---

    def add_question(self, question: Question) -> Question:
        validate_question(question)
        stored = Question(
            id=question.id or uuid4().hex,
            prompt=question.prompt.strip(),
            choices=[choice.strip() for choice in question.choices],
            correct_answer=question.correct_answer,
            category=question.category,
            time_per_question=question.time_per_question,
        )
        self._store.put_record(QUESTIONS_KEY, stored.id, stored.to_dict())
        return stored

    def create_quiz(
        self,
        name: str,
        questions: list[Question],
        *,
        seconds_per_question: int = DEFAULT_SECONDS_PER_QUESTION,
        has_classification_game: bool = False,
        description: str = "",
        access_code: str | None = None,
    ) -> Quiz:
        cleaned_name = name.strip()
        if not cleaned_name:
            raise ValueError("Quiz name must not be empty.")
        if seconds_per_question <= 0:
            raise ValueError("Seconds per question must be a positive integer.")
        stored_questions = [self.add_question(question) for question in questions]
        quiz = Quiz(
            id=uuid4().hex,
            name=cleaned_name,
            question_ids=[question.id for question in stored_questions],
            access_code=normalize_code(access_code) if access_code else generate_access_code(),
            seconds_per_question=seconds_per_question,
            has_classification_game=has_classification_game,
            description=description,
        )
        self._store.put_record(QUIZZES_KEY, quiz.id, quiz.to_dict())
        return quiz

    def set_quiz_status(self, quiz_id: str, status: QuizStatus) -> Quiz:
        quiz = self._require_quiz(quiz_id)
        quiz.status = status
        self._store.put_record(QUIZZES_KEY, quiz.id, quiz.to_dict())
        return quiz

    def rotate_access_code(self, quiz_id: str) -> Quiz:
        quiz = self._require_quiz(quiz_id)
        quiz.access_code = generate_access_code()
        self._store.put_record(QUIZZES_KEY, quiz.id, quiz.to_dict())
        return quiz

    def delete_quiz(self, quiz_id: str) -> None:
        self._store.delete_record(QUIZZES_KEY, quiz_id)

    def _require_quiz(self, quiz_id: str) -> Quiz:
        quiz = self.get_quiz(quiz_id)
        if quiz is None:
            raise KeyError(f"Unknown quiz {quiz_id}")
        return quiz
