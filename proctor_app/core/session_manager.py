"""Business logic shared between the proctor console and the candidate API."""

from __future__ import annotations

import logging
from pathlib import Path
from threading import Lock
from typing import Any
from uuid import uuid4

from proctor_app.constants.assessment_constants import (
    CLASSIFICATION_DURATION_S,
    CLASSIFICATION_FEEDBACK_S,
    CURRENT_SESSION_KEY,
    DEFAULT_SECONDS_PER_QUESTION,
)
from proctor_app.core.classification_game import ClassificationResult
from proctor_app.core.clock import AsyncioScheduler, Scheduler
from proctor_app.core.integrity_monitor import KeyChord, SignalOutcome
from proctor_app.core.models import Candidate, CandidateInfo, Quiz, QuizStatus, Session, SignalType
from proctor_app.core.notifier import CompletionNotifier
from proctor_app.core.question_importer import load_questions_from_file
from proctor_app.core.results_exporter import save_results_to_file
from proctor_app.core.services.candidate_roster import CandidateRoster
from proctor_app.core.services.kv_store import KeyValueStore
from proctor_app.core.services.question_store import QuestionStore
from proctor_app.core.services.reporting import ReportingService, SessionFilter
from proctor_app.core.session_engine import EngineSnapshot, SessionEngine

logger = logging.getLogger(__name__)


def pointer_key_for(client_id: str) -> str:
    return f"{CURRENT_SESSION_KEY}:{client_id}"


class SessionManager:
    """Facade over the store services and one SessionEngine per candidate browser."""

    def __init__(
        self,
        *,
        store: KeyValueStore | None = None,
        scheduler: Scheduler | None = None,
        notifier: CompletionNotifier | None = None,
        classification_duration_s: int = CLASSIFICATION_DURATION_S,
        classification_feedback_s: int = CLASSIFICATION_FEEDBACK_S,
    ) -> None:
        self._lock = Lock()

        # Services
        self._store = store or KeyValueStore()
        self._questions = QuestionStore(self._store)
        self._roster = CandidateRoster(self._store)
        self._reporting = ReportingService(self._store, self._questions)

        self._scheduler = scheduler or AsyncioScheduler()
        self._notifier = notifier
        self._classification_duration_s = classification_duration_s
        self._classification_feedback_s = classification_feedback_s
        self._engines: dict[str, SessionEngine] = {}
        # session id -> client id of the engine allowed to write it
        self._owners: dict[str, str] = {}

    @property
    def store(self) -> KeyValueStore:
        return self._store

    @property
    def reporting(self) -> ReportingService:
        return self._reporting

    # --- Candidate engines ---
    # Only running attempts keep an engine; login and final screens are rebuilt from the pointer per request.

    @staticmethod
    def new_client_id() -> str:
        return uuid4().hex

    @property
    def active_client_count(self) -> int:
        with self._lock:
            self._prune_locked()
            return len(self._engines)

    def engine_for(self, client_id: str) -> SessionEngine:
        """Return the engine for a client, restoring its stored pointer on first contact."""
        with self._lock:
            return self._engine_locked(client_id)

    def _build_engine(self, client_id: str) -> SessionEngine:
        return SessionEngine(
            store=self._store,
            questions=self._questions,
            roster=self._roster,
            scheduler=self._scheduler,
            notifier=self._notifier,
            pointer_key=pointer_key_for(client_id),
            classification_duration_s=self._classification_duration_s,
            classification_feedback_s=self._classification_feedback_s,
        )

    def _engine_locked(self, client_id: str) -> SessionEngine:
        self._prune_locked()
        engine = self._engines.get(client_id)
        if engine is None:
            engine = self._build_engine(client_id)
            engine.restore()
            self._track_locked(client_id, engine)
        return engine

    def _track_locked(self, client_id: str, engine: SessionEngine) -> None:
        """Keep a running engine and make it the only writer of its session."""
        session = engine.session
        if session is None or not engine.phase.is_active:
            self._engines.pop(client_id, None)
            return
        previous = self._owners.get(session.id)
        if previous is not None and previous != client_id:
            other = self._engines.pop(previous, None)
            if other is not None:
                logger.info("Session %s moved from client %s to %s", session.id, previous, client_id)
                other.release()
        self._owners[session.id] = client_id
        self._engines[client_id] = engine

    def _prune_locked(self) -> None:
        finished = [client_id for client_id, engine in self._engines.items() if not engine.phase.is_active]
        for client_id in finished:
            del self._engines[client_id]
        self._owners = {
            session_id: client_id for session_id, client_id in self._owners.items() if client_id in self._engines
        }

    def snapshot(self, client_id: str) -> EngineSnapshot:
        with self._lock:
            return self._engine_locked(client_id).snapshot()

    def verify_access_codes(self, client_id: str, quiz_code: str, candidate_code: str) -> tuple[Quiz, Candidate]:
        with self._lock:
            return self._engine_locked(client_id).verify_access_codes(quiz_code, candidate_code)

    def login(self, client_id: str, quiz_code: str, candidate_code: str, identity: CandidateInfo) -> Session:
        with self._lock:
            engine = self._engine_locked(client_id)
            session = engine.login(quiz_code, candidate_code, identity)
            self._track_locked(client_id, engine)
            return session

    def select_answer(self, client_id: str, choice: int) -> None:
        with self._lock:
            self._engine_locked(client_id).select_answer(choice)

    def next_question(self, client_id: str, question_index: int | None = None) -> bool:
        with self._lock:
            return self._engine_locked(client_id).next_question(question_index)

    def handle_signal(self, client_id: str, signal: SignalType, metadata: dict[str, Any] | None = None) -> SignalOutcome:
        with self._lock:
            return self._engine_locked(client_id).handle_signal(signal, metadata)

    def handle_key(self, client_id: str, chord: KeyChord) -> SignalOutcome:
        with self._lock:
            return self._engine_locked(client_id).handle_key(chord)

    def assign_term(self, client_id: str, term_id: str, category: str | None) -> None:
        with self._lock:
            self._engine_locked(client_id).assign_term(term_id, category)

    def validate_classification(self, client_id: str) -> ClassificationResult:
        with self._lock:
            return self._engine_locked(client_id).validate_classification()

    def start_new_attempt(self, client_id: str) -> None:
        with self._lock:
            self._engine_locked(client_id).start_new_attempt()

    # --- Admin side ---

    def import_quiz(
        self,
        file_path: Path,
        name: str,
        *,
        seconds_per_question: int = DEFAULT_SECONDS_PER_QUESTION,
        has_classification_game: bool = False,
        description: str = "",
    ) -> Quiz:
        imported = load_questions_from_file(file_path)
        with self._lock:
            return self._questions.create_quiz(
                name,
                imported.questions,
                seconds_per_question=seconds_per_question,
                has_classification_game=has_classification_game,
                description=description,
            )

    def list_quizzes(self) -> list[Quiz]:
        with self._lock:
            return self._questions.list_quizzes()

    def set_quiz_active(self, quiz_id: str, active: bool) -> Quiz:
        with self._lock:
            status = QuizStatus.ACTIVE if active else QuizStatus.INACTIVE
            return self._questions.set_quiz_status(quiz_id, status)

    def rotate_quiz_code(self, quiz_id: str) -> Quiz:
        with self._lock:
            return self._questions.rotate_access_code(quiz_id)

    def delete_quiz(self, quiz_id: str) -> None:
        with self._lock:
            self._questions.delete_quiz(quiz_id)

    def register_candidate(self, info: CandidateInfo) -> Candidate:
        with self._lock:
            return self._roster.register(info)

    def list_candidates(self) -> list[Candidate]:
        with self._lock:
            return self._roster.list_candidates()

    def remove_candidate(self, candidate_id: str) -> None:
        with self._lock:
            self._roster.remove(candidate_id)

    def export_results(self, file_path: Path, session_filter: SessionFilter | None = None) -> int:
        return save_results_to_file(file_path, self._reporting, session_filter)

    def save(self) -> None:
        self._store.save()
