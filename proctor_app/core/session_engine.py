"""State machine driving one candidate's attempt from login to a terminal state.

Phases::

    login -> in_progress -> classification_game -> completed
                         -> completed
                         -> cancelled   (second tab switch)

The engine owns the per-question countdown, the classification phase and the
integrity monitor. Every change to the session is written as a full record to
the ``testSessions`` collection and mirrored to this client's
``currentSession`` pointer. Once a session reaches ``completed`` or
``cancelled`` the final record is written once and the engine stops writing.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
import logging
import re
from typing import Any
from uuid import uuid4

from proctor_app.constants.assessment_constants import (
    CANDIDATE_LEVELS,
    CHOICES_PER_QUESTION,
    CLASSIFICATION_DURATION_S,
    CLASSIFICATION_FEEDBACK_S,
    CURRENT_SESSION_KEY,
    NO_ANSWER,
    SESSIONS_KEY,
)
from proctor_app.core.classification_game import (
    CATEGORY_GROUPS,
    CATEGORY_LABELS,
    ClassificationGame,
    ClassificationResult,
)
from proctor_app.core.clock import Countdown, Scheduler
from proctor_app.core.errors import LoginRejectedError, SessionStateError
from proctor_app.core.integrity_monitor import (
    Consequence,
    IntegrityMonitor,
    KeyChord,
    SignalOutcome,
)
from proctor_app.core.markdown_renderer import renderer
from proctor_app.core.models import (
    Candidate,
    CandidateInfo,
    Question,
    Quiz,
    Session,
    SessionStatus,
    SignalType,
)
from proctor_app.core.notifier import CompletionNotifier, build_completion_payload
from proctor_app.core.scoring import quiz_score
from proctor_app.core.services.candidate_roster import CandidateRoster
from proctor_app.core.services.kv_store import KeyValueStore
from proctor_app.core.services.question_store import QuestionStore

logger = logging.getLogger(__name__)

_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class EnginePhase(str, Enum):
    LOGIN = "login"
    IN_PROGRESS = "in_progress"
    CLASSIFICATION_GAME = "classification_game"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_active(self) -> bool:
        return self in (EnginePhase.IN_PROGRESS, EnginePhase.CLASSIFICATION_GAME)


_PHASE_BY_STATUS = {
    SessionStatus.IN_PROGRESS: EnginePhase.IN_PROGRESS,
    SessionStatus.CLASSIFICATION_GAME: EnginePhase.CLASSIFICATION_GAME,
    SessionStatus.COMPLETED: EnginePhase.COMPLETED,
    SessionStatus.CANCELLED: EnginePhase.CANCELLED,
}


class ActionOrigin(str, Enum):
    USER = "user"
    TIMER = "timer"


@dataclass(frozen=True, slots=True)
class AdvanceAction:
    """Record the selected answer for ``question_index`` and move on."""

    question_index: int
    origin: ActionOrigin


@dataclass(frozen=True, slots=True)
class QuestionView:
    index: int
    count: int
    prompt: str
    prompt_html: str
    choices: list[str]
    selected: int | None
    time_remaining: int
    time_budget: int
    is_last: bool


@dataclass(frozen=True, slots=True)
class TermView:
    id: str
    term: str
    correct: bool | None


@dataclass(frozen=True, slots=True)
class ClassificationView:
    unassigned: list[TermView]
    board: dict[str, list[TermView]]
    labels: dict[str, str]
    groups: dict[str, list[str]]
    time_remaining: int
    can_validate: bool
    validated: bool
    score: int | None
    feedback_remaining: int | None


@dataclass(frozen=True, slots=True)
class EngineSnapshot:
    """View model for the candidate page (pure data)."""

    phase: EnginePhase
    quiz_name: str | None
    candidate_name: str | None
    warning_banner: bool
    question: QuestionView | None = None
    classification: ClassificationView | None = None
    score: int | None = None
    classification_score: int | None = None
    completion_time: int | None = None


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def validate_identity(identity: CandidateInfo) -> CandidateInfo:
    """Return a trimmed copy of the identity form or raise LoginRejectedError."""
    values = {key: value.strip() for key, value in identity.to_dict().items()}
    if any(not value for value in values.values()):
        raise LoginRejectedError("Please fill in all required fields.")
    if not _EMAIL_PATTERN.match(values["email"]):
        raise LoginRejectedError("Please enter a valid email address.")
    values["email"] = values["email"].lower()
    values["level"] = values["level"].upper()
    if values["level"] not in CANDIDATE_LEVELS:
        raise LoginRejectedError(f"Level must be one of {', '.join(CANDIDATE_LEVELS)}.")
    return CandidateInfo(**values)


class SessionEngine:
    """Drives a single candidate attempt for one client."""

    def __init__(
        self,
        *,
        store: KeyValueStore,
        questions: QuestionStore,
        roster: CandidateRoster,
        scheduler: Scheduler,
        notifier: CompletionNotifier | None = None,
        pointer_key: str = CURRENT_SESSION_KEY,
        classification_duration_s: int = CLASSIFICATION_DURATION_S,
        classification_feedback_s: int = CLASSIFICATION_FEEDBACK_S,
        now: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._store = store
        self._question_store = questions
        self._roster = roster
        self._scheduler = scheduler
        self._notifier = notifier
        self._pointer_key = pointer_key
        self._classification_duration_s = classification_duration_s
        self._classification_feedback_s = classification_feedback_s
        self._now = now

        self._phase = EnginePhase.LOGIN
        self._session: Session | None = None
        self._quiz: Quiz | None = None
        self._questions: list[Question] = []
        self._question_index = 0
        self._selected: int | None = None
        self._question_timer: Countdown | None = None
        self._game: ClassificationGame | None = None
        self._closed = False
        self._warning_banner = False
        self._monitor = IntegrityMonitor(context=self._signal_context, now=now)

    # --- Read-only state ---

    @property
    def phase(self) -> EnginePhase:
        return self._phase

    @property
    def session(self) -> Session | None:
        return None if self._session is None else Session.from_dict(self._session.to_dict())

    @property
    def quiz(self) -> Quiz | None:
        return self._quiz

    @property
    def questions(self) -> list[Question]:
        return list(self._questions)

    @property
    def question_index(self) -> int:
        return self._question_index

    @property
    def selected_answer(self) -> int | None:
        return self._selected

    @property
    def time_remaining(self) -> int | None:
        if self._phase is EnginePhase.IN_PROGRESS and self._question_timer is not None:
            return self._question_timer.remaining
        if self._phase is EnginePhase.CLASSIFICATION_GAME and self._game is not None:
            return self._game.time_remaining
        return None

    @property
    def warning_banner(self) -> bool:
        return self._warning_banner

    @property
    def monitor(self) -> IntegrityMonitor:
        return self._monitor

    @property
    def classification_game(self) -> ClassificationGame | None:
        return self._game

    # --- Login / resume ---

    def restore(self) -> EnginePhase:
        """Re-enter the phase recorded by this client's session pointer."""
        self._halt()
        self._reset_state()
        pointer = self._store.get(self._pointer_key)
        if not pointer:
            return self._phase
        record = self._store.get_record(SESSIONS_KEY, str(pointer.get("id"))) or pointer
        session = Session.from_dict(record)
        quiz = self._question_store.get_quiz(session.quiz_id)

        if session.status.is_terminal:
            self._session = session
            self._quiz = quiz
            self._phase = _PHASE_BY_STATUS[session.status]
            self._closed = True
            return self._phase
        if quiz is None:
            logger.warning("Discarding session %s: quiz %s no longer exists", session.id, session.quiz_id)
            self._store.set(self._pointer_key, None)
            return self._phase

        logger.info("Resuming session %s (%s)", session.id, session.status.value)
        self._enter(session, quiz)
        return self._phase

    def verify_access_codes(self, quiz_code: str, candidate_code: str) -> tuple[Quiz, Candidate]:
        quiz = self._question_store.find_active_quiz(quiz_code)
        if quiz is None:
            logger.warning("Login rejected: invalid or inactive quiz code")
            raise LoginRejectedError("The access code is not valid or the quiz is not active.")
        candidate = self._roster.find_by_code(candidate_code)
        if candidate is None:
            logger.warning("Login rejected: unknown candidate code")
            raise LoginRejectedError("The candidate code is not valid.")
        return quiz, candidate

    def login(self, quiz_code: str, candidate_code: str, identity: CandidateInfo) -> Session:
        if self._phase is not EnginePhase.LOGIN:
            raise SessionStateError("An attempt is already open in this browser.")
        quiz, _candidate = self.verify_access_codes(quiz_code, candidate_code)
        info = validate_identity(identity)

        existing = self._find_session(quiz.id, info.email)
        if existing is not None:
            if existing.status is SessionStatus.COMPLETED:
                logger.warning("Login rejected: %s already completed quiz %s", info.email, quiz.id)
                raise LoginRejectedError("You have already completed this quiz.")
            if existing.status is SessionStatus.CANCELLED:
                logger.warning("Login rejected: %s was cancelled on quiz %s", info.email, quiz.id)
                raise LoginRejectedError(
                    "Your test was cancelled for suspected cheating. Please contact your manager."
                )
            logger.info("Continuing session %s for %s", existing.id, info.email)
            self._enter(existing, quiz)
            return existing

        session = Session(
            id=uuid4().hex,
            quiz_id=quiz.id,
            candidate_info=info,
            status=SessionStatus.IN_PROGRESS,
            started_at=self._now(),
        )
        logger.info("Session %s created for %s on quiz '%s'", session.id, info.email, quiz.name)
        self._enter(session, quiz, persist=True)
        return session

    def start_new_attempt(self) -> None:
        """Leave a terminal screen and return to login."""
        if self._phase.is_active:
            raise SessionStateError("The current attempt is still running.")
        self._store.set(self._pointer_key, None)
        self._reset_state()

    def release(self) -> None:
        """Hand the attempt over to another client: stop timers, forget the session, show login."""
        if self._session is not None:
            logger.info("Session %s released by %s", self._session.id, self._pointer_key)
        self._halt()
        self._store.set(self._pointer_key, None)
        self._reset_state()

    # --- Quiz phase ---

    def select_answer(self, choice: int) -> None:
        self._require_phase(EnginePhase.IN_PROGRESS)
        if not 0 <= choice < CHOICES_PER_QUESTION:
            raise ValueError("Choice index must be between 0 and 2.")
        self._selected = choice

    def next_question(self, question_index: int | None = None) -> bool:
        """User "next" for ``question_index`` (defaults to the current question).

        Returns False when the action is stale: the question was already
        recorded, or the attempt has left the quiz phase.
        """
        index = self._question_index if question_index is None else question_index
        return self._apply(AdvanceAction(index, ActionOrigin.USER))

    def _apply(self, action: AdvanceAction) -> bool:
        if self._phase is not EnginePhase.IN_PROGRESS or action.question_index != self._question_index:
            logger.debug("Ignoring stale %s advance for question %d", action.origin.value, action.question_index)
            return False
        if action.origin is ActionOrigin.USER and self._selected is None:
            raise SessionStateError("Please select an answer before continuing.")

        assert self._session is not None
        answer = NO_ANSWER if self._selected is None else self._selected
        if action.origin is ActionOrigin.TIMER:
            logger.debug("Time expired on question %d, recording %d", action.question_index, answer)
        self._cancel_question_timer()

        answers = self._session.answers
        if action.question_index < len(answers):
            answers[action.question_index] = answer
        else:
            answers.append(answer)
        if not self._persist():
            return False

        if self._question_index + 1 >= len(self._questions):
            self._finish_quiz()
        else:
            self._question_index += 1
            self._selected = self._recorded_answer(self._question_index)
            self._present_question()
        return True

    def _present_question(self) -> None:
        assert self._quiz is not None
        question = self._questions[self._question_index]
        index = self._question_index
        budget = self._question_store.time_budget(self._quiz, question)
        self._question_timer = Countdown(
            self._scheduler,
            budget,
            on_tick=self._handle_question_tick,
            on_expire=lambda: self._apply(AdvanceAction(index, ActionOrigin.TIMER)),
        )
        self._question_timer.start()

    def _handle_question_tick(self, _remaining: int) -> None:
        if self._phase is not EnginePhase.IN_PROGRESS or self._session is None:
            return
        self._session.completion_time += 1
        self._persist()

    def _finish_quiz(self) -> None:
        assert self._session is not None and self._quiz is not None
        correct, score = quiz_score(self._session.answers, self._questions)
        self._session.score = score
        logger.info("Session %s quiz finished: %d/%d -> %d%%", self._session.id, correct, len(self._questions), score)
        if self._quiz.has_classification_game:
            self._session.status = SessionStatus.CLASSIFICATION_GAME
            self._phase = EnginePhase.CLASSIFICATION_GAME
            if self._persist():
                self._start_classification()
        else:
            self._complete()

    # --- Classification phase ---

    def assign_term(self, term_id: str, category: str | None) -> None:
        self._require_phase(EnginePhase.CLASSIFICATION_GAME)
        assert self._game is not None and self._session is not None
        self._game.assign(term_id, category)
        self._session.classification_answers = self._game.assignments
        self._persist()

    def validate_classification(self) -> ClassificationResult:
        self._require_phase(EnginePhase.CLASSIFICATION_GAME)
        assert self._game is not None
        return self._game.validate()

    def _start_classification(self) -> None:
        assert self._session is not None
        logger.info("Session %s entered the classification phase", self._session.id)
        self._game = ClassificationGame(
            self._scheduler,
            on_complete=self._handle_classification_complete,
            on_tick=self._handle_classification_tick,
            duration_s=self._classification_duration_s,
            feedback_s=self._classification_feedback_s,
            assignments=self._session.classification_answers,
        )
        self._game.start()

    def _handle_classification_tick(self, _remaining: int) -> None:
        if self._phase is not EnginePhase.CLASSIFICATION_GAME or self._session is None:
            return
        self._session.completion_time += 1
        self._persist()

    def _handle_classification_complete(self, result: ClassificationResult) -> None:
        if self._phase is not EnginePhase.CLASSIFICATION_GAME or self._session is None:
            return
        self._session.classification_score = result.score
        self._session.classification_answers = dict(result.assignments)
        self._complete()

    # --- Integrity ---

    def handle_signal(self, signal: SignalType, metadata: dict[str, Any] | None = None) -> SignalOutcome:
        return self._apply_outcome(self._monitor.observe(signal, metadata))

    def handle_key(self, chord: KeyChord) -> SignalOutcome:
        return self._apply_outcome(self._monitor.observe_key(chord))

    def _apply_outcome(self, outcome: SignalOutcome) -> SignalOutcome:
        if not outcome.recorded or outcome.attempt is None or self._session is None:
            return outcome
        self._session.cheating_attempts.append(outcome.attempt)
        if outcome.consequence is Consequence.CANCEL:
            # The cancelling attempt is written together with the cancellation.
            self._cancel()
            return outcome
        if outcome.consequence is Consequence.WARN:
            self._warning_banner = True
            logger.warning("Integrity warning issued for session %s", self._session.id)
        self._persist()
        return outcome

    def _signal_context(self) -> dict[str, Any]:
        context: dict[str, Any] = {"phase": self._phase.value}
        if self._phase is EnginePhase.IN_PROGRESS:
            context["question_index"] = self._question_index
        context["time_remaining"] = self.time_remaining
        return context

    # --- Terminal transitions ---

    def _complete(self) -> None:
        assert self._session is not None and self._quiz is not None
        self._session.status = SessionStatus.COMPLETED
        self._session.completed_at = self._now()
        self._phase = EnginePhase.COMPLETED
        self._halt()
        if not self._persist():
            return
        self._closed = True
        logger.info("Session %s completed (score %s)", self._session.id, self._session.score)
        self._send_notification()

    def _cancel(self) -> None:
        assert self._session is not None
        self._session.status = SessionStatus.CANCELLED
        self._session.completed_at = self._now()
        self._phase = EnginePhase.CANCELLED
        self._halt()
        if not self._persist():
            return
        self._closed = True
        logger.warning("Session %s cancelled after repeated tab switches", self._session.id)

    def _send_notification(self) -> None:
        if self._notifier is None or self._session is None or self._quiz is None:
            return
        try:
            payload = build_completion_payload(self._session, self._quiz, self._questions)
            self._notifier.notify(payload)
        except Exception:
            logger.exception("Completion notification failed for session %s", self._session.id)

    # --- Internals ---

    def _enter(self, session: Session, quiz: Quiz, *, persist: bool = False) -> None:
        self._session = session
        self._quiz = quiz
        self._questions = self._question_store.resolve_questions(quiz)
        self._phase = _PHASE_BY_STATUS[session.status]
        self._closed = False
        if len(session.answers) > len(self._questions):
            del session.answers[len(self._questions):]
        self._monitor.attach(session.cheating_attempts)
        self._warning_banner = self._monitor.warning_issued
        if persist:
            self._persist()
        else:
            self._store.set(self._pointer_key, session.to_dict())

        if self._phase is EnginePhase.IN_PROGRESS:
            self._question_index = 0
            if not self._questions:
                self._finish_quiz()
                return
            self._selected = self._recorded_answer(0)
            self._present_question()
        elif self._phase is EnginePhase.CLASSIFICATION_GAME:
            self._start_classification()

    def _recorded_answer(self, index: int) -> int | None:
        assert self._session is not None
        if index < len(self._session.answers) and self._session.answers[index] >= 0:
            return self._session.answers[index]
        return None

    def _find_session(self, quiz_id: str, email: str) -> Session | None:
        matches = [
            Session.from_dict(record)
            for record in self._store.list_records(SESSIONS_KEY)
            if record.get("quiz_id") == quiz_id
            and str(record.get("candidate_info", {}).get("email", "")).lower() == email
        ]
        if not matches:
            return None
        terminal = [session for session in matches if session.status.is_terminal]
        if terminal:
            return terminal[0]
        return matches[0]

    def _persist(self) -> bool:
        """Write the full record; False when the write was refused."""
        if self._session is None:
            return False
        if self._closed:
            logger.debug("Refusing write to closed session %s", self._session.id)
            return False
        stored = self._store.get_record(SESSIONS_KEY, self._session.id)
        if stored is not None and SessionStatus(stored["status"]).is_terminal:
            self._adopt_final_record(stored)
            return False
        record = self._session.to_dict()
        self._store.put_record(SESSIONS_KEY, self._session.id, record)
        self._store.set(self._pointer_key, record)
        return True

    def _adopt_final_record(self, record: dict[str, Any]) -> None:
        """The session was finished by another client; stop and show its final state."""
        session = Session.from_dict(record)
        logger.warning("Session %s was finalized elsewhere; %s stops writing", session.id, self._pointer_key)
        self._halt()
        self._session = session
        self._phase = _PHASE_BY_STATUS[session.status]
        self._closed = True
        self._store.set(self._pointer_key, record)

    def _cancel_question_timer(self) -> None:
        if self._question_timer is not None:
            self._question_timer.cancel()
            self._question_timer = None

    def _halt(self) -> None:
        """Stop every timer and detach the monitor."""
        self._cancel_question_timer()
        if self._game is not None:
            self._game.cancel()
        self._monitor.detach()

    def _reset_state(self) -> None:
        self._phase = EnginePhase.LOGIN
        self._session = None
        self._quiz = None
        self._questions = []
        self._question_index = 0
        self._selected = None
        self._game = None
        self._closed = False
        self._warning_banner = False

    def _require_phase(self, phase: EnginePhase) -> None:
        if self._phase is not phase:
            raise SessionStateError(f"Action not available while the session is {self._phase.value}.")

    # --- View model ---

    def snapshot(self) -> EngineSnapshot:
        session = self._session
        snapshot = EngineSnapshot(
            phase=self._phase,
            quiz_name=None if self._quiz is None else self._quiz.name,
            candidate_name=None if session is None else session.candidate_info.display_name,
            warning_banner=self._warning_banner,
            score=None if session is None else session.score,
            classification_score=None if session is None else session.classification_score,
            completion_time=None if session is None else session.completion_time,
        )
        if self._phase is EnginePhase.IN_PROGRESS and self._questions and self._quiz is not None:
            question = self._questions[self._question_index]
            return replace(
                snapshot,
                question=QuestionView(
                    index=self._question_index,
                    count=len(self._questions),
                    prompt=question.prompt,
                    prompt_html=renderer.render_fragment(question.prompt),
                    choices=list(question.choices),
                    selected=self._selected,
                    time_remaining=self.time_remaining or 0,
                    time_budget=self._question_store.time_budget(self._quiz, question),
                    is_last=self._question_index == len(self._questions) - 1,
                ),
            )
        if self._phase is EnginePhase.CLASSIFICATION_GAME and self._game is not None:
            return replace(snapshot, classification=self._classification_view(self._game))
        return snapshot

    @staticmethod
    def _classification_view(game: ClassificationGame) -> ClassificationView:
        def view(term_id: str, term: str) -> TermView:
            return TermView(id=term_id, term=term, correct=game.is_term_correct(term_id))

        result = game.result
        return ClassificationView(
            unassigned=[view(term.id, term.term) for term in game.unassigned_terms()],
            board={
                category.value: [view(term.id, term.term) for term in game.terms_in(category)]
                for category in CATEGORY_LABELS
            },
            labels={category.value: label for category, label in CATEGORY_LABELS.items()},
            groups={name: [category.value for category in pair] for name, pair in CATEGORY_GROUPS.items()},
            time_remaining=game.time_remaining,
            can_validate=game.can_validate,
            validated=game.validated,
            score=None if result is None else result.score,
            feedback_remaining=game.feedback_remaining,
        )
