from __future__ import annotations

from pathlib import Path

import pytest

from proctor_app.constants.assessment_constants import SESSIONS_KEY
from proctor_app.core.clock import ManualScheduler
from proctor_app.core.errors import LoginRejectedError, QuestionImportError
from proctor_app.core.models import SignalType
from proctor_app.core.services.kv_store import KeyValueStore
from proctor_app.core.session_engine import EnginePhase
from proctor_app.core.session_manager import SessionManager, pointer_key_for
from tests.conftest import make_identity

CSV_TEXT = (
    "question,choix1,choix2,choix3,bonne_reponse\n"
    "What is cash?,Asset,Liability,Expense,choix1\n"
    "What are salaries?,Asset,Revenue,Expense,choix3\n"
)


@pytest.fixture
def manager(store, scheduler) -> SessionManager:
    return SessionManager(store=store, scheduler=scheduler)


def test_import_quiz_from_csv(tmp_path: Path, manager) -> None:
    source = tmp_path / "questions.csv"
    source.write_text(CSV_TEXT, encoding="utf-8")

    quiz = manager.import_quiz(source, "Basics", seconds_per_question=30, description="Intro")

    assert [listed.id for listed in manager.list_quizzes()] == [quiz.id]
    assert len(quiz.question_ids) == 2
    assert len(quiz.access_code) == 8
    assert quiz.seconds_per_question == 30
    assert quiz.description == "Intro"


def test_failed_import_creates_nothing(tmp_path: Path, manager) -> None:
    source = tmp_path / "broken.csv"
    source.write_text("question,choix1\nQ,A\n", encoding="utf-8")
    with pytest.raises(QuestionImportError):
        manager.import_quiz(source, "Broken")
    assert manager.list_quizzes() == []


def test_deactivated_quiz_refuses_logins(manager, quiz, candidate_code) -> None:
    manager.set_quiz_active(quiz.id, False)
    with pytest.raises(LoginRejectedError):
        manager.login("browser-1", quiz.access_code, candidate_code, make_identity())

    manager.set_quiz_active(quiz.id, True)
    manager.login("browser-1", quiz.access_code, candidate_code, make_identity())
    assert manager.snapshot("browser-1").phase is EnginePhase.IN_PROGRESS


def test_rotated_code_replaces_old_one(manager, quiz, candidate_code) -> None:
    rotated = manager.rotate_quiz_code(quiz.id)
    with pytest.raises(LoginRejectedError):
        manager.verify_access_codes("browser-1", quiz.access_code, candidate_code)
    found, _candidate = manager.verify_access_codes("browser-1", rotated.access_code, candidate_code)
    assert found.id == quiz.id


def test_candidate_roster_management(manager) -> None:
    grace = manager.register_candidate(make_identity("grace@example.com"))
    assert [candidate.id for candidate in manager.list_candidates()] == [grace.id]

    manager.remove_candidate(grace.id)
    assert manager.list_candidates() == []


def test_each_client_gets_its_own_pointer(manager, store, quiz, candidate_code) -> None:
    session = manager.login("browser-1", quiz.access_code, candidate_code, make_identity())
    assert store.get(pointer_key_for("browser-1"))["id"] == session.id
    assert store.get(pointer_key_for("browser-2")) is None
    assert manager.snapshot("browser-2").phase is EnginePhase.LOGIN


def test_save_writes_store_snapshot(tmp_path: Path, scheduler) -> None:
    data_file = tmp_path / "store.json"
    manager = SessionManager(store=KeyValueStore(data_file), scheduler=scheduler)
    manager.register_candidate(make_identity())
    manager.save()

    reloaded = KeyValueStore(data_file)
    reloaded.load()
    assert len(SessionManager(store=reloaded, scheduler=scheduler).list_candidates()) == 1


def test_second_browser_takes_over_the_attempt(manager, store, scheduler, quiz, candidate_code) -> None:
    session = manager.login("browser-1", quiz.access_code, candidate_code, make_identity())
    manager.handle_signal("browser-1", SignalType.TAB_SWITCH)

    continued = manager.login("browser-2", quiz.access_code, candidate_code, make_identity())
    assert continued.id == session.id
    assert manager.snapshot("browser-1").phase is EnginePhase.LOGIN
    assert store.get(pointer_key_for("browser-1")) is None

    for choice in (0, 1, 2):
        manager.select_answer("browser-2", choice)
        manager.next_question("browser-2")
    scheduler.advance(30)

    record = store.get_record(SESSIONS_KEY, session.id)
    assert record["status"] == "completed"
    assert record["answers"] == [0, 1, 2]
    assert record["score"] == 100
    assert len(record["cheating_attempts"]) == 1
    assert manager.snapshot("browser-1").phase is EnginePhase.LOGIN
    assert manager.snapshot("browser-2").phase is EnginePhase.COMPLETED


def test_reload_in_the_first_browser_reclaims_the_attempt(manager, store, scheduler, quiz, candidate_code) -> None:
    session = manager.login("browser-1", quiz.access_code, candidate_code, make_identity())
    manager.login("browser-2", quiz.access_code, candidate_code, make_identity())
    manager.login("browser-1", quiz.access_code, candidate_code, make_identity())

    assert manager.snapshot("browser-1").phase is EnginePhase.IN_PROGRESS
    assert manager.snapshot("browser-2").phase is EnginePhase.LOGIN
    assert manager.active_client_count == 1

    scheduler.advance(15)
    assert store.get_record(SESSIONS_KEY, session.id)["answers"] == [-1, -1, -1]


def test_only_running_attempts_keep_an_engine(manager, quiz, candidate_code) -> None:
    for index in range(50):
        assert manager.snapshot(f"visitor-{index}").phase is EnginePhase.LOGIN
    assert manager.active_client_count == 0

    manager.login("browser-1", quiz.access_code, candidate_code, make_identity())
    assert manager.active_client_count == 1

    for choice in (0, 1, 2):
        manager.select_answer("browser-1", choice)
        manager.next_question("browser-1")
    assert manager.active_client_count == 0
    assert manager.snapshot("browser-1").phase is EnginePhase.COMPLETED

    manager.start_new_attempt("browser-1")
    assert manager.snapshot("browser-1").phase is EnginePhase.LOGIN
    assert manager.active_client_count == 0


def test_restored_attempt_is_kept_running(store, scheduler, quiz, candidate_code) -> None:
    first = SessionManager(store=store, scheduler=scheduler)
    session = first.login("browser-1", quiz.access_code, candidate_code, make_identity())

    restarted = SessionManager(store=store, scheduler=ManualScheduler())
    assert restarted.snapshot("browser-1").phase is EnginePhase.IN_PROGRESS
    assert restarted.active_client_count == 1
    assert restarted.engine_for("browser-1").session.id == session.id
