from __future__ import annotations

import csv
from datetime import datetime, timezone
from pathlib import Path

import pytest

from proctor_app.constants.assessment_constants import SESSIONS_KEY
from proctor_app.core.models import Session, SessionStatus
from proctor_app.core.results_exporter import RESULT_COLUMNS, save_results_to_file
from proctor_app.core.services.reporting import ReportingService, SessionFilter
from tests.conftest import make_identity


def test_export_writes_one_row_per_session(tmp_path: Path, store, quiz) -> None:
    session = Session(
        id="s1",
        quiz_id=quiz.id,
        candidate_info=make_identity(),
        status=SessionStatus.COMPLETED,
        started_at=datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc),
        completed_at=datetime(2026, 3, 2, 9, 20, tzinfo=timezone.utc),
        completion_time=1200,
        answers=[0, 1, 0],
        score=67,
    )
    store.put_record(SESSIONS_KEY, session.id, session.to_dict())
    target = tmp_path / "exports" / "results.csv"

    count = save_results_to_file(target, ReportingService(store))

    assert count == 1
    with target.open(encoding="utf-8", newline="") as handle:
        rows = list(csv.DictReader(handle))
    assert list(rows[0].keys()) == list(RESULT_COLUMNS)
    assert rows[0]["email"] == "ada.lovelace@example.com"
    assert rows[0]["quiz"] == "Bookkeeping basics"
    assert rows[0]["score"] == "67"
    assert rows[0]["classification_score"] == ""
    assert rows[0]["duration_s"] == "1200"
    assert rows[0]["incidents"] == "0"


def test_export_without_matching_sessions_fails(tmp_path: Path, store) -> None:
    with pytest.raises(ValueError, match="no results"):
        save_results_to_file(tmp_path / "results.csv", ReportingService(store), SessionFilter(name="nobody"))
