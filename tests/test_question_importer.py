from __future__ import annotations

from pathlib import Path

import pytest

from proctor_app.core.errors import QuestionImportError
from proctor_app.core.question_importer import load_questions_from_file, parse_questions_csv

HEADER = "question,choix1,choix2,choix3,bonne_reponse,catégorie,temps\n"


def test_load_questions_from_csv(tmp_path: Path) -> None:
    source = tmp_path / "questions.csv"
    source.write_text(
        "\ufeff"
        + HEADER
        + '"Where does depreciation go?","Assets","Liabilities","Income statement","choix3","Balance",45\n'
        + "\n"
        + "What is cash?,Asset,Liability,Expense,CHOIX1,,\n",
        encoding="utf-8",
    )

    imported = load_questions_from_file(source)

    assert imported.source_path == source
    assert len(imported.questions) == 2
    first, second = imported.questions
    assert first.prompt == "Where does depreciation go?"
    assert first.choices == ["Assets", "Liabilities", "Income statement"]
    assert first.correct_answer == 2
    assert first.category == "Balance"
    assert first.time_per_question == 45
    assert second.correct_answer == 0
    assert second.category is None
    assert second.time_per_question is None


def test_header_aliases_are_accepted() -> None:
    questions = parse_questions_csv("Question,Choix1,Choix2,Choix3,Bonne Réponse,Time\nQ,A,B,C,choix2,30\n")
    assert questions[0].correct_answer == 1
    assert questions[0].time_per_question == 30


def test_missing_columns_are_reported() -> None:
    with pytest.raises(QuestionImportError, match="choix3, bonne_reponse"):
        parse_questions_csv("question,choix1,choix2\nQ,A,B\n")


def test_invalid_correct_answer_names_the_line() -> None:
    text = HEADER + "Q1,A,B,C,choix1,,\nQ2,A,B,C,choix4,,\n"
    with pytest.raises(QuestionImportError, match=r"^Line 3: bonne_reponse"):
        parse_questions_csv(text)


def test_empty_cells_are_rejected() -> None:
    with pytest.raises(QuestionImportError, match="Line 2"):
        parse_questions_csv(HEADER + "Q1,A,,C,choix1,,\n")


@pytest.mark.parametrize("raw_time, message", [("abc", "whole number"), ("0", "positive")])
def test_bad_time_is_rejected(raw_time: str, message: str) -> None:
    with pytest.raises(QuestionImportError, match=message):
        parse_questions_csv(HEADER + f"Q1,A,B,C,choix1,,{raw_time}\n")


def test_header_only_file_is_rejected() -> None:
    with pytest.raises(QuestionImportError, match="did not contain any questions"):
        parse_questions_csv(HEADER)
    with pytest.raises(QuestionImportError, match="empty"):
        parse_questions_csv("\n\n")


def test_question_limit() -> None:
    rows = "".join(f"Q{n},A,B,C,choix1,,\n" for n in range(101))
    with pytest.raises(QuestionImportError, match="At most 100"):
        parse_questions_csv(HEADER + rows)
