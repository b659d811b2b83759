"""Import questions from a CSV file.

Expected header (case-insensitive, extra columns ignored)::

    question,choix1,choix2,choix3,bonne_reponse[,catégorie][,temps]

``bonne_reponse`` must name the correct column exactly (``choix1``,
``choix2`` or ``choix3``). ``catégorie``/``categorie``/``category`` and
``temps``/``time`` (seconds) are optional. Blank rows are skipped.

Example::

    question,choix1,choix2,choix3,bonne_reponse,catégorie,temps
    "Where do depreciation charges go?","Assets","Liabilities","Income statement","choix3","Balance",45
"""

from __future__ import annotations

import csv
from dataclasses import dataclass
import io
import logging
from pathlib import Path

from proctor_app.constants.assessment_constants import IMPORT_MAX_BYTES, IMPORT_MAX_QUESTIONS
from proctor_app.core.errors import QuestionImportError
from proctor_app.core.models import Question, validate_question

logger = logging.getLogger(__name__)

_REQUIRED_COLUMNS = ("question", "choix1", "choix2", "choix3", "bonne_reponse")
_COLUMN_ALIASES = {
    "bonne réponse": "bonne_reponse",
    "bonne_réponse": "bonne_reponse",
    "catégorie": "category",
    "categorie": "category",
    "category": "category",
    "temps": "time",
    "time": "time",
}
_CORRECT_VALUES = {"choix1": 0, "choix2": 1, "choix3": 2}


@dataclass(slots=True)
class ImportedQuestions:
    """Container for the questions parsed from one file."""

    source_path: Path | None
    questions: list[Question]


def load_questions_from_file(file_path: Path) -> ImportedQuestions:
    size = file_path.stat().st_size
    if size > IMPORT_MAX_BYTES:
        raise QuestionImportError("File is too large (maximum 5 MB).")
    text = file_path.read_text(encoding="utf-8-sig")
    questions = parse_questions_csv(text)
    logger.info("Imported %d questions from %s", len(questions), file_path)
    return ImportedQuestions(source_path=file_path, questions=questions)


def parse_questions_csv(text: str) -> list[Question]:
    reader = csv.reader(io.StringIO(text))
    rows = [(line_number, row) for line_number, row in enumerate(reader, start=1) if any(cell.strip() for cell in row)]
    if not rows:
        raise QuestionImportError("The file is empty.")

    _, header = rows[0]
    columns = _map_header(header)

    questions: list[Question] = []
    for line_number, row in rows[1:]:
        questions.append(_parse_row(row, columns, line_number))

    if not questions:
        raise QuestionImportError("The file did not contain any questions.")
    if len(questions) > IMPORT_MAX_QUESTIONS:
        raise QuestionImportError(
            f"At most {IMPORT_MAX_QUESTIONS} questions per import; the file contains {len(questions)}."
        )
    return questions


def _map_header(header: list[str]) -> dict[str, int]:
    columns: dict[str, int] = {}
    for index, raw_name in enumerate(header):
        name = raw_name.strip().lower()
        name = _COLUMN_ALIASES.get(name, name)
        columns.setdefault(name, index)
    missing = [name for name in _REQUIRED_COLUMNS if name not in columns]
    if missing:
        raise QuestionImportError(f"Missing required column(s): {', '.join(missing)}.")
    return columns


def _cell(row: list[str], columns: dict[str, int], name: str) -> str:
    index = columns.get(name)
    if index is None or index >= len(row):
        return ""
    return row[index].strip()


def _parse_row(row: list[str], columns: dict[str, int], line_number: int) -> Question:
    values = {name: _cell(row, columns, name) for name in _REQUIRED_COLUMNS}
    if any(not value for value in values.values()):
        raise QuestionImportError(
            f"Line {line_number}: question, choix1, choix2, choix3 and bonne_reponse are required."
        )
    correct = _CORRECT_VALUES.get(values["bonne_reponse"].lower())
    if correct is None:
        raise QuestionImportError(
            f'Line {line_number}: bonne_reponse must be "choix1", "choix2" or "choix3" '
            f'(found "{values["bonne_reponse"]}").'
        )

    time_per_question: int | None = None
    raw_time = _cell(row, columns, "time")
    if raw_time:
        try:
            time_per_question = int(raw_time)
        except ValueError as exc:
            raise QuestionImportError(f"Line {line_number}: time must be a whole number of seconds.") from exc

    question = Question(
        id="",
        prompt=values["question"],
        choices=[values["choix1"], values["choix2"], values["choix3"]],
        correct_answer=correct,
        category=_cell(row, columns, "category") or None,
        time_per_question=time_per_question,
    )
    try:
        validate_question(question)
    except ValueError as exc:
        raise QuestionImportError(f"Line {line_number}: {exc}") from exc
    return question
