from __future__ import annotations

import logging
import math
import re
from typing import Any, Iterable, Mapping

from remedial.models import QuestionMapping, SkillTaxonomy, StudentRawScore

logger = logging.getLogger(__name__)

FIELD_ALIASES = {
    "question_no": ("Question No", "QuestionNo", "q_no"),
    "skill_code": ("Skill Code", "SkillCode"),
    "skill_description": ("Skill Description", "SkillDescription"),
    "max_marks": ("Max Marks", "MaxMarks"),
    "student_name": ("Student Name", "StudentName"),
    "student_id": ("Student ID", "StudentID"),
}

MAPPING_FIELDS = ("question_no", "skill_code", "skill_description", "max_marks")
STUDENT_FIELDS = ("student_name", "student_id")


def _header_key(header: Any) -> str:
    return re.sub(r"[^a-z0-9]", "", str(header).lower())


def clean_text(value: Any) -> str:
    """Render a spreadsheet cell as trimmed text; blanks and NaN become ''."""
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value).strip()


def to_number(value: Any) -> float | None:
    """Parse a cell as a finite number, or None when it is not one."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def resolve_columns(columns: Iterable[Any], fields: Iterable[str]) -> dict[str, Any]:
    """Map each logical field to the first header matching one of its aliases.

    Exact header text wins; otherwise headers are compared ignoring case,
    whitespace and punctuation. Fields with no matching header are omitted.
    """
    columns = list(columns)
    by_key: dict[str, Any] = {}
    for column in columns:
        by_key.setdefault(_header_key(column), column)

    resolved: dict[str, Any] = {}
    for name in fields:
        aliases = FIELD_ALIASES[name]
        exact = next((alias for alias in aliases if alias in columns), None)
        if exact is not None:
            resolved[name] = exact
            continue
        for alias in aliases:
            column = by_key.get(_header_key(alias))
            if column is not None:
                resolved[name] = column
                break
    return resolved


def _ordered_columns(rows: list[Mapping[str, Any]]) -> list[Any]:
    seen: dict[Any, None] = {}
    for row in rows:
        for key in row.keys():
            seen.setdefault(key, None)
    return list(seen)


def build_taxonomy(rows: Iterable[Mapping[str, Any]]) -> SkillTaxonomy:
    rows = list(rows)
    columns = resolve_columns(_ordered_columns(rows), MAPPING_FIELDS)
    taxonomy = SkillTaxonomy()
    skipped = 0

    for row in rows:
        question_no = clean_text(row.get(columns.get("question_no")))
        skill_code = clean_text(row.get(columns.get("skill_code")))
        description = clean_text(row.get(columns.get("skill_description")))
        max_marks = to_number(row.get(columns.get("max_marks")))

        if not question_no or not skill_code or max_marks is None or max_marks <= 0:
            skipped += 1
            continue

        taxonomy.questions[question_no] = QuestionMapping(
            question_no=question_no,
            skill_code=skill_code,
            skill_description=description,
            max_marks=max_marks,
        )
        taxonomy.skills[skill_code] = description

    if skipped:
        logger.debug("Skipped %d unusable question mapping rows", skipped)
    logger.info(
        "Built skill taxonomy: %d questions across %d skills",
        len(taxonomy.questions),
        len(taxonomy.skills),
    )
    return taxonomy


def read_student_rows(
    rows: Iterable[Mapping[str, Any]], taxonomy: SkillTaxonomy
) -> list[StudentRawScore]:
    """Turn result rows into raw score records, in input order.

    Rows without both a student name and a student ID are dropped. Cells
    that are not mapped questions or do not hold a number are ignored.
    Scores stay keyed by their column header.
    """
    rows = list(rows)
    columns = resolve_columns(_ordered_columns(rows), STUDENT_FIELDS)
    students: list[StudentRawScore] = []

    for index, row in enumerate(rows):
        name = clean_text(row.get(columns.get("student_name")))
        student_id = clean_text(row.get(columns.get("student_id")))
        if not name or not student_id:
            logger.debug("Dropping result row %d: missing student name or ID", index)
            continue

        scores: dict[str, float] = {}
        for key, value in row.items():
            if clean_text(key) not in taxonomy.questions:
                continue
            score = to_number(value)
            if score is None:
                continue
            # keyed by header so "Q2" and "Q2 " both count
            scores[key if isinstance(key, str) else clean_text(key)] = score

        students.append(StudentRawScore(student_id=student_id, student_name=name, scores=scores))

    return students
