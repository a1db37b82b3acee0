from __future__ import annotations

import math

from remedial.taxonomy import build_taxonomy, read_student_rows, resolve_columns, to_number


def test_aliases_resolve_to_canonical_fields():
    rows = [
        {"QuestionNo": " Q1 ", "SkillCode": "A ", "SkillDescription": " Adding ", "MaxMarks": "5"},
        {"QuestionNo": "Q2", "SkillCode": "B", "SkillDescription": "Bonds", "MaxMarks": 4},
    ]
    taxonomy = build_taxonomy(rows)
    assert list(taxonomy.questions) == ["Q1", "Q2"]
    assert taxonomy.questions["Q1"].skill_code == "A"
    assert taxonomy.questions["Q1"].max_marks == 5.0
    assert taxonomy.skills == {"A": "Adding", "B": "Bonds"}


def test_header_matching_ignores_case_and_spacing():
    columns = ["question no", "SKILL_CODE", "Skill Description", "max marks"]
    resolved = resolve_columns(columns, ["question_no", "skill_code", "skill_description", "max_marks"])
    assert resolved == {
        "question_no": "question no",
        "skill_code": "SKILL_CODE",
        "skill_description": "Skill Description",
        "max_marks": "max marks",
    }


def test_exact_alias_preferred_over_loose_match():
    resolved = resolve_columns(["question no", "Question No"], ["question_no"])
    assert resolved["question_no"] == "Question No"


def test_invalid_mapping_rows_are_skipped():
    rows = [
        {"Question No": "", "Skill Code": "A", "Skill Description": "x", "Max Marks": 5},
        {"Question No": "Q2", "Skill Code": "  ", "Skill Description": "x", "Max Marks": 5},
        {"Question No": "Q3", "Skill Code": "C", "Skill Description": "x", "Max Marks": "five"},
        {"Question No": "Q4", "Skill Code": "D", "Skill Description": "x", "Max Marks": float("nan")},
        {"Question No": "Q5", "Skill Code": "E", "Skill Description": "Ok", "Max Marks": 2},
    ]
    taxonomy = build_taxonomy(rows)
    assert list(taxonomy.questions) == ["Q5"]
    assert taxonomy.skills == {"E": "Ok"}


def test_duplicate_question_overwrites_and_description_updates():
    rows = [
        {"Question No": "Q1", "Skill Code": "A", "Skill Description": "Old", "Max Marks": 5},
        {"Question No": "Q1", "Skill Code": "A", "Skill Description": "New", "Max Marks": 10},
    ]
    taxonomy = build_taxonomy(rows)
    assert taxonomy.questions["Q1"].max_marks == 10.0
    assert taxonomy.skills["A"] == "New"


def test_numeric_question_numbers_match_numeric_headers():
    taxonomy = build_taxonomy(
        [{"Question No": 1.0, "Skill Code": "A", "Skill Description": "x", "Max Marks": 5}]
    )
    students = read_student_rows([{"Student Name": "Ana", "Student ID": 7, 1: 3}], taxonomy)
    assert students[0].student_id == "7"
    assert students[0].scores == {"1": 3.0}


def test_student_rows_skip_bad_cells_and_drop_unnamed_rows():
    taxonomy = build_taxonomy(
        [
            {"Question No": "Q1", "Skill Code": "A", "Skill Description": "x", "Max Marks": 5},
            {"Question No": "Q2", "Skill Code": "B", "Skill Description": "y", "Max Marks": 5},
        ]
    )
    rows = [
        {"Student Name": "Ana", "Student ID": "1", "Q1": "4", "Q2": "absent", "Q9": 3},
        {"Student Name": None, "Student ID": None, "Q1": 5, "Q2": 5},
        {"Student Name": "Ben", "Student ID": "", "Q1": 5},
        {"Student Name": "Cy", "Student ID": "3", "Q1": None, "Q2": 2},
    ]
    students = read_student_rows(rows, taxonomy)
    assert [s.student_name for s in students] == ["Ana", "Cy"]
    assert students[0].scores == {"Q1": 4.0}
    assert students[1].scores == {"Q2": 2.0}


def test_to_number_rejects_non_finite_values():
    assert to_number("3.5") == 3.5
    assert to_number("") is None
    assert to_number(float("inf")) is None
    assert to_number(True) is None
    assert to_number(math.nan) is None


def test_student_header_aliases():
    taxonomy = build_taxonomy(
        [{"Question No": "Q1", "Skill Code": "A", "Skill Description": "x", "Max Marks": 5}]
    )
    students = read_student_rows([{"StudentName": " Dee ", "StudentID": "4", "Q1": 2}], taxonomy)
    assert students[0].student_name == "Dee"
    assert students[0].student_id == "4"


def test_headers_trimming_to_same_question_both_kept():
    taxonomy = build_taxonomy(
        [{"Question No": "Q2", "Skill Code": "B", "Skill Description": "x", "Max Marks": 5}]
    )
    students = read_student_rows([{"Student Name": "Ana", "Student ID": "1", "Q2": 5, "Q2 ": 0}], taxonomy)
    assert students[0].scores == {"Q2": 5.0, "Q2 ": 0.0}
