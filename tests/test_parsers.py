from __future__ import annotations

from io import BytesIO

import pandas as pd
import pytest

from remedial.parsers import (
    MISSING_SHEETS_MESSAGE,
    FormatError,
    analyze_sheets,
    build_template_workbook,
    parse_workbook,
)

MAPPING = [
    {"Question No": "Q1", "Skill Code": "A", "Skill Description": "Adding", "Max Marks": 5},
    {"Question No": "Q2", "Skill Code": "B", "Skill Description": "Bonds", "Max Marks": 5},
]


def test_missing_sheet_raises_format_error():
    with pytest.raises(FormatError) as exc_info:
        analyze_sheets({"QuestionsMapping": MAPPING, "Results": []})
    assert str(exc_info.value) == (
        "Invalid File: Must contain 'QuestionsMapping' and 'StudentResults' sheets."
    )
    assert str(exc_info.value) == MISSING_SHEETS_MESSAGE


def test_end_to_end_two_skill_scenario():
    analysis = analyze_sheets(
        {
            "QuestionsMapping": MAPPING,
            "StudentResults": [{"Student Name": "Ana", "Student ID": "1", "Q1": 5, "Q2": 0}],
        }
    )
    student = analysis.students[0]
    assert student.overall_score == 50.0
    assert [p.skill_code for p in student.weakest_skills] == ["B"]
    assert [g.id for g in analysis.groups] == ["group-B"]
    assert analysis.groups[0].students == [student]


def test_excluded_rows_do_not_touch_aggregates():
    results = [
        {"Student Name": "Ana", "Student ID": "1", "Q1": 5, "Q2": 5},
        {"Student Name": None, "Student ID": None, "Q1": 0, "Q2": 0},
    ]
    analysis = analyze_sheets({"QuestionsMapping": MAPPING, "StudentResults": results})
    assert [s.student_name for s in analysis.students] == ["Ana"]
    for stat in analysis.skill_stats.values():
        assert stat.avg_accuracy == 100.0
        assert stat.strong_count == 1
        assert stat.critical_count == 0
    assert analysis.groups == []


def test_dataframe_sheets_with_blank_cells():
    results = pd.DataFrame(
        [
            {"Student Name": "Ana", "Student ID": 1, "Q1": 4, "Q2": None},
            {"Student Name": "Ben", "Student ID": 2, "Q1": None, "Q2": 1},
        ]
    )
    analysis = analyze_sheets(
        {"QuestionsMapping": pd.DataFrame(MAPPING), "StudentResults": results}
    )
    ana, ben = analysis.students
    assert ana.student_id == "1"
    assert ana.performance_for("B").total_max_marks == 0
    assert ben.performance_for("A").total_max_marks == 0
    assert ben.performance_for("B").accuracy == pytest.approx(20.0)


def test_template_workbook_round_trip():
    analysis = parse_workbook(build_template_workbook())
    assert [s.student_name for s in analysis.students] == ["Student A", "Student B", "Student C"]
    assert list(analysis.skill_stats) == ["M4.N.1", "M4.F.2", "M4.G.3"]
    student_b = analysis.students[1]
    assert student_b.student_id == "1002"
    assert student_b.overall_score == pytest.approx(52.0)
    assert [p.skill_code for p in student_b.weakest_skills] == ["M4.F.2", "M4.G.3", "M4.N.1"]
    assert [g.id for g in analysis.groups] == ["group-M4.F.2"]


def test_workbook_without_required_sheets():
    output = BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        pd.DataFrame(MAPPING).to_excel(writer, index=False, sheet_name="QuestionsMapping")
        pd.DataFrame([{"Student Name": "Ana"}]).to_excel(writer, index=False, sheet_name="Sheet2")
    with pytest.raises(FormatError, match="Must contain"):
        parse_workbook(output.getvalue())


def test_unreadable_upload_is_format_error():
    with pytest.raises(FormatError):
        parse_workbook(b"this is not a spreadsheet")


def test_parse_is_idempotent():
    payload = build_template_workbook()
    assert parse_workbook(payload) == parse_workbook(BytesIO(payload))
