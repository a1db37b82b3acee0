from __future__ import annotations

import pandas as pd

from remedial.aggregation import class_average, overall_level_counts, remediation_status
from remedial.models import ClassAnalysis

SKILL_REPORT_COLUMNS = ["Skill Code", "Description", "Avg Accuracy", "Strong", "Moderate", "Weak", "Critical"]
ROSTER_COLUMNS = ["Student Name", "Student ID", "Overall Score", "Primary Need", "Status"]


def skill_stats_frame(analysis: ClassAnalysis) -> pd.DataFrame:
    rows = [
        {
            "Skill Code": stat.skill_code,
            "Description": stat.description,
            "Avg Accuracy": round(stat.avg_accuracy, 2),
            "Strong": stat.strong_count,
            "Moderate": stat.moderate_count,
            "Weak": stat.weak_count,
            "Critical": stat.critical_count,
        }
        for stat in analysis.skill_stats.values()
    ]
    return pd.DataFrame(rows, columns=SKILL_REPORT_COLUMNS)


def student_roster_frame(analysis: ClassAnalysis) -> pd.DataFrame:
    rows = [
        {
            "Student Name": student.student_name,
            "Student ID": student.student_id,
            "Overall Score": round(student.overall_score, 1),
            "Primary Need": student.weakest_skills[0].skill_code if student.weakest_skills else "None",
            "Status": remediation_status(student),
        }
        for student in analysis.students
    ]
    return pd.DataFrame(rows, columns=ROSTER_COLUMNS)


def skills_report_csv(analysis: ClassAnalysis) -> str:
    return skill_stats_frame(analysis).to_csv(index=False, float_format="%.2f")


def student_roster_csv(analysis: ClassAnalysis) -> str:
    return student_roster_frame(analysis).to_csv(index=False, float_format="%.1f")


def export_payload(analysis: ClassAnalysis) -> dict:
    return {
        "summary": {
            "total_students": len(analysis.students),
            "class_average": round(class_average(analysis.students), 2),
            "overall_levels": {
                level.value: count for level, count in overall_level_counts(analysis.students).items()
            },
            "weakest_skills_classwide": list(analysis.weakest_skills_classwide),
        },
        "skills": [
            {
                "skill_code": stat.skill_code,
                "description": stat.description,
                "avg_accuracy": round(stat.avg_accuracy, 2),
                "strong": stat.strong_count,
                "moderate": stat.moderate_count,
                "weak": stat.weak_count,
                "critical": stat.critical_count,
            }
            for stat in analysis.skill_stats.values()
        ],
        "students": [
            {
                "student_id": s.student_id,
                "student_name": s.student_name,
                "overall_score": round(s.overall_score, 2),
                "skills": {
                    p.skill_code: {
                        "earned": p.marks_earned,
                        "possible": p.total_max_marks,
                        "accuracy": round(p.accuracy, 2),
                        "level": p.level.value,
                    }
                    for p in s.skill_performances
                },
                "weakest_skills": [p.skill_code for p in s.weakest_skills],
            }
            for s in analysis.students
        ],
        "groups": [
            {
                "id": g.id,
                "skill_code": g.skill_code,
                "skill_description": g.skill_description,
                "students": [s.student_id for s in g.students],
            }
            for g in analysis.groups
        ],
    }
