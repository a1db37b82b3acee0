from __future__ import annotations

from remedial.aggregation import class_average, groups_by_size, needs_remediation
from remedial.models import ClassAnalysis


def companion_response(user_prompt: str, analysis: ClassAnalysis) -> str:
    prompt = (user_prompt or "").lower()
    stats = analysis.skill_stats
    weakest = [
        f"{code} ({stats[code].avg_accuracy:.1f}%)"
        for code in analysis.weakest_skills_classwide
        if code in stats
    ]
    weakest_text = ", ".join(weakest) if weakest else "no assessed skills"

    if not analysis.students:
        return "No students were analyzed. Upload a results workbook or load the demo class first."

    if "group" in prompt or "plan" in prompt:
        groups = groups_by_size(analysis.groups)
        if not groups:
            return "Every student is at or above 70% on every skill, so no remedial groups are needed."
        largest = groups[0]
        return (
            f"There are {len(groups)} remedial groups. Start with {largest.skill_code} "
            f"({largest.skill_description}): {len(largest.students)} students share it as their weakest skill."
        )
    if "weak" in prompt or "skill" in prompt:
        return f"The class-wide weakest skills are {weakest_text}. Target these in whole-class review."
    if "student" in prompt or "report" in prompt:
        flagged = [s.student_name for s in analysis.students if needs_remediation(s)]
        if not flagged:
            return "All students have an overall score of 70% or higher."
        shown = ", ".join(flagged[:5])
        more = f" and {len(flagged) - 5} more" if len(flagged) > 5 else ""
        return f"{len(flagged)} students are below 70% overall: {shown}{more}."
    return (
        f"Class average is {class_average(analysis.students):.1f}% across {len(analysis.students)} students. "
        f"Highest-priority skills: {weakest_text}."
    )
