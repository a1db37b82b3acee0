from __future__ import annotations

import logging
from typing import Iterable, Mapping

from remedial.config import CLAMP_NEGATIVE_SCORES, CLASSWIDE_WEAKEST_LIMIT, REMEDIAL_CUTOFF
from remedial.models import (
    ClassAnalysis,
    ProficiencyLevel,
    RemedialGroup,
    SkillStat,
    SkillTaxonomy,
    StudentAnalysis,
    StudentRawScore,
)
from remedial.scoring import analyze_student, classify_accuracy

logger = logging.getLogger(__name__)


def _count_levels(levels: Iterable[ProficiencyLevel]) -> dict[ProficiencyLevel, int]:
    counts = {level: 0 for level in ProficiencyLevel}
    for level in levels:
        counts[level] += 1
    return counts


def build_skill_stats(
    students: list[StudentAnalysis], skills: Mapping[str, str]
) -> dict[str, SkillStat]:
    stats: dict[str, SkillStat] = {}
    for code, description in skills.items():
        performances = [
            perf
            for perf in (student.performance_for(code) for student in students)
            if perf is not None
        ]
        avg = sum(p.accuracy for p in performances) / len(performances) if performances else 0.0
        # counts come from the stored level, never re-derived from accuracy
        counts = _count_levels(p.level for p in performances)
        stats[code] = SkillStat(
            skill_code=code,
            description=description,
            avg_accuracy=avg,
            strong_count=counts[ProficiencyLevel.STRONG],
            moderate_count=counts[ProficiencyLevel.MODERATE],
            weak_count=counts[ProficiencyLevel.WEAK],
            critical_count=counts[ProficiencyLevel.CRITICAL],
        )
    return stats


def rank_weakest_skills(
    skill_stats: Mapping[str, SkillStat], limit: int = CLASSWIDE_WEAKEST_LIMIT
) -> list[str]:
    ranked = sorted(skill_stats.values(), key=lambda s: s.avg_accuracy)
    return [stat.skill_code for stat in ranked[:limit]]


def build_remedial_groups(students: Iterable[StudentAnalysis]) -> list[RemedialGroup]:
    """Place each struggling student in the group for their single worst skill."""
    groups: dict[str, RemedialGroup] = {}
    for student in students:
        if not student.weakest_skills:
            continue
        primary = student.weakest_skills[0]
        group = groups.get(primary.skill_code)
        if group is None:
            group = RemedialGroup(
                id=f"group-{primary.skill_code}",
                skill_code=primary.skill_code,
                skill_description=primary.skill_description,
            )
            groups[primary.skill_code] = group
        group.students.append(student)
    return list(groups.values())


def summarize_class(
    students: list[StudentAnalysis], skills: Mapping[str, str]
) -> ClassAnalysis:
    skill_stats = build_skill_stats(students, skills)
    return ClassAnalysis(
        students=students,
        skill_stats=skill_stats,
        weakest_skills_classwide=rank_weakest_skills(skill_stats),
        groups=build_remedial_groups(students),
    )


def analyze_class(
    taxonomy: SkillTaxonomy,
    raw_scores: Iterable[StudentRawScore],
    clamp_negative: bool = CLAMP_NEGATIVE_SCORES,
) -> ClassAnalysis:
    students = [analyze_student(raw, taxonomy, clamp_negative) for raw in raw_scores]
    analysis = summarize_class(students, taxonomy.skills)
    logger.info(
        "Analyzed %d students over %d skills into %d remedial groups",
        len(analysis.students),
        len(analysis.skill_stats),
        len(analysis.groups),
    )
    return analysis


def class_average(students: list[StudentAnalysis]) -> float:
    if not students:
        return 0.0
    return sum(s.overall_score for s in students) / len(students)


def overall_level_counts(students: Iterable[StudentAnalysis]) -> dict[ProficiencyLevel, int]:
    return _count_levels(classify_accuracy(s.overall_score) for s in students)


def needs_remediation(student: StudentAnalysis) -> bool:
    return student.overall_score < REMEDIAL_CUTOFF


def remediation_status(student: StudentAnalysis) -> str:
    return "Remedial" if needs_remediation(student) else "On Track"


def groups_by_size(groups: list[RemedialGroup]) -> list[RemedialGroup]:
    return sorted(groups, key=lambda g: len(g.students), reverse=True)


def group_skill_accuracy(group: RemedialGroup) -> float:
    """Mean accuracy of the group's members on the skill the group targets."""
    values = [
        perf.accuracy
        for perf in (student.performance_for(group.skill_code) for student in group.students)
        if perf is not None
    ]
    return sum(values) / len(values) if values else 0.0
