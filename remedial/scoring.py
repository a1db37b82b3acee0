from __future__ import annotations

from remedial.config import (
    CLAMP_NEGATIVE_SCORES,
    MODERATE_THRESHOLD,
    REMEDIAL_CUTOFF,
    STRONG_THRESHOLD,
    WEAK_THRESHOLD,
)
from remedial.models import (
    MarkTally,
    ProficiencyLevel,
    SkillPerformance,
    SkillTaxonomy,
    StudentAnalysis,
    StudentRawScore,
)


def classify_accuracy(accuracy: float) -> ProficiencyLevel:
    if accuracy < WEAK_THRESHOLD:
        return ProficiencyLevel.CRITICAL
    if accuracy < MODERATE_THRESHOLD:
        return ProficiencyLevel.WEAK
    if accuracy < STRONG_THRESHOLD:
        return ProficiencyLevel.MODERATE
    return ProficiencyLevel.STRONG


def accuracy_pct(tally: MarkTally) -> float:
    if tally.possible <= 0:
        return 0.0
    return tally.earned / tally.possible * 100.0


def _clip_score(score: float, max_marks: float, clamp_negative: bool) -> float:
    clipped = min(score, max_marks)
    if clamp_negative:
        clipped = max(0.0, clipped)
    return clipped


def normalize_scores(
    raw: StudentRawScore,
    taxonomy: SkillTaxonomy,
    clamp_negative: bool = CLAMP_NEGATIVE_SCORES,
) -> tuple[dict[str, MarkTally], MarkTally]:
    """Accumulate one student's marks per skill and for the whole row.

    Every known skill gets a tally even if the student answered none of its
    questions. Scores above a question's max marks count as full marks.
    """
    tallies = {code: MarkTally() for code in taxonomy.skills}
    overall = MarkTally()
    for header, score in raw.scores.items():
        mapping = taxonomy.questions.get(header.strip())
        if mapping is None:
            continue
        earned = _clip_score(score, mapping.max_marks, clamp_negative)
        tallies[mapping.skill_code].add(earned, mapping.max_marks)
        overall.add(earned, mapping.max_marks)
    return tallies, overall


def weakest_skills(
    performances: list[SkillPerformance], cutoff: float = REMEDIAL_CUTOFF
) -> list[SkillPerformance]:
    below = [p for p in performances if p.accuracy < cutoff]
    # ties keep taxonomy order
    return sorted(below, key=lambda p: p.accuracy)


def analyze_student(
    raw: StudentRawScore,
    taxonomy: SkillTaxonomy,
    clamp_negative: bool = CLAMP_NEGATIVE_SCORES,
) -> StudentAnalysis:
    tallies, overall = normalize_scores(raw, taxonomy, clamp_negative)
    performances: list[SkillPerformance] = []
    for code, tally in tallies.items():
        accuracy = accuracy_pct(tally)
        performances.append(
            SkillPerformance(
                skill_code=code,
                skill_description=taxonomy.skills[code],
                marks_earned=tally.earned,
                total_max_marks=tally.possible,
                accuracy=accuracy,
                level=classify_accuracy(accuracy),
            )
        )

    return StudentAnalysis(
        student_id=raw.student_id,
        student_name=raw.student_name,
        overall_score=accuracy_pct(overall),
        skill_performances=performances,
        weakest_skills=weakest_skills(performances),
    )
