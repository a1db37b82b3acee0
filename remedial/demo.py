from __future__ import annotations

import logging

import numpy as np

from remedial.aggregation import summarize_class
from remedial.config import DEMO_STUDENT_COUNT
from remedial.models import ClassAnalysis, SkillPerformance, StudentAnalysis
from remedial.scoring import classify_accuracy, weakest_skills

logger = logging.getLogger(__name__)

DEMO_SKILLS = {
    "M4.N.1": "Multi-digit Multiplication",
    "M4.F.2": "Equivalent Fractions",
    "M4.G.3": "Area and Perimeter",
    "M4.D.4": "Interpreting Data Charts",
    "M4.A.5": "Algebraic Patterns",
    "M4.M.6": "Measurement Conversions",
}
DEMO_MIN_ACCURACY = 30
# exclusive upper bound for rng.integers
DEMO_ACCURACY_STOP = 100


def _demo_name(index: int) -> str:
    suffix = str(index) if index > 25 else ""
    return f"Student {chr(65 + index % 26)}{suffix}"


def _demo_student(index: int, rng: np.random.Generator) -> StudentAnalysis:
    performances: list[SkillPerformance] = []
    for code, description in DEMO_SKILLS.items():
        accuracy = float(rng.integers(DEMO_MIN_ACCURACY, DEMO_ACCURACY_STOP))
        performances.append(
            SkillPerformance(
                skill_code=code,
                skill_description=description,
                marks_earned=accuracy,
                total_max_marks=100.0,
                accuracy=accuracy,
                level=classify_accuracy(accuracy),
            )
        )
    return StudentAnalysis(
        student_id=f"ST-{1000 + index}",
        student_name=_demo_name(index),
        overall_score=sum(p.accuracy for p in performances) / len(performances),
        skill_performances=performances,
        weakest_skills=weakest_skills(performances),
    )


def generate_demo_data(
    student_count: int = DEMO_STUDENT_COUNT,
    rng: np.random.Generator | None = None,
) -> ClassAnalysis:
    """Build a synthetic class over a fixed six-skill Grade 4 math taxonomy.

    Pass a seeded generator (``np.random.default_rng(seed)``) for repeatable
    output. Each skill is scored out of 100 so marks equal accuracy.
    """
    rng = rng if rng is not None else np.random.default_rng()
    students = [_demo_student(i, rng) for i in range(max(0, student_count))]
    logger.info("Generated demo class with %d students", len(students))
    return summarize_class(students, DEMO_SKILLS)
