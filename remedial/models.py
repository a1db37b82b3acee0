from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ProficiencyLevel(str, Enum):
    STRONG = "Strong"
    MODERATE = "Moderate"
    WEAK = "Weak"
    CRITICAL = "Critical"

    @property
    def rank(self) -> int:
        return _LEVEL_RANKS[self]


_LEVEL_RANKS = {
    ProficiencyLevel.CRITICAL: 0,
    ProficiencyLevel.WEAK: 1,
    ProficiencyLevel.MODERATE: 2,
    ProficiencyLevel.STRONG: 3,
}


@dataclass(frozen=True)
class QuestionMapping:
    question_no: str
    skill_code: str
    skill_description: str
    max_marks: float


@dataclass
class SkillTaxonomy:
    questions: dict[str, QuestionMapping] = field(default_factory=dict)
    skills: dict[str, str] = field(default_factory=dict)


@dataclass
class StudentRawScore:
    student_id: str
    student_name: str
    scores: dict[str, float] = field(default_factory=dict)


@dataclass
class MarkTally:
    earned: float = 0.0
    possible: float = 0.0

    def add(self, earned: float, possible: float) -> None:
        self.earned += earned
        self.possible += possible


@dataclass
class SkillPerformance:
    skill_code: str
    skill_description: str
    marks_earned: float
    total_max_marks: float
    accuracy: float
    level: ProficiencyLevel


@dataclass
class StudentAnalysis:
    student_id: str
    student_name: str
    overall_score: float
    skill_performances: list[SkillPerformance]
    weakest_skills: list[SkillPerformance]

    def performance_for(self, skill_code: str) -> SkillPerformance | None:
        for performance in self.skill_performances:
            if performance.skill_code == skill_code:
                return performance
        return None


@dataclass
class SkillStat:
    skill_code: str
    description: str
    avg_accuracy: float
    strong_count: int
    moderate_count: int
    weak_count: int
    critical_count: int

    @property
    def struggling_count(self) -> int:
        return self.weak_count + self.critical_count


@dataclass
class RemedialGroup:
    id: str
    skill_code: str
    skill_description: str
    students: list[StudentAnalysis] = field(default_factory=list)


@dataclass
class ClassAnalysis:
    students: list[StudentAnalysis]
    skill_stats: dict[str, SkillStat]
    weakest_skills_classwide: list[str]
    groups: list[RemedialGroup]


@dataclass
class TeacherProfile:
    name: str
    grade_level: str
    subject: str = "Math"


@dataclass
class LessonFlow:
    warm_up: str
    mini_lesson: str
    guided_practice: str
    independent_practice: str
    assessment: str
    exit_ticket: str


@dataclass
class RemedialPlan:
    skill_code: str
    objective: str
    target_group: str
    duration: str
    lesson_flow: LessonFlow


@dataclass
class SmartGoal:
    specific: str
    measurable: str
    achievable: str
    relevant: str
    time_bound: str
    full_statement: str


@dataclass
class GeneratedContent:
    remedial_plan: RemedialPlan | None = None
    worksheet_content: str | None = None
    smart_goal: SmartGoal | None = None
    parent_report: str | None = None
