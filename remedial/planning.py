"""Inputs for the content-generation service and the parsers for what it returns.

parse_remedial_plan and parse_smart_goal are the entry points for service
results; the offline_* builders stand in when no service is wired in.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

from remedial.aggregation import group_skill_accuracy
from remedial.config import REMEDIAL_CUTOFF, TARGET_ACCURACY
from remedial.models import (
    GeneratedContent,
    LessonFlow,
    RemedialGroup,
    RemedialPlan,
    SmartGoal,
    StudentAnalysis,
    TeacherProfile,
)

logger = logging.getLogger(__name__)

TARGET_GROUPS = ("Individual", "Small Group", "Whole Class")
DURATIONS = ("20 min", "30 min", "45 min")
SUBJECTS = ("Math", "English", "Science", "General")

STANDARD_CONTEXTS = {
    "Math": "CCSS (Common Core State Standards)",
    "English": "CCSS (Common Core State Standards)",
    "Science": "NGSS (Next Generation Science Standards)",
}

PLAN_FIELDS = {
    "objective": "objective",
    "warmUp": "warm_up",
    "miniLesson": "mini_lesson",
    "guidedPractice": "guided_practice",
    "independentPractice": "independent_practice",
    "assessment": "assessment",
    "exitTicket": "exit_ticket",
}
SMART_GOAL_FIELDS = {
    "specific": "specific",
    "measurable": "measurable",
    "achievable": "achievable",
    "relevant": "relevant",
    "timeBound": "time_bound",
    "fullStatement": "full_statement",
}

OFFLINE_LESSON_STEPS = {
    "warm_up": "Quick retrieval round on prerequisite ideas for {desc}.",
    "mini_lesson": "Model {desc} with a worked example, thinking aloud at each step.",
    "guided_practice": "Solve three {desc} problems together, students explaining each step.",
    "independent_practice": "Five mixed-difficulty {desc} problems completed individually.",
    "assessment": "Circulate with a checklist; note who still needs support on {code}.",
    "exit_ticket": "One {desc} problem answered on a slip before leaving.",
}

OFFLINE_WORKSHEET_SECTIONS = (
    (
        "Quick Review",
        ["{code}: {desc}. Read the worked example with your teacher before starting."],
    ),
    (
        "Part A: Guided Practice",
        [
            "Work through this {desc} problem with a partner and show each step.",
            "Solve a second {desc} problem, writing one sentence for each step.",
            "Check a classmate's {desc} answer and explain any mistake.",
        ],
    ),
    (
        "Part B: Independent Practice",
        [f"Problem {n}: a Grade {{grade}} {{desc}} question, level {n}." for n in range(1, 6)],
    ),
    (
        "Part C: Challenge Problem",
        ["Write and solve a word problem that uses {desc}."],
    ),
)


class PlanFormatError(ValueError):
    """Raised when a structured lesson-plan result is missing fields."""


@dataclass
class GenerationRequest:
    skill_code: str
    skill_description: str
    profile: TeacherProfile
    target_group: str = "Small Group"
    duration: str = "30 min"
    current_accuracy: float = 0.0
    target_accuracy: float = TARGET_ACCURACY

    @property
    def standard(self) -> str:
        return standard_context(self.profile.subject)


@dataclass
class ParentReportRequest:
    student_name: str
    profile: TeacherProfile
    weak_skills: list[tuple[str, str]] = field(default_factory=list)


def standard_context(subject: str) -> str:
    return STANDARD_CONTEXTS.get(subject, "Standard Curriculum")


def build_group_request(
    group: RemedialGroup,
    profile: TeacherProfile,
    target_group: str = "Small Group",
    duration: str = "30 min",
) -> GenerationRequest:
    if target_group not in TARGET_GROUPS:
        raise ValueError(f"Unknown target group: {target_group}")
    if duration not in DURATIONS:
        raise ValueError(f"Unknown duration: {duration}")
    return GenerationRequest(
        skill_code=group.skill_code,
        skill_description=group.skill_description,
        profile=profile,
        target_group=target_group,
        duration=duration,
        current_accuracy=group_skill_accuracy(group),
    )


def build_parent_request(student: StudentAnalysis, profile: TeacherProfile) -> ParentReportRequest:
    weak = [
        (perf.skill_code, perf.skill_description)
        for perf in student.skill_performances
        if perf.accuracy < REMEDIAL_CUTOFF
    ]
    return ParentReportRequest(student_name=student.student_name, profile=profile, weak_skills=weak)


def _load_payload(payload: Mapping[str, Any] | str | None) -> dict[str, Any]:
    if payload is None:
        return {}
    if isinstance(payload, str):
        try:
            loaded = json.loads(payload or "{}")
        except json.JSONDecodeError:
            return {}
        return loaded if isinstance(loaded, dict) else {}
    return dict(payload)


def parse_remedial_plan(
    payload: Mapping[str, Any] | str | None, request: GenerationRequest
) -> RemedialPlan:
    data = _load_payload(payload)
    missing = [key for key in PLAN_FIELDS if not str(data.get(key) or "").strip()]
    if missing:
        raise PlanFormatError(f"Lesson plan result is missing: {', '.join(missing)}")
    values = {name: str(data[key]).strip() for key, name in PLAN_FIELDS.items()}
    return RemedialPlan(
        skill_code=request.skill_code,
        objective=values.pop("objective"),
        target_group=request.target_group,
        duration=request.duration,
        lesson_flow=LessonFlow(**values),
    )


def fallback_smart_goal(skill: str, target_accuracy: float = TARGET_ACCURACY) -> SmartGoal:
    target = f"{target_accuracy:.0f}%"
    return SmartGoal(
        specific=f"Improve {skill}",
        measurable=f"{target} accuracy",
        achievable="With practice",
        relevant="Core curriculum",
        time_bound="2 weeks",
        full_statement=f"The student will improve proficiency in {skill} to {target} within 2 weeks.",
    )


def parse_smart_goal(
    payload: Mapping[str, Any] | str | None, request: GenerationRequest
) -> SmartGoal:
    data = _load_payload(payload)
    if not all(str(data.get(key) or "").strip() for key in SMART_GOAL_FIELDS):
        logger.warning("SMART goal result for %s incomplete, using fallback", request.skill_code)
        return fallback_smart_goal(request.skill_code, request.target_accuracy)
    return SmartGoal(**{name: str(data[key]).strip() for key, name in SMART_GOAL_FIELDS.items()})


def offline_worksheet(request: GenerationRequest) -> str:
    desc = request.skill_description or request.skill_code
    values = {"code": request.skill_code, "desc": desc, "grade": request.profile.grade_level}
    lines = [f"Focus standard: {request.skill_code}: {desc} ({request.standard})"]
    for title, items in OFFLINE_WORKSHEET_SECTIONS:
        lines.extend(["", f"## {title}"])
        lines.extend(f"{n}. {item.format(**values)}" for n, item in enumerate(items, start=1))
    lines.extend(["", "---", "## Answer Key", "Answers are checked with the teacher during review."])
    return "\n".join(lines)


def offline_content(request: GenerationRequest) -> GeneratedContent:
    """Template lesson plan, worksheet and goal for when no generation service is wired in."""
    desc = request.skill_description or request.skill_code
    steps = {
        name: template.format(desc=desc, code=request.skill_code)
        for name, template in OFFLINE_LESSON_STEPS.items()
    }
    plan = RemedialPlan(
        skill_code=request.skill_code,
        objective=(
            f"Grade {request.profile.grade_level} students will raise accuracy on "
            f"{request.skill_code} ({desc}) from {request.current_accuracy:.0f}% "
            f"toward {request.target_accuracy:.0f}%."
        ),
        target_group=request.target_group,
        duration=request.duration,
        lesson_flow=LessonFlow(**steps),
    )
    return GeneratedContent(
        remedial_plan=plan,
        worksheet_content=offline_worksheet(request),
        smart_goal=fallback_smart_goal(request.skill_code, request.target_accuracy),
    )


def offline_parent_note(request: ParentReportRequest) -> str:
    profile = request.profile
    lines = [
        f"Dear family of {request.student_name},",
        "",
        f"Here is a short update on {profile.subject} in Grade {profile.grade_level}.",
    ]
    if request.weak_skills:
        lines.append("We will be giving extra support with:")
        lines.extend(f"- {desc} ({code})" for code, desc in request.weak_skills)
        lines.append("These skills are part of our small-group remedial sessions.")
    else:
        lines.append("Your child is on track across every skill we assessed.")
    lines.extend(["", "Kind regards,", profile.name])
    return "\n".join(lines)


def parent_report_content(request: ParentReportRequest) -> GeneratedContent:
    return GeneratedContent(parent_report=offline_parent_note(request))
