from __future__ import annotations

import numpy as np

from remedial.companion import companion_response
from remedial.demo import generate_demo_data
from remedial.models import ClassAnalysis


def test_group_question_names_largest_group():
    analysis = generate_demo_data(20, rng=np.random.default_rng(11))
    reply = companion_response("Which group should I plan for?", analysis)
    largest = max(analysis.groups, key=lambda g: len(g.students))
    assert str(len(largest.students)) in reply


def test_weak_skill_question_lists_classwide_skills():
    analysis = generate_demo_data(20, rng=np.random.default_rng(11))
    reply = companion_response("What are the weakest skills?", analysis)
    for code in analysis.weakest_skills_classwide:
        assert code in reply


def test_default_summary_and_empty_class():
    analysis = generate_demo_data(5, rng=np.random.default_rng(2))
    assert "Class average" in companion_response("", analysis)
    empty = ClassAnalysis(students=[], skill_stats={}, weakest_skills_classwide=[], groups=[])
    assert "No students" in companion_response("hello", empty)
