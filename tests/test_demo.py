from __future__ import annotations

import numpy as np

from remedial.demo import DEMO_ACCURACY_STOP, DEMO_MIN_ACCURACY, DEMO_SKILLS, generate_demo_data


def test_seeded_demo_is_repeatable():
    first = generate_demo_data(12, rng=np.random.default_rng(7))
    second = generate_demo_data(12, rng=np.random.default_rng(7))
    assert first == second


def test_demo_shapes_match_real_pipeline():
    analysis = generate_demo_data(30, rng=np.random.default_rng(1))
    assert len(analysis.students) == 30
    assert list(analysis.skill_stats) == list(DEMO_SKILLS)
    assert len(analysis.weakest_skills_classwide) == 3
    for student in analysis.students:
        assert len(student.skill_performances) == 6
        assert all(30 <= p.accuracy <= 99 for p in student.skill_performances)
        assert all(p.accuracy < 70 for p in student.weakest_skills)
    for stat in analysis.skill_stats.values():
        total = stat.strong_count + stat.moderate_count + stat.weak_count + stat.critical_count
        assert total == 30


def test_demo_names_and_ids():
    analysis = generate_demo_data(28, rng=np.random.default_rng(3))
    assert analysis.students[0].student_id == "ST-1000"
    assert analysis.students[0].student_name == "Student A"
    assert analysis.students[26].student_name == "Student A26"


def test_empty_demo_class():
    analysis = generate_demo_data(0, rng=np.random.default_rng(0))
    assert analysis.students == []
    assert analysis.groups == []


def test_demo_accuracy_stop_is_exclusive():
    analysis = generate_demo_data(200, rng=np.random.default_rng(5))
    values = {p.accuracy for s in analysis.students for p in s.skill_performances}
    assert min(values) >= DEMO_MIN_ACCURACY
    assert max(values) < DEMO_ACCURACY_STOP
