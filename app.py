from __future__ import annotations

import json

import pandas as pd
import streamlit as st

from remedial.aggregation import class_average, groups_by_size, overall_level_counts
from remedial.companion import companion_response
from remedial.demo import generate_demo_data
from remedial.exports import (
    export_payload,
    skill_stats_frame,
    skills_report_csv,
    student_roster_csv,
    student_roster_frame,
)
from remedial.logging_config import configure_logging
from remedial.models import ClassAnalysis, TeacherProfile
from remedial.parsers import FormatError, build_template_workbook, parse_workbook
from remedial.planning import (
    DURATIONS,
    SUBJECTS,
    TARGET_GROUPS,
    build_group_request,
    build_parent_request,
    offline_content,
    parent_report_content,
    standard_context,
)

APP_TITLE = "Remedial Insights"
APP_SUBTITLE = "Turn assessment spreadsheets into skill-level intervention groups"
XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
PAGES = ["Upload", "Dashboard", "Remedial Planner", "Reports"]


def as_pct_label(value: float) -> str:
    return f"{value:.1f}%"


def ensure_state():
    if "analysis" not in st.session_state:
        st.session_state["analysis"] = None
    if "profile" not in st.session_state:
        st.session_state["profile"] = None
    if "generated" not in st.session_state:
        st.session_state["generated"] = {}


def set_analysis(analysis: ClassAnalysis):
    # a new upload replaces the previous class and anything generated for it
    st.session_state["analysis"] = analysis
    st.session_state["generated"] = {}


def inject_styles():
    st.markdown(
        """
        <style>
        .hero-wrap {
            background: linear-gradient(120deg, #1e3a8a 0%, #4f46e5 60%, #0f172a 100%);
            border-radius: 18px;
            padding: 24px;
            color: #f8fafc;
            margin-bottom: 18px;
        }
        .hero-title { font-size: 2rem; font-weight: 700; margin-bottom: 0.3rem; }
        .hero-sub { opacity: 0.9; font-size: 1rem; }
        </style>
        """,
        unsafe_allow_html=True,
    )


def render_onboarding():
    st.markdown(
        f"""
        <div class="hero-wrap">
          <div class="hero-title">{APP_TITLE}</div>
          <div class="hero-sub">{APP_SUBTITLE}</div>
        </div>
        """,
        unsafe_allow_html=True,
    )
    with st.form("onboarding_form"):
        name = st.text_input("Your name", value="")
        grade_level = st.selectbox("Grade level", [str(i) for i in range(1, 13)], index=3)
        subject = st.selectbox("Subject", list(SUBJECTS))
        if st.form_submit_button("Get started"):
            if not name.strip():
                st.error("Please enter your name.")
            else:
                st.session_state["profile"] = TeacherProfile(
                    name=name.strip(), grade_level=grade_level, subject=subject
                )
                st.rerun()


def render_upload():
    st.markdown("### Upload assessment results")
    st.caption("Workbook must contain `QuestionsMapping` and `StudentResults` sheets.")
    uploaded = st.file_uploader("Results workbook", type=["xlsx"])
    if uploaded is not None and st.button("Analyze workbook"):
        try:
            set_analysis(parse_workbook(uploaded.getvalue()))
        except FormatError as exc:
            st.error(str(exc))
        else:
            st.success(f"Analyzed {len(st.session_state['analysis'].students)} students.")

    c1, c2 = st.columns(2)
    with c1:
        if st.button("Load demo class"):
            set_analysis(generate_demo_data())
            st.success("Demo class loaded.")
    with c2:
        st.download_button(
            "Download template workbook",
            data=build_template_workbook(),
            file_name="Remedial_Assessment_Template.xlsx",
            mime=XLSX_MIME,
        )


def render_dashboard(analysis: ClassAnalysis):
    c1, c2, c3 = st.columns(3)
    c1.metric("Students", len(analysis.students))
    c2.metric("Class Average", as_pct_label(class_average(analysis.students)))
    c3.metric("Remedial Groups", len(analysis.groups))

    st.markdown("#### Weakest skills class-wide")
    for code in analysis.weakest_skills_classwide:
        stat = analysis.skill_stats[code]
        st.write(f"- **{code}** {stat.description}: {as_pct_label(stat.avg_accuracy)}")

    chart_df = pd.DataFrame(
        [
            {
                "Skill": stat.skill_code,
                "Accuracy": round(stat.avg_accuracy),
                "Weak Students": stat.struggling_count,
            }
            for stat in analysis.skill_stats.values()
        ]
    )
    if not chart_df.empty:
        st.bar_chart(chart_df.set_index("Skill")[["Accuracy", "Weak Students"]])

    levels = overall_level_counts(analysis.students)
    st.markdown("#### Overall proficiency distribution")
    st.dataframe(
        pd.DataFrame([{"Level": level.value, "Students": count} for level, count in levels.items()]),
        hide_index=True,
        use_container_width=True,
    )
    st.markdown("#### Skill breakdown")
    st.dataframe(skill_stats_frame(analysis), hide_index=True, use_container_width=True)
    st.download_button(
        "Export CSV",
        data=skills_report_csv(analysis),
        file_name="class_skills_performance.csv",
        mime="text/csv",
    )


def render_planner(analysis: ClassAnalysis, profile: TeacherProfile):
    groups = groups_by_size(analysis.groups)
    if not groups:
        st.info("No student is below 70% on any skill. No remedial groups needed.")
        return

    labels = {g.id: f"{g.skill_code} - {g.skill_description} ({len(g.students)} students)" for g in groups}
    selected_id = st.selectbox("Remedial group", [g.id for g in groups], format_func=labels.get)
    group = next(g for g in groups if g.id == selected_id)
    st.caption(f"Standard framework: {standard_context(profile.subject)}")
    st.write(", ".join(s.student_name for s in group.students))

    c1, c2 = st.columns(2)
    target_group = c1.selectbox("Target group", list(TARGET_GROUPS), index=1)
    duration = c2.selectbox("Duration", list(DURATIONS), index=1)
    if st.button("Generate plan"):
        request = build_group_request(group, profile, target_group=target_group, duration=duration)
        st.session_state["generated"][group.id] = offline_content(request)

    content = st.session_state["generated"].get(group.id)
    if content is None:
        return
    if content.smart_goal:
        st.markdown("#### SMART goal")
        st.success(content.smart_goal.full_statement)
    plan = content.remedial_plan
    if plan:
        st.markdown(f"#### Lesson plan ({plan.target_group}, {plan.duration})")
        st.write(f"**Objective:** {plan.objective}")
        flow = plan.lesson_flow
        for title, text in [
            ("Warm Up", flow.warm_up),
            ("Mini Lesson", flow.mini_lesson),
            ("Guided Practice", flow.guided_practice),
            ("Independent Practice", flow.independent_practice),
            ("Assessment", flow.assessment),
            ("Exit Ticket", flow.exit_ticket),
        ]:
            st.write(f"- **{title}:** {text}")
    if content.worksheet_content:
        st.markdown("#### Practice worksheet")
        st.markdown(content.worksheet_content)
        st.download_button(
            "Download worksheet",
            data=content.worksheet_content,
            file_name=f"worksheet_{group.skill_code}.md",
            mime="text/markdown",
        )


def render_reports(analysis: ClassAnalysis, profile: TeacherProfile):
    st.dataframe(student_roster_frame(analysis), hide_index=True, use_container_width=True)
    c1, c2 = st.columns(2)
    c1.download_button(
        "Download roster CSV",
        data=student_roster_csv(analysis),
        file_name="student_roster.csv",
        mime="text/csv",
    )
    c2.download_button(
        "Download analysis JSON",
        data=json.dumps(export_payload(analysis), indent=2),
        file_name="class_analysis.json",
        mime="application/json",
    )

    if analysis.students:
        students = analysis.students
        index = st.selectbox(
            "Parent note for",
            range(len(students)),
            format_func=lambda i: f"{students[i].student_name} ({students[i].student_id})",
        )
        student = students[index]
        key = f"student-{index}"
        if key not in st.session_state["generated"]:
            st.session_state["generated"][key] = parent_report_content(build_parent_request(student, profile))
        st.text_area("Parent note", st.session_state["generated"][key].parent_report, height=260)

    prompt = st.text_input("Ask the class assistant", value="Which groups should I start with?")
    if st.button("Ask"):
        st.write(companion_response(prompt, analysis))


configure_logging()
st.set_page_config(page_title=APP_TITLE, layout="wide")
inject_styles()
ensure_state()

profile = st.session_state["profile"]
if profile is None:
    render_onboarding()
else:
    with st.sidebar:
        st.markdown(f"### {profile.name}")
        st.caption(f"Grade {profile.grade_level} · {profile.subject}")
        page = st.radio("Go to", PAGES)

    st.title(APP_TITLE)
    analysis = st.session_state["analysis"]
    if page == "Upload":
        render_upload()
    elif analysis is None:
        st.info("Please upload data first.")
    elif page == "Dashboard":
        render_dashboard(analysis)
    elif page == "Remedial Planner":
        render_planner(analysis, profile)
    else:
        render_reports(analysis, profile)
