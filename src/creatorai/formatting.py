"""
Markdown rendering of lesson plans, as stored in the content library.
"""
from typing import Any, Dict, List

# (heading, field) pairs of the prose sections, in document order
PROSE_SECTIONS = [
    ("1. Overview", "overview"),
    ("3. Activation", "activation"),
    ("4. Demonstration", "demonstration"),
    ("5. Application", "application"),
    ("6. Integration", "integration"),
    ("7. Feedback & Reflection", "reflectionAndAssessment"),
]


def _section(heading: str, body: str) -> str:
    return f"## {heading}\n\n{body}\n\n"


def _exercises(exercises: List[Dict[str, Any]]) -> str:
    markdown = "## 8. Exercises\n\n---\n\n"
    for i, ex in enumerate(exercises, start=1):
        markdown += f"**Exercise {i}**\n\n**Problem:**\n{ex.get('problem', '')}\n\n"
        markdown += f"**Hint:**\n*{ex.get('hint', '')}*\n\n"
        markdown += f"**Answer:**\n```\n{ex.get('answer', '')}\n```\n\n"
        markdown += f"**Explanation:**\n{ex.get('explanation', '')}\n\n---\n\n"
    return markdown


def _quiz(questions: List[Dict[str, Any]]) -> str:
    markdown = "## 9. Quiz\n\n---\n\n"
    for i, q in enumerate(questions, start=1):
        markdown += f"**Question {i}: {q.get('question', '')}**\n\n"
        for option in q.get("options") or []:
            mark = "x" if option == q.get("answer") else " "
            markdown += f"- [{mark}] {option}\n"
        markdown += f"\n**Explanation:** {q.get('explanation', '')}\n\n---\n\n"
    return markdown


def lesson_plan_to_markdown(plan: Dict[str, Any]) -> str:
    """Empty sections are left out; the section numbers stay fixed."""
    markdown = ""
    for heading, field in PROSE_SECTIONS:
        if plan.get(field):
            markdown += _section(heading, plan[field])
        if field == "overview" and plan.get("learningObjectives"):
            objectives = "".join(f"- {objective}\n" for objective in plan["learningObjectives"])
            markdown += f"## 2. Learning Objectives\n\n{objectives}\n"
    if plan.get("exercises"):
        markdown += _exercises(plan["exercises"])
    if plan.get("quiz"):
        markdown += _quiz(plan["quiz"])
    return markdown
