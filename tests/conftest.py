"""
Shared test fixtures: an in-memory content producer and sample documents.
"""

import copy
from datetime import datetime, timezone

import pytest

from src.creatorai.file_tree import join_path
from src.creatorai.langGraph.producer import Operation

LIST_VALUED_FIELDS = {
    "learningObjectives", "techStack", "learningOutcomes", "projectRequirements",
    "deliverables", "constraints", "evidenceOfLearning", "judgementCriteria",
}

PLANNED_TREE = [
    {"name": "README.md", "type": "file", "content": ""},
    {"name": "SETUP.md", "type": "file", "content": ""},
    {"name": "src", "type": "folder", "children": [
        {"name": "main.py", "type": "file", "content": ""},
        {"name": "utils", "type": "folder", "children": [
            {"name": "helpers.py", "type": "file", "content": ""},
        ]},
    ]},
    {"name": "assets", "type": "folder", "children": [
        {"name": "logo.png", "type": "file", "content": ""},
    ]},
    {"name": "docs", "type": "folder", "children": [
        {"name": "report.pdf", "type": "file", "content": ""},
    ]},
]


def make_exercise(tag: str) -> dict:
    return {"problem": f"problem {tag}", "hint": f"hint {tag}", "answer": f"answer {tag}",
            "explanation": f"explanation {tag}"}


def make_question(tag: str) -> dict:
    return {"question": f"question {tag}", "options": ["a", "b", "c"], "answer": "a",
            "explanation": f"explanation {tag}"}


def default_response(spec) -> dict:
    op = spec.operation
    if op == Operation.PLAN_FILES:
        return {"fileStructure": copy.deepcopy(PLANNED_TREE)}
    if op == Operation.FILE_CONTENT:
        return {"content": f"content of {join_path(spec.path)}"}
    if op == Operation.REGENERATE_FILES:
        return {"fileStructure": [
            {"name": "README.md", "type": "file", "content": "# Updated"},
            {"name": "SETUP.md", "type": "file", "content": "setup"},
            {"name": "app.py", "type": "file", "content": "print('hi')"},
        ]}
    if op == Operation.SUGGEST_PROMPT:
        return {"summary": "A course about SQL.", "suggestion": "A 4-week SQL course for analysts."}
    if op == Operation.GENERATE_CURRICULA:
        return {
            "curriculums": [
                {"title": f"SQL track {i}", "description": "Queries.", "lessons": ["Select", "Join"],
                 "learningOutcomes": ["Query data"], "tags": ["Beginner", "sql"], "recommended": True}
                for i in range(1, 4)
            ],
            "agentThoughts": ["Varied the audience."],
        }
    if op == Operation.GENERATE_PROJECT_IDEAS:
        return {
            "projects": [
                {"title": f"Project {i}", "description": "Build it.", "tags": ["Intermediate", "web"],
                 "recommended": i == 2, "techStack": ["Python"], "learningOutcomes": ["Ship it"],
                 "projectRequirements": ["Auth"], "deliverables": ["Repository"]}
                for i in range(1, 3)
            ],
            "agentThoughts": ["Mixed complexity."],
        }
    if op == Operation.ANALYZE_ANDRAGOGY:
        return {
            "poLD": {key: f"{key} evidence" for key in
                     ("authentic", "alignment", "holistic", "feedback", "judgement", "future")},
            "boud": {"situated": "analyst role", "mediated": "SQL client", "relational": "team review"},
            "billett": {"affordances": "guided tasks", "guidance": "worked examples"},
            "merrill": {key: f"{key} phase" for key in
                        ("problem", "activation", "demonstration", "application", "integration")},
            "bloom": {"progression": "remember to create"},
            "vygotsky": {"zpd": "stretch tasks", "scaffolding": "hints", "social": "peer review", "mko": "mentor"},
        }
    if op == Operation.VARY_CURRICULUM:
        return {"title": "SQL for Finance", "description": "SQL with finance data.",
                "tags": ["sql", "Intermediate"], "lessons": ["Ledgers", "Joins on ledgers", "Reporting"]}

    field = spec.field
    if op == Operation.NEW_LIST_ITEM or (op == Operation.REGENERATE_PART and spec.index is not None):
        return make_exercise("new") if field == "exercises" else make_question("new")
    if field == "exercises":
        return {field: [make_exercise("1"), make_exercise("2")]}
    if field == "quiz":
        return {field: [make_question("1")]}
    if field in LIST_VALUED_FIELDS:
        return {field: [f"{field} 1", f"{field} 2"]}
    return {field: f"{field} text"}


class FakeProducer:
    """
    Answers every request from `default_response` unless `responses` has an
    entry for the stage key (field name, file path or operation name).
    """

    def __init__(self, responses=None, fail_at=None, error=None, on_call=None):
        self.responses = responses or {}
        self.fail_at = fail_at
        self.error = error
        self.on_call = on_call
        self.calls = []

    @staticmethod
    def key(spec) -> str:
        if spec.field:
            return spec.field
        if spec.path:
            return join_path(spec.path)
        return spec.operation.value

    async def produce(self, spec, context, on_progress=None):
        self.calls.append((spec, context))
        key = self.key(spec)
        if self.on_call:
            self.on_call(len(self.calls), spec)
        if self.fail_at == key:
            raise self.error or RuntimeError("model call failed")
        if on_progress:
            on_progress(0.5, f"Generating {key}...")
        if key in self.responses:
            return copy.deepcopy(self.responses[key])
        return default_response(spec)


@pytest.fixture
def producer_factory():
    return FakeProducer


@pytest.fixture
def sample_tree() -> list:
    return [
        {"name": "README.md", "type": "file", "content": "# Project"},
        {"name": "SETUP.md", "type": "file", "content": "pip install"},
        {"name": "src", "type": "folder", "children": [
            {"name": "app.py", "type": "file", "content": "app = 1"},
            {"name": "lib", "type": "folder", "children": [
                {"name": "db.py", "type": "file", "content": "db = 2"},
            ]},
        ]},
        {"name": "data", "type": "folder", "children": []},
    ]


@pytest.fixture
def sample_project(sample_tree) -> dict:
    return {
        "id": 7,
        "title": "Inventory Forecasting Dashboard",
        "description": "Forecast stock levels for a small retailer.",
        "industry": "Retail",
        "tags": ["data"],
        "recommended": True,
        "detailedDescription": "",
        "techStack": ["Python", "pandas"],
        "learningOutcomes": ["Clean sales data"],
        "projectRequirements": [],
        "deliverables": [],
        "fileStructure": sample_tree,
    }


@pytest.fixture
def sample_lesson_plan() -> dict:
    return {
        "overview": "Joins overview",
        "learningObjectives": ["Explain inner joins"],
        "activation": "Think of two spreadsheets.",
        "demonstration": "Worked join example.",
        "application": "Join orders to customers.",
        "integration": "Apply to a new schema.",
        "reflectionAndAssessment": "Reflect on mistakes.",
        "exercises": [make_exercise("0"), make_exercise("1"), make_exercise("2")],
        "quiz": [make_question("0"), make_question("1")],
    }


@pytest.fixture
def sample_curriculum() -> dict:
    return {
        "title": "Practical SQL",
        "description": "SQL for analysts.",
        "lessons": ["Selecting rows", "Joins"],
        "learningOutcomes": ["Write analytical queries"],
        "tags": ["sql"],
    }


def library_row(item_id=1, name="Practical SQL"):
    """A `content_items` row in SELECT column order."""
    return (
        item_id, name, "SQL for analysts", 2, 45, "beginner",
        datetime(2026, 1, 5, 9, 30, tzinfo=timezone.utc), None,
        {"style": "balanced"}, [{"title": "Joins", "content": "..."}], None, ["sql"], None,
    )


class FakeCursor:
    def __init__(self, rows):
        self.rows = rows

    async def fetchone(self):
        return self.rows[0] if self.rows else None

    async def fetchall(self):
        return self.rows


class FakeConnection:
    """Records every statement and answers with the configured rows."""

    def __init__(self, rows=None):
        self.rows = rows or []
        self.executed = []

    async def execute(self, sql, params=None):
        self.executed.append((sql, params))
        return FakeCursor(self.rows)


@pytest.fixture
def db_factory():
    return FakeConnection


@pytest.fixture
def row_factory():
    return library_row
