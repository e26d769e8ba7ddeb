"""
Addressing of regenerable parts inside composite documents.

A document kind has a closed set of fields. Scalar fields are regenerated as a
whole (this includes plain string lists such as learning objectives); list
fields hold records that can be regenerated or appended one at a time.
"""
from enum import Enum
from typing import Dict, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.creatorai.models import Exercise, QuizQuestion


class DocumentKind(str, Enum):
    LESSON_PLAN = "lesson_plan"
    CAPSTONE_PROJECT = "capstone_project"


class FieldKind(str, Enum):
    SCALAR = "scalar"
    LIST = "list"


# Declaration order is the detail generation order
LESSON_PLAN_FIELDS: Dict[str, FieldKind] = {
    "overview": FieldKind.SCALAR,
    "learningObjectives": FieldKind.SCALAR,
    "activation": FieldKind.SCALAR,
    "demonstration": FieldKind.SCALAR,
    "application": FieldKind.SCALAR,
    "integration": FieldKind.SCALAR,
    "reflectionAndAssessment": FieldKind.SCALAR,
    "exercises": FieldKind.LIST,
    "quiz": FieldKind.LIST,
}

CAPSTONE_PROJECT_FIELDS: Dict[str, FieldKind] = {
    "detailedDescription": FieldKind.SCALAR,
    "techStack": FieldKind.SCALAR,
    "learningOutcomes": FieldKind.SCALAR,
    "projectRequirements": FieldKind.SCALAR,
    "deliverables": FieldKind.SCALAR,
    "constraints": FieldKind.SCALAR,
    "futureOrientedElement": FieldKind.SCALAR,
    "participationModel": FieldKind.SCALAR,
    "evidenceOfLearning": FieldKind.SCALAR,
    "assessmentFeedback": FieldKind.SCALAR,
    "judgementCriteria": FieldKind.SCALAR,
}

DOCUMENT_FIELDS: Dict[DocumentKind, Dict[str, FieldKind]] = {
    DocumentKind.LESSON_PLAN: LESSON_PLAN_FIELDS,
    DocumentKind.CAPSTONE_PROJECT: CAPSTONE_PROJECT_FIELDS,
}

# Record model of every list field
LIST_ITEM_MODELS: Dict[str, Type[BaseModel]] = {
    "exercises": Exercise,
    "quiz": QuizQuestion,
}

LESSON_PLAN_STAGES: List[str] = list(LESSON_PLAN_FIELDS)

PROJECT_DETAIL_STAGES: List[str] = [
    "detailedDescription",
    "techStack",
    "learningOutcomes",
    "projectRequirements",
    "deliverables",
]

# Part names used by earlier versions of the editor
FIELD_ALIASES = {
    "exercise": "exercises",
    "objectives": "learningObjectives",
}


class PartAddress(BaseModel):
    model_config = ConfigDict(frozen=True)

    field: str
    index: Optional[int] = Field(None, ge=0)

    @field_validator("field")
    @classmethod
    def _canonical_field(cls, value: str) -> str:
        return FIELD_ALIASES.get(value, value)


def resolve_part_id(address: PartAddress) -> str:
    """Stable key of an address, e.g. ``activation`` or ``quiz-1``."""
    if address.index is not None:
        return f"{address.field}-{address.index}"
    return address.field


def field_kind(kind: DocumentKind, field: str) -> Optional[FieldKind]:
    return DOCUMENT_FIELDS[kind].get(field)


def project_detail_stages(project: Dict) -> List[str]:
    """The tech stack is only refined when the brief already names one."""
    if project.get("techStack"):
        return list(PROJECT_DETAIL_STAGES)
    return [stage for stage in PROJECT_DETAIL_STAGES if stage != "techStack"]


def humanize_field(field: str) -> str:
    """``reflectionAndAssessment`` -> ``reflection and assessment``"""
    words = []
    current = ""
    for char in field:
        if char.isupper() and current:
            words.append(current)
            current = char.lower()
        else:
            current += char.lower()
    if current:
        words.append(current)
    return " ".join(words)
