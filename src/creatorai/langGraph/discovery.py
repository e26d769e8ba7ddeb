"""
Discovery: turning a topic into curriculum outlines or capstone project ideas,
and auditing finished content against andragogical frameworks.

Each call is a single producer request whose answer is validated against its
schema; an answer that does not fit is a `ProducerFailure`.
"""
import logging
from typing import Any, Dict, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from src.creatorai.config import CURRICULUM_FILTERS, PROGRESS_MESSAGES
from src.creatorai.errors import ProducerFailure
from src.creatorai.models import (
    AndragogicalAnalysis, CapstoneProject, CurriculaData, ProjectIdeasData, ProjectIdeasResponse,
)
from src.creatorai.langGraph.producer import ContentProducer, Operation, PartSpec
from src.creatorai.langGraph.session import ProgressSink, request_part

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

ANY = "any"


def filter_instructions(filters: Optional[Dict[str, str]]) -> str:
    """The filter sentences appended to the curricula prompt. Unset and "any" filters add nothing."""
    sentences = []
    for filter_id, template in CURRICULUM_FILTERS.items():
        value = ((filters or {}).get(filter_id) or "").strip()
        if not value:
            continue
        if value.lower() != ANY:
            sentences.append(template.format(value=value))
        elif filter_id == "difficulty":
            sentences.append('For each curriculum, randomly assign a difficulty level from '
                             '"Beginner", "Intermediate" or "Advanced".')
    return "".join(f" {sentence}" for sentence in sentences)


def lesson_breakdown(filters: Optional[Dict[str, str]]) -> str:
    num_lessons = ((filters or {}).get("numLessons") or "").strip()
    if num_lessons and num_lessons.lower() != ANY:
        return "Give a list of lesson titles that strictly adheres to the lesson count above."
    return "Give a list of lesson titles, typically 5-7 per outline, varying the number between outlines."


def industry_label(industry: Optional[str]) -> str:
    if not industry or industry == "All":
        return "for the tech industry in general"
    return f"specifically for the {industry} industry"


def _validate(model: Type[ModelT], data: Dict[str, Any], what: str) -> ModelT:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ProducerFailure(f"The {what} failed validation: {e}", cause=e) from e


def _report(on_progress: Optional[ProgressSink], fraction: float, message: str) -> None:
    if on_progress:
        on_progress(fraction, message)


async def generate_curricula(producer: ContentProducer, topic: str, filters: Optional[Dict[str, str]] = None,
                             on_progress: Optional[ProgressSink] = None) -> CurriculaData:
    """Distinct curriculum outlines for `topic`. Only the first one is recommended."""
    _report(on_progress, 0, PROGRESS_MESSAGES["discovery"])
    context = {
        "topic": topic.strip(),
        "filter_instructions": filter_instructions(filters),
        "lesson_breakdown": lesson_breakdown(filters),
    }
    data = await request_part(producer, PartSpec(operation=Operation.GENERATE_CURRICULA), context,
                              "curriculum outlines")
    curricula = _validate(CurriculaData, data, "curriculum outlines")
    if not curricula.curriculums:
        raise ProducerFailure("The model returned no curriculum outlines.")

    for i, curriculum in enumerate(curricula.curriculums):
        curriculum.recommended = i == 0
    print(f"--- Generated {len(curricula.curriculums)} curriculum outlines for '{topic}' ---")
    _report(on_progress, 1, PROGRESS_MESSAGES["completed"])
    return curricula


async def generate_project_ideas(producer: ContentProducer, topic: str, industry: str = "All",
                                 on_progress: Optional[ProgressSink] = None) -> ProjectIdeasResponse:
    """
    Capstone project ideas for `topic`, numbered from 1 and tagged with the
    industry ("General" when no industry is chosen). Only the first is recommended.
    """
    _report(on_progress, 0, PROGRESS_MESSAGES["discovery"])
    context = {"topic": topic.strip(), "industry_label": industry_label(industry)}
    data = await request_part(producer, PartSpec(operation=Operation.GENERATE_PROJECT_IDEAS), context,
                              "project ideas")
    ideas = _validate(ProjectIdeasData, data, "project ideas")
    if not ideas.projects:
        raise ProducerFailure("The model returned no project ideas.")

    projects = [
        CapstoneProject(
            **outline.model_dump(exclude={"recommended"}),
            id=i + 1,
            industry=industry if industry and industry != "All" else "General",
            recommended=i == 0,
        )
        for i, outline in enumerate(ideas.projects)
    ]
    _report(on_progress, 1, PROGRESS_MESSAGES["completed"])
    return ProjectIdeasResponse(projects=projects, agentThoughts=ideas.agentThoughts)


async def analyze_andragogy(producer: ContentProducer, content: str, kind: str = "course") -> AndragogicalAnalysis:
    """Audits a course or a capstone project (as text) against six andragogical frameworks."""
    data = await request_part(producer, PartSpec(operation=Operation.ANALYZE_ANDRAGOGY),
                              {"content": content, "kind": kind}, "andragogical analysis")
    return _validate(AndragogicalAnalysis, data, "andragogical analysis")
