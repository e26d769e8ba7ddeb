"""
Streaming generation sessions.

A session is an async generator: it sends one producer request per stage,
strictly in order, and yields one event per finished stage. The caller applies
each event to its own copy of the document. Sessions are finite and cannot be
restarted; a new session is started instead.

Cancellation is cooperative. The token is checked before every request and
again when the request returns, so a result that arrives after cancellation is
dropped and the generator simply ends. The first failing request ends the
session with one classified `ProducerFailure`; events already yielded stand.
"""
import logging
from datetime import date
from typing import Any, AsyncIterator, Callable, Dict, List, Literal, Optional

from pydantic import BaseModel, ValidationError

from src.creatorai.config import BINARY_FILE_EXTENSIONS, BINARY_PLACEHOLDER, DIFFICULTY_LEVELS, PROGRESS_MESSAGES
from src.creatorai.errors import (
    GenerationError, MalformedResponse, ProducerFailure, StaleAddress, classify_producer_error,
)
from src.creatorai.file_tree import join_path, list_file_paths, rename_pdf_to_md, update_file_content
from src.creatorai.formatting import lesson_plan_to_markdown
from src.creatorai.models import ContentItem, LessonPlan, LibraryLesson, VariedCurriculumOutline
from src.creatorai.parts import LESSON_PLAN_STAGES, DocumentKind, humanize_field
from src.creatorai.langGraph.producer import ContentProducer, Operation, PartSpec

logger = logging.getLogger(__name__)

ProgressSink = Callable[[float, str], None]


class CancellationToken:
    """Shared flag between the consumer of a session and the session itself."""

    def __init__(self):
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


# --- Events ---

class DetailEvent(BaseModel):
    event: Literal["detail"] = "detail"
    field: str
    data: Dict[str, Any]
    progress: float


class StructureEvent(BaseModel):
    event: Literal["structure"] = "structure"
    tree: List[Dict[str, Any]]


class FileEvent(BaseModel):
    event: Literal["file"] = "file"
    path: List[str]
    content: str
    progress: float


class LessonPlanEvent(BaseModel):
    event: Literal["lesson_plan"] = "lesson_plan"
    index: int
    title: str
    plan: Dict[str, Any]
    progress: float


class ContentItemEvent(BaseModel):
    """A snapshot of a content item that is still being built; `item["progress"]` is in percent."""
    event: Literal["content_item"] = "content_item"
    item: Dict[str, Any]
    progress: float


def _is_cancelled(token: Optional[CancellationToken]) -> bool:
    return token is not None and token.cancelled


def _report(on_progress: Optional[ProgressSink], fraction: float, message: str) -> None:
    if on_progress:
        on_progress(min(max(fraction, 0.0), 1.0), message)


async def request_part(producer: ContentProducer, spec: PartSpec, context: Dict[str, Any], stage: str,
                       on_progress: Optional[ProgressSink] = None) -> Dict[str, Any]:
    try:
        data = await producer.produce(spec, context, on_progress)
    except GenerationError:
        raise
    except Exception as e:
        raise classify_producer_error(e, stage) from e
    if not isinstance(data, dict):
        raise MalformedResponse(f"JSON_PARSE_ERROR: expected an object for '{stage}'")
    return data


def is_binary_path(path: List[str]) -> bool:
    return path[-1].lower().endswith(BINARY_FILE_EXTENSIONS)


async def generate_details(
    producer: ContentProducer,
    kind: DocumentKind,
    stages: List[str],
    context: Optional[Dict[str, Any]] = None,
    token: Optional[CancellationToken] = None,
    on_progress: Optional[ProgressSink] = None,
) -> AsyncIterator[DetailEvent]:
    """
    Generates the named fields of a document one by one.

    Every request sees the document as it stands after the previous stages,
    under the `document` key of its context.
    """
    context = dict(context or {})
    document = dict(context.get("document") or {})
    total = len(stages)

    for k, field in enumerate(stages, start=1):
        if _is_cancelled(token):
            logger.info("--- Detail generation cancelled before '%s' ---", field)
            return

        _report(on_progress, (k - 1) / total, f"Generating {humanize_field(field)}...")
        spec = PartSpec(operation=Operation.GENERATE_PART, document=kind, field=field)
        data = await request_part(producer, spec, {**context, "document": document}, field)

        if _is_cancelled(token):
            logger.info("--- Detail generation cancelled, dropping '%s' ---", field)
            return
        if field not in data:
            raise MalformedResponse(f"JSON_PARSE_ERROR: response has no '{field}' key")

        document = {**document, field: data[field]}
        _report(on_progress, k / total, f"Generated {humanize_field(field)}")
        yield DetailEvent(field=field, data={field: data[field]}, progress=k / total)


async def generate_environment(
    producer: ContentProducer,
    project: Dict[str, Any],
    token: Optional[CancellationToken] = None,
    on_progress: Optional[ProgressSink] = None,
) -> AsyncIterator[BaseModel]:
    """
    Plans the project's file tree, then writes every file in `list_file_paths` order.

    Yields one `StructureEvent` followed by one `FileEvent` per file. Files with a
    binary extension get a placeholder instead of a request.
    """
    if _is_cancelled(token):
        return

    _report(on_progress, 0, PROGRESS_MESSAGES["planning"])
    plan = await request_part(producer, PartSpec(operation=Operation.PLAN_FILES, document=DocumentKind.CAPSTONE_PROJECT),
                              {"project": project}, "file structure")
    if _is_cancelled(token):
        return

    tree = plan.get("fileStructure")
    if not isinstance(tree, list):
        raise MalformedResponse("JSON_PARSE_ERROR: response has no 'fileStructure' list")
    tree = rename_pdf_to_md(tree)
    yield StructureEvent(tree=tree)

    paths = list_file_paths(tree)
    total = len(paths)
    print(f"--- Planned {total} files ---")

    for i, path in enumerate(paths):
        if _is_cancelled(token):
            logger.info("--- Environment generation cancelled before '%s' ---", join_path(path))
            return

        message = PROGRESS_MESSAGES["file_step"].format(current=i + 1, total=total)
        _report(on_progress, i / total, message)

        if is_binary_path(path):
            content = BINARY_PLACEHOLDER.format(path=join_path(path))
            _report(on_progress, (i + 1) / total, PROGRESS_MESSAGES["binary_skip"].format(path=join_path(path)))
        else:
            def file_progress(fraction: float, _detail: str, _i: int = i) -> None:
                _report(on_progress, (_i + fraction) / total, message)

            spec = PartSpec(operation=Operation.FILE_CONTENT, document=DocumentKind.CAPSTONE_PROJECT, path=path)
            data = await request_part(producer, spec, {"project": project, "tree": tree}, join_path(path), file_progress)
            if _is_cancelled(token):
                return
            content = data.get("content")
            if not isinstance(content, str):
                raise MalformedResponse(f"JSON_PARSE_ERROR: response has no 'content' for {join_path(path)}")

        tree = update_file_content(tree, path, content)
        yield FileEvent(path=path, content=content, progress=(i + 1) / total)

    _report(on_progress, 1, PROGRESS_MESSAGES["completed"])


async def generate_all_lesson_plans(
    producer: ContentProducer,
    curriculum: Dict[str, Any],
    options: Optional[Dict[str, Any]] = None,
    token: Optional[CancellationToken] = None,
    on_progress: Optional[ProgressSink] = None,
) -> AsyncIterator[LessonPlanEvent]:
    lessons = curriculum.get("lessons") or []
    total = len(lessons)
    previous: List[Dict[str, Any]] = []

    for i, title in enumerate(lessons):
        if _is_cancelled(token):
            return

        step_message = PROGRESS_MESSAGES["lesson_step"].format(current=i + 1, total=total)

        def lesson_progress(fraction: float, _detail: str, _i: int = i) -> None:
            _report(on_progress, (_i + fraction) / total, step_message)

        context = {
            "curriculum": curriculum,
            "options": options or {},
            "lesson_title": title,
            "previous_lessons": list(previous),
        }
        plan: Dict[str, Any] = {}
        async for event in generate_details(producer, DocumentKind.LESSON_PLAN, LESSON_PLAN_STAGES,
                                            context, token, lesson_progress):
            plan.update(event.data)

        if _is_cancelled(token):
            return
        try:
            validated = LessonPlan.model_validate(plan).model_dump()
        except ValidationError as e:
            raise ProducerFailure(f"Lesson plan for '{title}' failed validation: {e}", cause=e) from e

        previous.append({"title": title, "overview": validated["overview"]})
        yield LessonPlanEvent(index=i, title=title, plan=validated, progress=(i + 1) / total)


def _difficulty(tags: List[str]) -> str:
    return next((tag for tag in tags if tag in DIFFICULTY_LEVELS), "Beginner")


async def generate_varied_course(
    producer: ContentProducer,
    item: ContentItem,
    lesson_index: int,
    instructions: str = "",
    token: Optional[CancellationToken] = None,
    on_progress: Optional[ProgressSink] = None,
) -> AsyncIterator[ContentItemEvent]:
    """
    Builds a new course from a library item by varying one of its lessons.

    The whole outline is re-planned first and yielded as a skeleton item at 5%.
    Every lesson plan is then written in order (5% to 95%), and the final item,
    with the lessons rendered as markdown, is yielded at 100%.
    """
    if not 0 <= lesson_index < len(item.lessons):
        raise StaleAddress(f"Lesson to vary not found: index {lesson_index} of {len(item.lessons)} lessons.")
    original_title = item.lessons[lesson_index].title
    if _is_cancelled(token):
        return

    _report(on_progress, 0, PROGRESS_MESSAGES["vary_outline"])
    curriculum = {
        "title": item.name,
        "description": item.notes or "",
        "tags": [item.difficulty],
        "lessons": [lesson.title for lesson in item.lessons],
    }
    spec = PartSpec(operation=Operation.VARY_CURRICULUM, instructions=instructions)
    data = await request_part(producer, spec, {"curriculum": curriculum, "original_lesson_title": original_title},
                              "course outline")
    if _is_cancelled(token):
        return
    try:
        outline = VariedCurriculumOutline.model_validate(data)
    except ValidationError as e:
        raise ProducerFailure(f"The varied course outline failed validation: {e}", cause=e) from e
    if not outline.lessons:
        raise MalformedResponse("JSON_PARSE_ERROR: the varied course outline has no lessons")

    skeleton = ContentItem(
        name=outline.title,
        description=outline.description,
        lessonCount=len(outline.lessons),
        lessonDuration=item.lessonDuration,
        difficulty=_difficulty(outline.tags),
        created=date.today().isoformat(),
        generationOptions=item.generationOptions,
        tags=outline.tags,
        progress=5.0,
    )
    _report(on_progress, 0.05, PROGRESS_MESSAGES["lesson_start"])
    yield ContentItemEvent(item=skeleton.model_dump(), progress=0.05)

    new_curriculum = {**outline.model_dump(), "learningOutcomes": []}
    total = len(outline.lessons)

    def lesson_progress(fraction: float, message: str) -> None:
        _report(on_progress, 0.05 + fraction * 0.9, message)

    plans: List[Dict[str, Any]] = []
    async for event in generate_all_lesson_plans(producer, new_curriculum, item.generationOptions.model_dump(),
                                                 token, lesson_progress):
        plans.append(event.plan)
        percent = 5 + round((event.index + 1) / total * 90)
        yield ContentItemEvent(item=skeleton.model_copy(update={"progress": float(percent)}).model_dump(),
                               progress=percent / 100)

    if _is_cancelled(token) or len(plans) < total:
        return

    final = skeleton.model_copy(update={
        "notes": f'Varied from course "{item.name}" (based on lesson: "{original_title}").\n\n'
                 f'Variation instructions: "{instructions}"',
        "lessons": [
            LibraryLesson(title=title, content=lesson_plan_to_markdown(plan))
            for title, plan in zip(outline.lessons, plans)
        ],
        "progress": 100.0,
    })
    _report(on_progress, 1, PROGRESS_MESSAGES["completed"])
    print(f"--- Varied course '{item.name}' into '{outline.title}' ({total} lessons) ---")
    yield ContentItemEvent(item=final.model_dump(), progress=1.0)
