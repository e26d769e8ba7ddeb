# In router_with_streaming.py
import json
import logging
from collections import deque
from typing import AsyncIterator, Deque, Dict

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from src.creatorai.config import PROGRESS_MESSAGES
from src.creatorai.errors import GenerationError, user_message
from src.creatorai.models import (
    CurriculumLessonPlansRequest, LessonPlanRequest, ProjectRequest, VaryCourseRequest, dump_project,
)
from src.creatorai.parts import LESSON_PLAN_STAGES, DocumentKind, project_detail_stages
from src.creatorai.langGraph.dependencies import cancel_session, close_session, get_producer, open_session
from src.creatorai.langGraph.producer import ContentProducer
from src.creatorai.langGraph.session import (
    CancellationToken, generate_all_lesson_plans, generate_details, generate_environment, generate_varied_course,
)

logger = logging.getLogger(__name__)

stream_router = APIRouter()


def _line(event: str, data) -> str:
    return json.dumps({"event": event, "data": data}) + "\n"


async def stream_session(session_id: str, events: AsyncIterator[BaseModel], token: CancellationToken,
                         progress: Deque[Dict], request: Request) -> AsyncIterator[str]:
    """
    Serialises a generation session as ndjson: `metadata`, then progress and
    stage events in order, then `end` (or a single `error`).
    """
    yield _line("metadata", {"session_id": session_id})
    try:
        async for event in events:
            while progress:
                yield _line("progress", progress.popleft())
            yield _line(event.event, event.model_dump(exclude={"event"}))
            if await request.is_disconnected():
                print(f"--- Client left, cancelling session {session_id} ---")
                token.cancel()
        while progress:
            yield _line("progress", progress.popleft())
        yield _line("end", {"cancelled": token.cancelled})
    except GenerationError as e:
        yield _line("error", {"kind": e.kind, "message": user_message(e)})
    finally:
        close_session(session_id)


def _start(request: Request, make_events, first_message: str) -> StreamingResponse:
    session_id, token = open_session()
    progress: Deque[Dict] = deque([{"progress": 0.0, "message": first_message}])

    def on_progress(fraction: float, message: str) -> None:
        progress.append({"progress": round(fraction, 4), "message": message})

    events = make_events(token, on_progress)
    return StreamingResponse(
        stream_session(session_id, events, token, progress, request),
        media_type="application/x-ndjson"  # Newline Delimited JSON
    )


@stream_router.post("/project/details/stream")
async def stream_project_details(
    body: ProjectRequest,
    request: Request,
    producer: ContentProducer = Depends(get_producer),
):
    """Writes the project specification one part at a time."""
    project = dump_project(body.project)
    stages = project_detail_stages(project)
    return _start(
        request,
        lambda token, on_progress: generate_details(producer, DocumentKind.CAPSTONE_PROJECT, stages,
                                                    {"document": project, "project": project}, token, on_progress),
        PROGRESS_MESSAGES["details_start"],
    )


@stream_router.post("/project/environment/stream")
async def stream_project_environment(
    body: ProjectRequest,
    request: Request,
    producer: ContentProducer = Depends(get_producer),
):
    """Plans the starter repository, then streams every file as it is written."""
    project = dump_project(body.project)
    return _start(
        request,
        lambda token, on_progress: generate_environment(producer, project, token, on_progress),
        PROGRESS_MESSAGES["files"],
    )


@stream_router.post("/lesson/plan/stream")
async def stream_lesson_plan(
    body: LessonPlanRequest,
    request: Request,
    producer: ContentProducer = Depends(get_producer),
):
    context = {
        "curriculum": body.curriculum.model_dump(),
        "options": body.options.model_dump(),
        "lesson_title": body.lessonTitle,
        "previous_lessons": body.previousLessons,
    }
    return _start(
        request,
        lambda token, on_progress: generate_details(producer, DocumentKind.LESSON_PLAN, LESSON_PLAN_STAGES,
                                                    context, token, on_progress),
        PROGRESS_MESSAGES["lesson_start"],
    )


@stream_router.post("/curriculum/lesson-plans/stream")
async def stream_curriculum_lesson_plans(
    body: CurriculumLessonPlansRequest,
    request: Request,
    producer: ContentProducer = Depends(get_producer),
):
    """One lesson plan per lesson of the curriculum, in order."""
    return _start(
        request,
        lambda token, on_progress: generate_all_lesson_plans(producer, body.curriculum.model_dump(),
                                                             body.options.model_dump(), token, on_progress),
        PROGRESS_MESSAGES["lesson_start"],
    )


@stream_router.post("/course/vary/stream")
async def stream_varied_course(
    body: VaryCourseRequest,
    request: Request,
    producer: ContentProducer = Depends(get_producer),
):
    """Builds a new course from a library item by varying one lesson; streams `content_item` snapshots."""
    return _start(
        request,
        lambda token, on_progress: generate_varied_course(producer, body.item, body.lessonIndex, body.instructions,
                                                          token, on_progress),
        PROGRESS_MESSAGES["vary_outline"],
    )


@stream_router.post("/sessions/{session_id}/cancel")
async def cancel_generation(session_id: str):
    if not cancel_session(session_id):
        raise HTTPException(status_code=404, detail="Session not found.")
    return {"session_id": session_id, "cancelled": True}
