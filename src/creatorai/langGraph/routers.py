# In routers.py
import logging
from typing import List, Optional

from celery.result import AsyncResult
from fastapi import APIRouter, Depends, Header, HTTPException
from psycopg.connection_async import AsyncConnection

from src.creatorai import file_manager
from src.creatorai.db import library_service
from src.creatorai.db.app_db import get_app_db_connection
from src.creatorai.errors import GenerationError
from src.creatorai.models import (
    AndragogicalAnalysis, AndragogyRequest, ApplyInstructionsRequest, ContentItem, CurriculaData, CurriculaRequest,
    FileCreateRequest, FileDeleteRequest, FileRenameRequest, JobResponse, NewItemResponse, NewLessonPartRequest,
    PatchResponse, ProjectIdeasRequest, ProjectIdeasResponse, ProjectRequest, PromptSuggestion,
    RegenerateLessonPartRequest, RegenerateProjectPartRequest, SuggestionRequest, TreeEditResponse, dump_project,
)
from src.creatorai.parts import DocumentKind, PartAddress
from src.creatorai.suggestions import get_prompt_suggestion
from src.creatorai.langGraph import discovery
from src.creatorai.langGraph.dependencies import get_producer, http_error
from src.creatorai.langGraph.producer import ContentProducer
from src.creatorai.langGraph.regeneration_graph import RegenerationDispatcher, merge_patch
from src.creatorai.langGraph.tasks import app as celery_app, generate_environment_task

logger = logging.getLogger(__name__)

generation_router = APIRouter()
library_router = APIRouter()


def _lesson_context(request) -> dict:
    return {
        "curriculum": request.curriculum.model_dump() if request.curriculum else None,
        "options": request.options.model_dump() if request.options else None,
    }


# ======================== Discovery ========================

@generation_router.post("/curriculum/generate", response_model=CurriculaData, summary="Generate curriculum outlines")
async def generate_curricula(
    request: CurriculaRequest,
    producer: ContentProducer = Depends(get_producer),
):
    """
    Generates distinct curriculum outlines for a topic. `filters` may set
    `difficulty`, `numLessons`, `lessonDuration` and `audience`; "any" leaves a filter out.
    """
    try:
        return await discovery.generate_curricula(producer, request.topic, request.filters)
    except GenerationError as e:
        raise http_error(e)


@generation_router.post("/project/ideas", response_model=ProjectIdeasResponse, summary="Generate capstone project ideas")
async def generate_project_ideas(
    request: ProjectIdeasRequest,
    producer: ContentProducer = Depends(get_producer),
):
    try:
        return await discovery.generate_project_ideas(producer, request.topic, request.industry)
    except GenerationError as e:
        raise http_error(e)


@generation_router.post("/analysis/andragogy", response_model=AndragogicalAnalysis,
                        summary="Audit a course or a project against andragogical frameworks")
async def analyze_andragogy(
    request: AndragogyRequest,
    producer: ContentProducer = Depends(get_producer),
):
    try:
        return await discovery.analyze_andragogy(producer, request.content, request.kind)
    except GenerationError as e:
        raise http_error(e)


# ======================== Part regeneration ========================

@generation_router.post("/lesson/regenerate", response_model=PatchResponse, summary="Regenerate one part of a lesson plan")
async def regenerate_lesson_part(
    request: RegenerateLessonPartRequest,
    producer: ContentProducer = Depends(get_producer),
):
    """
    Regenerates a single section of a lesson plan, or a single exercise / quiz
    question when `index` is given. The rest of the lesson plan is returned untouched.
    """
    dispatcher = RegenerationDispatcher(producer, DocumentKind.LESSON_PLAN)
    try:
        address = PartAddress(field=request.part, index=request.index)
        patch = await dispatcher.regenerate(request.lessonPlan, address, request.instructions,
                                            _lesson_context(request))
    except GenerationError as e:
        raise http_error(e)
    return PatchResponse(patch=patch, document=merge_patch(request.lessonPlan, patch))


@generation_router.post("/lesson/new-part", response_model=NewItemResponse, summary="Add an exercise or a quiz question")
async def add_lesson_part(
    request: NewLessonPartRequest,
    producer: ContentProducer = Depends(get_producer),
):
    dispatcher = RegenerationDispatcher(producer, DocumentKind.LESSON_PLAN)
    try:
        item = await dispatcher.generate_new_list_item(request.lessonPlan, request.part, _lesson_context(request))
    except GenerationError as e:
        raise http_error(e)

    field = PartAddress(field=request.part).field
    document = merge_patch(request.lessonPlan, {field: [*(request.lessonPlan.get(field) or []), item]})
    return NewItemResponse(item=item, document=document)


@generation_router.post("/project/regenerate", response_model=PatchResponse, summary="Regenerate one part of a capstone project")
async def regenerate_project_part(
    request: RegenerateProjectPartRequest,
    producer: ContentProducer = Depends(get_producer),
):
    project = dump_project(request.project)
    dispatcher = RegenerationDispatcher(producer, DocumentKind.CAPSTONE_PROJECT)
    try:
        patch = await dispatcher.regenerate(project, PartAddress(field=request.part, index=request.index),
                                            request.instructions, {"project": project})
    except GenerationError as e:
        raise http_error(e)
    return PatchResponse(patch=patch, document=merge_patch(project, patch))


@generation_router.post("/project/files/apply-instructions", response_model=PatchResponse,
                        summary="Rewrite the project files from instructions")
async def apply_file_instructions(
    request: ApplyInstructionsRequest,
    producer: ContentProducer = Depends(get_producer),
):
    project = dump_project(request.project)
    dispatcher = RegenerationDispatcher(producer, DocumentKind.CAPSTONE_PROJECT)
    try:
        tree = await dispatcher.regenerate_file_structure(project, request.instructions)
    except GenerationError as e:
        raise http_error(e)
    patch = {"fileStructure": tree}
    return PatchResponse(patch=patch, document=merge_patch(project, patch))


# ======================== File tree edits ========================

def _tree_response(manager: file_manager.ProjectFileManager, applied: bool, message: Optional[str] = None,
                   path: Optional[List[str]] = None) -> TreeEditResponse:
    return TreeEditResponse(applied=applied, message=message, path=path, project=manager.project)


def _file_manager(project) -> file_manager.ProjectFileManager:
    data = dump_project(project)
    if data.get("fileStructure") is None:
        raise HTTPException(status_code=409, detail="The project has no file structure yet.")
    return file_manager.ProjectFileManager(data)


@generation_router.post("/project/files/create", response_model=TreeEditResponse)
async def create_file_node(request: FileCreateRequest):
    manager = _file_manager(request.project)
    path = manager.create(request.parentPath, request.type)
    if path is None:
        return _tree_response(manager, False, "The parent folder does not exist.")
    return _tree_response(manager, True, path=path)


@generation_router.post("/project/files/rename", response_model=TreeEditResponse)
async def rename_file_node(request: FileRenameRequest):
    messages = []
    manager = _file_manager(request.project)
    manager.notify = messages.append
    applied = manager.rename(request.path, request.newName)
    return _tree_response(manager, applied, messages[-1] if messages else None)


@generation_router.post("/project/files/delete", response_model=TreeEditResponse)
async def delete_file_node(request: FileDeleteRequest):
    messages = []
    manager = _file_manager(request.project)
    manager.notify = messages.append
    applied = manager.delete(request.path)
    return _tree_response(manager, applied, messages[-1] if messages else None)


# ======================== Prompt suggestions ========================

@generation_router.post("/suggestions", response_model=Optional[PromptSuggestion])
async def suggest_prompt(
    request: SuggestionRequest,
    producer: ContentProducer = Depends(get_producer),
):
    """Returns null when the prompt is too short or no suggestion could be produced."""
    return await get_prompt_suggestion(producer, request.prompt, request.kind)


# ======================== Background environment generation ========================

@generation_router.post("/project/environment/jobs", response_model=JobResponse, status_code=202)
async def start_environment_job(
    request: ProjectRequest,
    x_gemini_api_key: Optional[str] = Header(None, alias="X-Gemini-Api-Key"),
):
    task = generate_environment_task.delay(dump_project(request.project), x_gemini_api_key)
    return JobResponse(task_id=task.id, status="PENDING")


@generation_router.get("/project/environment/jobs/{task_id}", response_model=JobResponse)
async def get_environment_job(task_id: str):
    result = AsyncResult(task_id, app=celery_app)
    response = JobResponse(task_id=task_id, status=result.status)
    if result.status == "PROGRESS" and isinstance(result.info, dict):
        response.progress = result.info.get("progress")
        response.message = result.info.get("message")
    elif result.successful():
        response.result = result.result
        response.progress = 1.0
    elif result.failed():
        response.message = str(result.result)
    return response


# ======================== Content library ========================

@library_router.get("", response_model=List[ContentItem])
async def list_library(db: AsyncConnection = Depends(get_app_db_connection)):
    return await library_service.list_content_items(db)


@library_router.post("", response_model=ContentItem, status_code=201)
async def add_to_library(item: ContentItem, db: AsyncConnection = Depends(get_app_db_connection)):
    try:
        return await library_service.save_content_item(db, item)
    except Exception as e:
        logger.error(f"Error adding content item: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@library_router.get("/{item_id}", response_model=ContentItem)
async def get_library_item(item_id: int, db: AsyncConnection = Depends(get_app_db_connection)):
    item = await library_service.get_content_item(db, item_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Content item not found.")
    return item


@library_router.put("/{item_id}", response_model=ContentItem)
async def update_library_item(item_id: int, item: ContentItem, db: AsyncConnection = Depends(get_app_db_connection)):
    updated = await library_service.update_content_item(db, item_id, item)
    if updated is None:
        raise HTTPException(status_code=404, detail="Content item not found.")
    return updated


@library_router.delete("/{item_id}", status_code=204)
async def delete_library_item(item_id: int, db: AsyncConnection = Depends(get_app_db_connection)):
    if not await library_service.delete_content_item(db, item_id):
        raise HTTPException(status_code=404, detail="Content item not found.")
