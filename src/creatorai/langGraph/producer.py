"""
The content producer: the single seam between the generation engine and the model.

The engine describes what it needs with a `PartSpec` plus a context dict and
receives plain JSON-shaped data back. `GeminiContentProducer` fulfils the
request with a LangChain prompt piped into a Gemini model bound to a pydantic
schema; tests substitute an in-memory producer.
"""
import logging
from enum import Enum
from functools import lru_cache
from typing import Any, Callable, Dict, List, Optional, Protocol, Type, Union, get_args, get_origin

from langchain_core.prompts import ChatPromptTemplate
from pydantic import BaseModel, Field, create_model

from src.creatorai.config import ANALYSIS_MAX_CHARS, API_MODELS
from src.creatorai.errors import GenerationError, MalformedResponse, classify_producer_error
from src.creatorai.file_tree import join_path
from src.creatorai.models import (
    AndragogicalAnalysis, CapstoneProject, CurriculaData, FileContent, LessonPlan, ProjectFilesData, ProjectIdeasData,
    PromptSuggestion, VariedCurriculumOutline, dump_tree,
)
from src.creatorai.parts import LIST_ITEM_MODELS, DocumentKind, humanize_field
from src.creatorai.langGraph.prompts import FIELD_GUIDELINES, Prompts
from src.creatorai.langGraph.utils import get_llm, render_tree, to_prompt_json

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float, str], None]


class Operation(str, Enum):
    GENERATE_PART = "generate_part"
    REGENERATE_PART = "regenerate_part"
    NEW_LIST_ITEM = "new_list_item"
    PLAN_FILES = "plan_files"
    FILE_CONTENT = "file_content"
    REGENERATE_FILES = "regenerate_files"
    SUGGEST_PROMPT = "suggest_prompt"
    GENERATE_CURRICULA = "generate_curricula"
    GENERATE_PROJECT_IDEAS = "generate_project_ideas"
    ANALYZE_ANDRAGOGY = "analyze_andragogy"
    VARY_CURRICULUM = "vary_curriculum"


class PartSpec(BaseModel):
    """What to produce. `path` is only used by file operations, `index` by list items."""
    operation: Operation
    document: Optional[DocumentKind] = None
    field: Optional[str] = None
    index: Optional[int] = None
    path: Optional[List[str]] = None
    instructions: Optional[str] = None


class ContentProducer(Protocol):
    async def produce(self, spec: PartSpec, context: Dict[str, Any],
                      on_progress: Optional[ProgressCallback] = None) -> Dict[str, Any]:
        ...


DOCUMENT_MODELS: Dict[DocumentKind, Type[BaseModel]] = {
    DocumentKind.LESSON_PLAN: LessonPlan,
    DocumentKind.CAPSTONE_PROJECT: CapstoneProject,
}

DOCUMENT_LABELS = {
    DocumentKind.LESSON_PLAN: "lesson plan",
    DocumentKind.CAPSTONE_PROJECT: "capstone project",
}

# Operations on whole documents rather than on one part of a document
WHOLE_DOCUMENT_SCHEMAS: Dict[Operation, Type[BaseModel]] = {
    Operation.SUGGEST_PROMPT: PromptSuggestion,
    Operation.GENERATE_CURRICULA: CurriculaData,
    Operation.GENERATE_PROJECT_IDEAS: ProjectIdeasData,
    Operation.ANALYZE_ANDRAGOGY: AndragogicalAnalysis,
    Operation.VARY_CURRICULUM: VariedCurriculumOutline,
}


def _strip_optional(annotation: Any) -> Any:
    if get_origin(annotation) is Union:
        args = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


@lru_cache(maxsize=None)
def part_model(kind: DocumentKind, field: str) -> Type[BaseModel]:
    """A one-field schema, e.g. ``{"activation": str}``, for single-part requests."""
    source = DOCUMENT_MODELS[kind].model_fields[field]
    annotation = _strip_optional(source.annotation)
    description = source.description or FIELD_GUIDELINES.get(field, "")
    return create_model(f"{field[0].upper()}{field[1:]}Part",
                        **{field: (annotation, Field(description=description))})


def _is_special_doc(path: List[str]) -> bool:
    return len(path) == 1 and path[0].lower() in ("readme.md", "setup.md")


class GeminiContentProducer:
    def __init__(self, api_key: Optional[str] = None):
        self.api_key = api_key

    # --- request building ---

    def _model_name(self, spec: PartSpec) -> str:
        if spec.operation == Operation.SUGGEST_PROMPT:
            return API_MODELS["suggestion"]
        if spec.operation in (Operation.GENERATE_CURRICULA, Operation.VARY_CURRICULUM):
            return API_MODELS["generation"]
        if spec.document == DocumentKind.LESSON_PLAN:
            return API_MODELS["generation"]
        return API_MODELS["project"]

    def _schema(self, spec: PartSpec) -> Type[BaseModel]:
        op = spec.operation
        if op in (Operation.PLAN_FILES, Operation.REGENERATE_FILES):
            return ProjectFilesData
        if op == Operation.FILE_CONTENT:
            return FileContent
        if op in WHOLE_DOCUMENT_SCHEMAS:
            return WHOLE_DOCUMENT_SCHEMAS[op]
        if op == Operation.NEW_LIST_ITEM or (op == Operation.REGENERATE_PART and spec.index is not None):
            return LIST_ITEM_MODELS[spec.field]
        return part_model(spec.document, spec.field)

    def _template(self, spec: PartSpec) -> str:
        op = spec.operation
        if op == Operation.GENERATE_PART:
            if spec.document == DocumentKind.LESSON_PLAN:
                return Prompts.GENERATE_LESSON_PART
            return Prompts.GENERATE_PROJECT_PART
        if op == Operation.REGENERATE_PART:
            return Prompts.REGENERATE_PART if spec.index is None else Prompts.REGENERATE_LIST_ITEM
        if op == Operation.NEW_LIST_ITEM:
            return Prompts.NEW_LIST_ITEM
        if op == Operation.PLAN_FILES:
            return Prompts.PLAN_FILES
        if op == Operation.REGENERATE_FILES:
            return Prompts.REGENERATE_FILES
        if op == Operation.FILE_CONTENT:
            if _is_special_doc(spec.path):
                return Prompts.README_CONTENT
            if spec.path[-1].lower().endswith(".ipynb"):
                return Prompts.NOTEBOOK_CONTENT
            return Prompts.FILE_CONTENT
        if op == Operation.GENERATE_CURRICULA:
            return Prompts.GENERATE_CURRICULA
        if op == Operation.GENERATE_PROJECT_IDEAS:
            return Prompts.GENERATE_PROJECT_IDEAS
        if op == Operation.ANALYZE_ANDRAGOGY:
            return Prompts.ANALYZE_ANDRAGOGY
        if op == Operation.VARY_CURRICULUM:
            return Prompts.VARY_CURRICULUM
        return Prompts.PROMPT_SUGGESTION

    def build_variables(self, spec: PartSpec, context: Dict[str, Any]) -> Dict[str, Any]:
        project = context.get("project") or {}
        # the tree is rendered separately
        project_brief = {k: v for k, v in project.items() if k != "fileStructure"}
        variables = {
            "field": spec.field or "",
            "field_label": humanize_field(spec.field) if spec.field else "",
            "guideline": FIELD_GUIDELINES.get(spec.field or "", ""),
            "document_label": DOCUMENT_LABELS.get(spec.document, "document"),
            "document_json": to_prompt_json(context.get("document")),
            "curriculum_json": to_prompt_json(context.get("curriculum")),
            "options_json": to_prompt_json(context.get("options")),
            "lesson_title": context.get("lesson_title") or "",
            "previous_lessons": to_prompt_json(context.get("previous_lessons")),
            "instructions": spec.instructions or "",
            "item_json": to_prompt_json(context.get("item")),
            "position": (spec.index or 0) + 1,
            "project_json": to_prompt_json(project_brief),
            "file_tree": render_tree(context.get("tree") or project.get("fileStructure")),
            "file_path": join_path(spec.path) if spec.path else "",
            "prompt": context.get("prompt") or "",
            "kind": context.get("kind") or "course",
            "topic": context.get("topic") or "",
            "filter_instructions": context.get("filter_instructions") or "",
            "lesson_breakdown": context.get("lesson_breakdown") or "",
            "industry_label": context.get("industry_label") or "for the tech industry in general",
            "content": (context.get("content") or "")[:ANALYSIS_MAX_CHARS],
            "content_label": "capstone project" if context.get("kind") == "project" else "educational course",
            "original_lesson_title": context.get("original_lesson_title") or "",
        }
        if spec.operation == Operation.REGENERATE_FILES:
            # full contents are needed to rewrite the files
            variables["file_tree"] = to_prompt_json(project.get("fileStructure"))
        return variables

    # --- call ---

    async def produce(self, spec: PartSpec, context: Dict[str, Any],
                      on_progress: Optional[ProgressCallback] = None) -> Dict[str, Any]:
        stage = spec.field or (join_path(spec.path) if spec.path else spec.operation.value)
        schema = self._schema(spec)
        try:
            llm = get_llm(api_key=self.api_key, model=self._model_name(spec))
            if spec.operation in (Operation.PLAN_FILES, Operation.REGENERATE_FILES):
                # recursive schemas are requested as plain JSON and validated here
                structured_llm = llm.with_structured_output(schema, method="json_mode")
            else:
                structured_llm = llm.with_structured_output(schema)
            prompt = ChatPromptTemplate.from_template(self._template(spec))
            chain = prompt | structured_llm

            template_vars = self.build_variables(spec, context)
            prompt_vars = {k: template_vars[k] for k in prompt.input_variables}

            if on_progress and spec.operation == Operation.FILE_CONTENT:
                on_progress(0.5, f"Generating {stage}...")
            logger.info("--- Producing %s for '%s' ---", spec.operation.value, stage)
            response = await chain.ainvoke(prompt_vars)

            if response is None:
                raise MalformedResponse("JSON_PARSE_ERROR: the model returned no structured output")
            if isinstance(response, BaseModel):
                data = response
            else:
                data = schema.model_validate(response)
        except GenerationError:
            raise
        except Exception as e:
            raise classify_producer_error(e, stage) from e

        if on_progress and spec.operation == Operation.FILE_CONTENT:
            on_progress(1, f"Finished {stage}")

        if isinstance(data, ProjectFilesData):
            return {"fileStructure": dump_tree(data.fileStructure)}
        return data.model_dump()
