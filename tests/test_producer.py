"""
Tests for the Gemini content producer, with the chat model replaced by a local runnable.
"""

import asyncio
from typing import List, get_args

import pytest
from langchain_core.prompts import ChatPromptTemplate
from langchain_core.runnables import RunnableLambda

from src.creatorai.errors import MalformedResponse, OverloadedFailure
from src.creatorai.config import ANALYSIS_MAX_CHARS
from src.creatorai.models import AndragogicalAnalysis, CurriculaData, Exercise, FileContent, ProjectFilesData
from src.creatorai.parts import DocumentKind
from src.creatorai.langGraph import producer as producer_module
from src.creatorai.langGraph.producer import GeminiContentProducer, Operation, PartSpec, part_model
from src.creatorai.langGraph.prompts import Prompts


class FakeStructuredLLM:
    """Stands in for ChatGoogleGenerativeAI; records the schema it is bound to."""

    def __init__(self, answer):
        self.answer = answer
        self.bound = []
        self.prompts = []

    def with_structured_output(self, schema, **kwargs):
        self.bound.append((schema, kwargs))

        def respond(prompt_value):
            self.prompts.append(prompt_value.to_string())
            if isinstance(self.answer, Exception):
                raise self.answer
            return self.answer

        return RunnableLambda(respond)


@pytest.fixture
def fake_llm(monkeypatch):
    def install(answer):
        llm = FakeStructuredLLM(answer)
        monkeypatch.setattr(producer_module, "get_llm", lambda **kwargs: llm)
        return llm
    return install


class TestPartModel:
    def test_scalar_text_field(self):
        model = part_model(DocumentKind.LESSON_PLAN, "activation")
        assert model(activation="Warm-up").model_dump() == {"activation": "Warm-up"}

    def test_optional_project_field_is_required_in_the_part(self):
        model = part_model(DocumentKind.CAPSTONE_PROJECT, "constraints")
        assert model.model_fields["constraints"].annotation == List[str]

    def test_list_field(self):
        model = part_model(DocumentKind.LESSON_PLAN, "exercises")
        assert get_args(model.model_fields["exercises"].annotation) == (Exercise,)


class TestRequestBuilding:
    @pytest.mark.parametrize("name", [n for n in vars(Prompts) if n.isupper()])
    def test_every_template_variable_is_provided(self, name):
        template = ChatPromptTemplate.from_template(getattr(Prompts, name))
        variables = GeminiContentProducer().build_variables(
            PartSpec(operation=Operation.GENERATE_PART, document=DocumentKind.LESSON_PLAN, field="overview"), {})
        assert set(template.input_variables) <= set(variables)

    def test_special_files_use_their_own_templates(self):
        producer = GeminiContentProducer()

        def template_for(path):
            return producer._template(PartSpec(operation=Operation.FILE_CONTENT, path=path))

        assert template_for(["README.md"]) == Prompts.README_CONTENT
        assert template_for(["setup.md"]) == Prompts.README_CONTENT
        assert template_for(["notebooks", "eda.ipynb"]) == Prompts.NOTEBOOK_CONTENT
        assert template_for(["docs", "README.md"]) == Prompts.FILE_CONTENT

    def test_schema_for_list_item_regeneration(self):
        spec = PartSpec(operation=Operation.REGENERATE_PART, document=DocumentKind.LESSON_PLAN,
                        field="exercises", index=0)
        assert GeminiContentProducer()._schema(spec) is Exercise

    @pytest.mark.parametrize("operation, schema, template", [
        (Operation.GENERATE_CURRICULA, CurriculaData, Prompts.GENERATE_CURRICULA),
        (Operation.ANALYZE_ANDRAGOGY, AndragogicalAnalysis, Prompts.ANALYZE_ANDRAGOGY),
    ])
    def test_whole_document_operations(self, operation, schema, template):
        producer = GeminiContentProducer()
        spec = PartSpec(operation=operation)
        assert producer._schema(spec) is schema
        assert producer._template(spec) == template

    def test_analysis_content_is_truncated(self):
        variables = GeminiContentProducer().build_variables(
            PartSpec(operation=Operation.ANALYZE_ANDRAGOGY), {"content": "x" * (ANALYSIS_MAX_CHARS + 50),
                                                            "kind": "project"})
        assert len(variables["content"]) == ANALYSIS_MAX_CHARS
        assert variables["content_label"] == "capstone project"


class TestProduce:
    def test_part_is_returned_as_dict(self, fake_llm):
        schema = part_model(DocumentKind.LESSON_PLAN, "overview")
        llm = fake_llm(schema(overview="## Purpose"))
        spec = PartSpec(operation=Operation.GENERATE_PART, document=DocumentKind.LESSON_PLAN, field="overview")

        data = asyncio.run(GeminiContentProducer().produce(spec, {"lesson_title": "Joins"}))

        assert data == {"overview": "## Purpose"}
        assert llm.bound[0] == (schema, {})
        assert 'lesson "Joins"' in llm.prompts[0]

    def test_file_plan_uses_json_mode_and_normalises_nodes(self, fake_llm):
        llm = fake_llm({"fileStructure": [{"name": "src", "type": "folder"}, {"name": "README.md", "type": "file"}]})
        spec = PartSpec(operation=Operation.PLAN_FILES, document=DocumentKind.CAPSTONE_PROJECT)

        data = asyncio.run(GeminiContentProducer().produce(spec, {"project": {"title": "Demo"}}))

        assert data == {"fileStructure": [
            {"name": "src", "type": "folder", "children": []},
            {"name": "README.md", "type": "file", "content": ""},
        ]}
        assert llm.bound[0] == (ProjectFilesData, {"method": "json_mode"})

    def test_file_content_reports_progress(self, fake_llm):
        fake_llm(FileContent(content="print('hi')"))
        reports = []
        spec = PartSpec(operation=Operation.FILE_CONTENT, document=DocumentKind.CAPSTONE_PROJECT,
                        path=["src", "main.py"])

        data = asyncio.run(GeminiContentProducer().produce(spec, {"project": {"title": "Demo"}},
                                                           lambda f, m: reports.append(f)))
        assert data == {"content": "print('hi')"}
        assert reports == [0.5, 1]

    def test_empty_structured_output_is_malformed(self, fake_llm):
        fake_llm(None)
        spec = PartSpec(operation=Operation.SUGGEST_PROMPT)
        with pytest.raises(MalformedResponse):
            asyncio.run(GeminiContentProducer().produce(spec, {"prompt": "a course about sql"}))

    def test_model_errors_are_classified(self, fake_llm):
        fake_llm(RuntimeError("503 UNAVAILABLE: The model is overloaded."))
        spec = PartSpec(operation=Operation.GENERATE_PART, document=DocumentKind.LESSON_PLAN, field="overview")
        with pytest.raises(OverloadedFailure):
            asyncio.run(GeminiContentProducer().produce(spec, {}))
