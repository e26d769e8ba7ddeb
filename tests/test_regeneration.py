"""
Tests for the regeneration dispatcher: single-part patches and address checks.
"""

import asyncio
import copy

import pytest

from src.creatorai.errors import OverloadedFailure, ProducerFailure, StaleAddress, UnknownPart
from src.creatorai.parts import DocumentKind, PartAddress
from src.creatorai.langGraph.producer import Operation
from src.creatorai.langGraph.regeneration_graph import RegenerationDispatcher, merge_patch


def lesson_dispatcher(producer):
    return RegenerationDispatcher(producer, DocumentKind.LESSON_PLAN)


class TestListItemRegeneration:
    def test_only_the_addressed_item_changes(self, producer_factory, sample_lesson_plan):
        before = copy.deepcopy(sample_lesson_plan)
        dispatcher = lesson_dispatcher(producer_factory())

        patch = asyncio.run(dispatcher.regenerate(sample_lesson_plan, PartAddress(field="exercises", index=1),
                                                  "make it harder"))

        exercises = patch["exercises"]
        assert list(patch) == ["exercises"]
        assert exercises[0] is sample_lesson_plan["exercises"][0]
        assert exercises[2] is sample_lesson_plan["exercises"][2]
        assert exercises[1]["problem"] == "problem new"
        assert sample_lesson_plan == before

    def test_producer_sees_the_item_and_instructions(self, producer_factory, sample_lesson_plan):
        producer = producer_factory()
        asyncio.run(lesson_dispatcher(producer).regenerate(sample_lesson_plan, {"field": "quiz", "index": 1},
                                                           "use a real dataset"))
        spec, context = producer.calls[0]
        assert spec.operation == Operation.REGENERATE_PART
        assert spec.index == 1
        assert spec.instructions == "use a real dataset"
        assert context["item"] == sample_lesson_plan["quiz"][1]

    def test_legacy_alias_is_accepted(self, producer_factory, sample_lesson_plan):
        patch = asyncio.run(lesson_dispatcher(producer_factory()).regenerate(
            sample_lesson_plan, {"field": "exercise", "index": 0}))
        assert "exercises" in patch

    def test_invalid_item_is_a_producer_failure(self, producer_factory, sample_lesson_plan):
        producer = producer_factory(responses={"quiz": {"question": "only a question"}})
        with pytest.raises(ProducerFailure):
            asyncio.run(lesson_dispatcher(producer).regenerate(sample_lesson_plan, PartAddress(field="quiz", index=0)))


class TestScalarRegeneration:
    def test_patch_holds_only_the_field(self, producer_factory, sample_lesson_plan):
        patch = asyncio.run(lesson_dispatcher(producer_factory()).regenerate(
            sample_lesson_plan, PartAddress(field="activation")))
        assert patch == {"activation": "activation text"}

        merged = merge_patch(sample_lesson_plan, patch)
        assert merged["activation"] == "activation text"
        assert merged["quiz"] is sample_lesson_plan["quiz"]

    def test_capstone_field(self, producer_factory, sample_project):
        dispatcher = RegenerationDispatcher(producer_factory(), DocumentKind.CAPSTONE_PROJECT)
        patch = asyncio.run(dispatcher.regenerate(sample_project, PartAddress(field="deliverables")))
        assert patch == {"deliverables": ["deliverables 1", "deliverables 2"]}

    def test_failure_propagates_classified(self, producer_factory, sample_lesson_plan):
        producer = producer_factory(fail_at="overview", error=RuntimeError("429 rate limit"))
        with pytest.raises(OverloadedFailure):
            asyncio.run(lesson_dispatcher(producer).regenerate(sample_lesson_plan, PartAddress(field="overview")))


class TestAddressErrors:
    def test_index_out_of_range_is_stale(self, producer_factory, sample_lesson_plan):
        producer = producer_factory()
        with pytest.raises(StaleAddress):
            asyncio.run(lesson_dispatcher(producer).regenerate(sample_lesson_plan, PartAddress(field="quiz", index=2)))
        assert producer.calls == []

    def test_missing_list_is_stale(self, producer_factory, sample_lesson_plan):
        document = {k: v for k, v in sample_lesson_plan.items() if k != "exercises"}
        with pytest.raises(StaleAddress):
            asyncio.run(lesson_dispatcher(producer_factory()).regenerate(
                document, PartAddress(field="exercises", index=0)))

    def test_unknown_field(self, producer_factory, sample_lesson_plan):
        with pytest.raises(UnknownPart):
            asyncio.run(lesson_dispatcher(producer_factory()).regenerate(
                sample_lesson_plan, PartAddress(field="deliverables")))

    def test_index_on_scalar_field(self, producer_factory, sample_lesson_plan):
        with pytest.raises(UnknownPart):
            asyncio.run(lesson_dispatcher(producer_factory()).regenerate(
                sample_lesson_plan, PartAddress(field="activation", index=0)))

    @pytest.mark.parametrize("field", ["outcome", "outline"])
    def test_lesson_outcome_and_outline_are_not_plan_parts(self, producer_factory, field, sample_lesson_plan):
        producer = producer_factory()
        with pytest.raises(UnknownPart):
            asyncio.run(lesson_dispatcher(producer).regenerate(sample_lesson_plan, PartAddress(field=field)))
        assert producer.calls == []


class TestNewListItem:
    def test_returns_item_without_touching_document(self, producer_factory, sample_lesson_plan):
        before = copy.deepcopy(sample_lesson_plan)
        item = asyncio.run(lesson_dispatcher(producer_factory()).generate_new_list_item(sample_lesson_plan, "quiz"))
        assert item["question"] == "question new"
        assert sample_lesson_plan == before

    def test_scalar_field_is_rejected(self, producer_factory, sample_lesson_plan):
        with pytest.raises(UnknownPart):
            asyncio.run(lesson_dispatcher(producer_factory()).generate_new_list_item(sample_lesson_plan, "overview"))


def test_in_flight_tracking(producer_factory, sample_lesson_plan):
    seen = []
    dispatcher = None

    def check(count, spec):
        seen.append(dispatcher.is_regenerating(PartAddress(field="quiz", index=0)))
        seen.append(dispatcher.is_regenerating(PartAddress(field="quiz", index=1)))

    dispatcher = lesson_dispatcher(producer_factory(on_call=check))
    asyncio.run(dispatcher.regenerate(sample_lesson_plan, PartAddress(field="quiz", index=0)))

    assert seen == [True, False]
    assert not dispatcher.is_regenerating({"field": "quiz", "index": 0})


def test_regenerate_file_structure(producer_factory, sample_project):
    reports = []
    dispatcher = RegenerationDispatcher(producer_factory(), DocumentKind.CAPSTONE_PROJECT)
    tree = asyncio.run(dispatcher.regenerate_file_structure(sample_project, "add an app.py",
                                                            lambda f, m: reports.append(f)))
    assert [n["name"] for n in tree] == ["README.md", "SETUP.md", "app.py"]
    assert reports == [0, 1]
