"""
Regeneration of a single addressed part of a document.

The work is a three-node graph: resolve the address against the current
document, ask the producer for the part, validate the answer. The
dispatcher never touches the caller's document; it returns a patch the caller
merges with `merge_patch`.
"""
import logging
from typing import Any, Dict, Optional, Set, TypedDict, Union

from langchain_core.runnables import RunnableConfig
from langgraph.graph import END, StateGraph
from langgraph.pregel import Pregel
from pydantic import ValidationError

from src.creatorai.errors import MalformedResponse, ProducerFailure, StaleAddress, UnknownPart
from src.creatorai.file_tree import rename_pdf_to_md
from src.creatorai.parts import LIST_ITEM_MODELS, DocumentKind, FieldKind, PartAddress, field_kind, resolve_part_id
from src.creatorai.langGraph.producer import ContentProducer, Operation, PartSpec
from src.creatorai.langGraph.session import ProgressSink, request_part

logger = logging.getLogger(__name__)

REGENERATE = "regenerate"
NEW_ITEM = "new_item"


class RegenerationState(TypedDict, total=False):
    kind: str
    mode: str
    document: Dict[str, Any]
    field: str
    index: Optional[int]
    instructions: str
    context: Dict[str, Any]
    # filled by the nodes
    spec: Dict[str, Any]
    item: Optional[Dict[str, Any]]
    produced: Dict[str, Any]
    patch: Dict[str, Any]
    new_item: Dict[str, Any]


# --- Nodes ---

def resolve_target_node(state: RegenerationState) -> RegenerationState:
    kind = DocumentKind(state["kind"])
    document = state["document"]
    field, index = state["field"], state.get("index")
    print(f"--- NODE: Resolving '{field}'{'' if index is None else f'[{index}]'} on {kind.value} ---")

    kind_of_field = field_kind(kind, field)
    if kind_of_field is None:
        raise UnknownPart(f"'{field}' is not a part of a {kind.value}.")

    if state["mode"] == NEW_ITEM:
        if kind_of_field != FieldKind.LIST:
            raise UnknownPart(f"'{field}' does not hold a list of items.")
        spec = PartSpec(operation=Operation.NEW_LIST_ITEM, document=kind, field=field)
        return {"spec": spec.model_dump(), "item": None}

    item = None
    if index is not None:
        if kind_of_field != FieldKind.LIST:
            raise UnknownPart(f"'{field}' cannot be addressed by index.")
        items = document.get(field)
        if not isinstance(items, list) or index >= len(items):
            size = len(items) if isinstance(items, list) else 0
            raise StaleAddress(f"{field}[{index}] does not exist (the list has {size} items).")
        item = items[index]

    spec = PartSpec(operation=Operation.REGENERATE_PART, document=kind, field=field, index=index,
                    instructions=state.get("instructions") or "")
    return {"spec": spec.model_dump(), "item": item}


async def produce_part_node(state: RegenerationState, config: RunnableConfig) -> RegenerationState:
    producer: ContentProducer = config["configurable"]["producer"]
    spec = PartSpec(**state["spec"])
    context = {**(state.get("context") or {}), "document": state["document"], "item": state.get("item")}
    produced = await request_part(producer, spec, context, spec.field)
    return {"produced": produced}


def build_patch_node(state: RegenerationState) -> RegenerationState:
    field, index = state["field"], state.get("index")
    produced = state["produced"]

    if state["mode"] == NEW_ITEM or index is not None:
        try:
            item = LIST_ITEM_MODELS[field].model_validate(produced).model_dump()
        except ValidationError as e:
            raise ProducerFailure(f"The new {field} item failed validation: {e}", cause=e) from e
        return {"new_item": item}

    if field not in produced:
        raise MalformedResponse(f"JSON_PARSE_ERROR: response has no '{field}' key")
    return {"patch": {field: produced[field]}}


def build_regeneration_graph() -> Pregel:
    workflow = StateGraph(RegenerationState)

    workflow.add_node("resolve_target", resolve_target_node)
    workflow.add_node("produce_part", produce_part_node)
    workflow.add_node("build_patch", build_patch_node)

    workflow.set_entry_point("resolve_target")
    workflow.add_edge("resolve_target", "produce_part")
    workflow.add_edge("produce_part", "build_patch")
    workflow.add_edge("build_patch", END)

    return workflow.compile()


_regeneration_graph: Pregel | None = None


def get_regeneration_graph() -> Pregel:
    global _regeneration_graph
    if _regeneration_graph is None:
        _regeneration_graph = build_regeneration_graph()
    return _regeneration_graph


# --- Dispatcher ---

def merge_patch(document: Dict[str, Any], patch: Dict[str, Any]) -> Dict[str, Any]:
    """Keys in `patch` replace, every other key is carried over untouched."""
    return {**document, **patch}


class RegenerationDispatcher:
    def __init__(self, producer: ContentProducer, kind: DocumentKind):
        self.producer = producer
        self.kind = DocumentKind(kind)
        self._in_flight: Set[str] = set()

    def is_regenerating(self, address: Union[PartAddress, Dict[str, Any]]) -> bool:
        return resolve_part_id(self._address(address)) in self._in_flight

    @staticmethod
    def _address(address: Union[PartAddress, Dict[str, Any]]) -> PartAddress:
        return address if isinstance(address, PartAddress) else PartAddress(**address)

    async def _run(self, state: RegenerationState, part_id: str) -> RegenerationState:
        self._in_flight.add(part_id)
        try:
            return await get_regeneration_graph().ainvoke(state, {"configurable": {"producer": self.producer}})
        finally:
            self._in_flight.discard(part_id)

    async def regenerate(self, document: Dict[str, Any], address: Union[PartAddress, Dict[str, Any]],
                         instructions: str = "", context: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Regenerates one part and returns the patch to merge.

        For a list element the patch carries the whole list, in which only the
        addressed element is new.
        """
        address = self._address(address)
        state: RegenerationState = {
            "kind": self.kind.value,
            "mode": REGENERATE,
            "document": document,
            "field": address.field,
            "index": address.index,
            "instructions": instructions or "",
            "context": context or {},
        }
        final_state = await self._run(state, resolve_part_id(address))
        if address.index is None:
            return final_state["patch"]

        # only the addressed element is a new object
        items = list(document[address.field])
        items[address.index] = final_state["new_item"]
        return {address.field: items}

    async def generate_new_list_item(self, document: Dict[str, Any], field: str,
                                     context: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Produces one extra item for a list field; the caller appends it."""
        address = PartAddress(field=field)
        state: RegenerationState = {
            "kind": self.kind.value,
            "mode": NEW_ITEM,
            "document": document,
            "field": address.field,
            "index": None,
            "context": context or {},
        }
        final_state = await self._run(state, f"{address.field}-new")
        return final_state["new_item"]

    async def regenerate_file_structure(self, project: Dict[str, Any], instructions: str,
                                        on_progress: Optional[ProgressSink] = None):
        """Applies free-form instructions to the whole file tree and returns the new tree."""
        if on_progress:
            on_progress(0, "Applying instructions to project files...")
        spec = PartSpec(operation=Operation.REGENERATE_FILES, document=DocumentKind.CAPSTONE_PROJECT,
                        instructions=instructions)
        self._in_flight.add("fileStructure")
        try:
            data = await request_part(self.producer, spec, {"project": project}, "fileStructure")
        finally:
            self._in_flight.discard("fileStructure")

        tree = data.get("fileStructure")
        if not isinstance(tree, list):
            raise MalformedResponse("JSON_PARSE_ERROR: response has no 'fileStructure' list")
        if on_progress:
            on_progress(1, "Project files updated.")
        return rename_pdf_to_md(tree)
