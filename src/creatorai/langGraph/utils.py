import json
from typing import Any, List, Optional

from langchain_google_genai import ChatGoogleGenerativeAI

from src.creatorai.config import API_MODELS, GEMINI_API_KEY, LLM_TEMPERATURE


def get_llm(api_key: str = None, model: str = None, temperature: float = None) -> ChatGoogleGenerativeAI:
    if not api_key:
        api_key = GEMINI_API_KEY
    if not api_key:
        raise RuntimeError("Please set the GEMINI_API_KEY environment variable or send X-Gemini-Api-Key.")
    return ChatGoogleGenerativeAI(
        model=model or API_MODELS["generation"],
        google_api_key=api_key,
        temperature=LLM_TEMPERATURE if temperature is None else temperature,
    )


def to_prompt_json(value: Any) -> str:
    if value is None or value == "" or value == [] or value == {}:
        return "(none)"
    return json.dumps(value, indent=2, ensure_ascii=False)


def render_tree(nodes: Optional[List[dict]], depth: int = 0) -> str:
    """Indented listing of a file tree, without file contents, for prompts."""
    if not nodes:
        return "(empty)" if depth == 0 else ""
    lines = []
    for node in nodes:
        marker = "/" if node.get("type") == "folder" else ""
        lines.append(f"{'  ' * depth}- {node.get('name')}{marker}")
        if node.get("type") == "folder":
            child_lines = render_tree(node.get("children"), depth + 1)
            if child_lines:
                lines.append(child_lines)
    return "\n".join(lines)
