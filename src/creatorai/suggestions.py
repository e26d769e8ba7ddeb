"""
Prompt assistance while the user types.

`SuggestionDebouncer` waits for a pause in typing before asking for a
suggestion, and throws away answers that arrive for text the user has since
changed.
"""
import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, Optional

from pydantic import ValidationError

from src.creatorai.config import SUGGESTION_DEBOUNCE_SECONDS, SUGGESTION_MIN_LENGTH
from src.creatorai.errors import GenerationError
from src.creatorai.models import PromptSuggestion
from src.creatorai.langGraph.producer import ContentProducer, Operation, PartSpec
from src.creatorai.langGraph.session import request_part

logger = logging.getLogger(__name__)

SuggestionFetch = Callable[[str, str], Awaitable[Optional[PromptSuggestion]]]


class SuggestionState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    FETCHED = "fetched"
    CANCELLED = "cancelled"


async def get_prompt_suggestion(producer: ContentProducer, prompt: str,
                                kind: str = "course") -> Optional[PromptSuggestion]:
    """One suggestion for `prompt`, or None when it is too short or the model fails."""
    prompt = (prompt or "").strip()
    if len(prompt) < SUGGESTION_MIN_LENGTH:
        return None

    spec = PartSpec(operation=Operation.SUGGEST_PROMPT)
    try:
        data = await request_part(producer, spec, {"prompt": prompt, "kind": kind}, "prompt suggestion")
        return PromptSuggestion.model_validate(data)
    except (GenerationError, ValidationError) as e:
        logger.warning("--- No prompt suggestion: %s ---", e)
        return None


class SuggestionDebouncer:
    def __init__(self, fetch: SuggestionFetch, kind: str = "course",
                 delay: float = SUGGESTION_DEBOUNCE_SECONDS, min_length: int = SUGGESTION_MIN_LENGTH,
                 on_state_change: Optional[Callable[[SuggestionState], None]] = None):
        self.fetch = fetch
        self.kind = kind
        self.delay = delay
        self.min_length = min_length
        self.on_state_change = on_state_change

        self.state = SuggestionState.IDLE
        self.suggestion: Optional[PromptSuggestion] = None
        self._task: Optional[asyncio.Task] = None
        self._generation = 0
        self._block_next_fetch = False

    def _set_state(self, state: SuggestionState) -> None:
        if state != self.state:
            self.state = state
            if self.on_state_change:
                self.on_state_change(state)

    def _cancel_pending(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
            self._set_state(SuggestionState.CANCELLED)
        self._task = None

    def update(self, text: str) -> None:
        """Called on every change of the prompt text. Must run inside an event loop."""
        self._generation += 1
        self.suggestion = None
        self._cancel_pending()

        if self._block_next_fetch:
            self._block_next_fetch = False
            self._set_state(SuggestionState.IDLE)
            return

        if len((text or "").strip()) < self.min_length:
            self._set_state(SuggestionState.IDLE)
            return

        self._set_state(SuggestionState.PENDING)
        self._task = asyncio.get_running_loop().create_task(self._fetch_after_delay(text, self._generation))

    async def _fetch_after_delay(self, text: str, generation: int) -> None:
        await asyncio.sleep(self.delay)
        try:
            result = await self.fetch(text, self.kind)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error("--- Prompt suggestion fetch failed: %s ---", e, exc_info=True)
            result = None

        if generation != self._generation:
            # the text changed while the request was in flight
            return
        self.suggestion = result
        self._set_state(SuggestionState.FETCHED if result is not None else SuggestionState.IDLE)

    def apply_suggestion(self) -> Optional[PromptSuggestion]:
        """Hands out the current suggestion; the text change it causes does not trigger a fetch."""
        applied = self.suggestion
        self.suggestion = None
        self._block_next_fetch = True
        self._set_state(SuggestionState.IDLE)
        return applied

    async def wait(self) -> None:
        """Waits for the pending fetch, if any, to settle."""
        task = self._task
        if task is None:
            return
        await asyncio.wait({task})

    def close(self) -> None:
        self._cancel_pending()
