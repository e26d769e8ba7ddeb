# in dependencies.py
import uuid
from typing import Dict, Optional, Tuple

from fastapi import Header, HTTPException

from src.creatorai.errors import (
    GenerationError, OverloadedFailure, ProducerFailure, StaleAddress, UnknownPart, user_message,
)
from src.creatorai.langGraph.producer import ContentProducer, GeminiContentProducer
from src.creatorai.langGraph.session import CancellationToken

# Live streaming sessions, by id, so they can be cancelled from another request
SESSIONS: Dict[str, CancellationToken] = {}


def get_producer(x_gemini_api_key: Optional[str] = Header(None, alias="X-Gemini-Api-Key")) -> ContentProducer:
    return GeminiContentProducer(api_key=x_gemini_api_key)


def open_session() -> Tuple[str, CancellationToken]:
    session_id = str(uuid.uuid4())
    token = CancellationToken()
    SESSIONS[session_id] = token
    return session_id, token


def cancel_session(session_id: str) -> bool:
    token = SESSIONS.get(session_id)
    if token is None:
        return False
    token.cancel()
    return True


def close_session(session_id: str) -> None:
    SESSIONS.pop(session_id, None)


def http_error(e: Exception) -> HTTPException:
    if isinstance(e, OverloadedFailure):
        return HTTPException(status_code=503, detail=user_message(e))
    if isinstance(e, ProducerFailure):
        return HTTPException(status_code=502, detail=user_message(e))
    if isinstance(e, StaleAddress):
        return HTTPException(status_code=409, detail=str(e))
    if isinstance(e, UnknownPart):
        return HTTPException(status_code=422, detail=str(e))
    if isinstance(e, GenerationError):
        return HTTPException(status_code=500, detail=user_message(e))
    return HTTPException(status_code=500, detail=str(e))
