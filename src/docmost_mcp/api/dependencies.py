"""Shared request plumbing for the API routers"""

import json
from typing import Any

from fastapi import HTTPException, Request

from ..config import DEFAULT_MAX_BODY_BYTES
from ..services.dispatcher import ToolDispatcher
from ..services.errors import PARSE_ERROR, ProtocolError


async def get_dispatcher(request: Request) -> ToolDispatcher:
    """Get the tool dispatcher from app state

    Raises:
        HTTPException: If the dispatcher was not initialized
    """
    dispatcher = getattr(request.app.state, "dispatcher", None)
    if dispatcher is None:
        raise HTTPException(status_code=500, detail="Tool dispatcher not initialized")
    return dispatcher


async def read_json_body(request: Request) -> Any:
    """Read and decode a JSON body, refusing anything over the configured size.

    An empty body decodes to ``{}``.

    Raises:
        ProtocolError: If the body is too large or is not valid JSON
    """
    limit = getattr(request.app.state, "max_body_bytes", DEFAULT_MAX_BODY_BYTES)
    too_large = ProtocolError("Request body is too large.", details={"limit": limit})

    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > limit:
        raise too_large

    data = bytearray()
    async for chunk in request.stream():
        data.extend(chunk)
        if len(data) > limit:
            raise too_large

    if not data.strip():
        return {}
    try:
        return json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ProtocolError("Request body must be valid JSON.", code=PARSE_ERROR) from e
