"""Direct tool-call envelope: {tool, params} in, {result} or {error} out"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from ..services.dispatcher import ToolDispatcher
from ..services.errors import DocmostMCPError, ProtocolError
from .dependencies import get_dispatcher, read_json_body
from .models import ToolCallError, ToolCallResponse, ToolCatalogResponse

router = APIRouter(prefix="/mcp", tags=["tools"])
logger = logging.getLogger(__name__)


@router.get("/tools", response_model=ToolCatalogResponse, operation_id="list_tools")
async def list_tools(
    dispatcher: ToolDispatcher = Depends(get_dispatcher),  # noqa: B008
) -> ToolCatalogResponse:
    """List the tools visible under the current read-only policy."""
    return ToolCatalogResponse(tools=dispatcher.visible_tools().catalog())


@router.post(
    "/tool-call",
    response_model=ToolCallResponse,
    responses={400: {"model": ToolCallError}},
    operation_id="call_tool",
)
async def call_tool(
    request: Request,
    dispatcher: ToolDispatcher = Depends(get_dispatcher),  # noqa: B008
):
    """Invoke a tool with the direct envelope.

    Every failure kind (validation, policy, unknown tool, backend) collapses
    into a 400 carrying only the message.
    """
    try:
        body = await read_json_body(request)
        if not isinstance(body, dict):
            raise ProtocolError("Request body must be a JSON object.")
        tool = body.get("tool")
        if not tool:
            raise ProtocolError('The "tool" field is required.')
        params = body.get("params")
        result = await dispatcher.invoke(tool, {} if params is None else params)
        return ToolCallResponse(result=result)
    except DocmostMCPError as e:
        logger.info(f"Tool call failed ({type(e).__name__}): {e.message}")
        return JSONResponse(status_code=400, content=ToolCallError(error=e.message).model_dump())
    except Exception as e:
        logger.exception(f"Unexpected error during tool call: {e}")
        return JSONResponse(status_code=400, content=ToolCallError(error=str(e)).model_dump())
