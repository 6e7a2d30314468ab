"""JSON-RPC envelope (initialize, tools/list, tools/call, ping) over HTTP POST

Replies are always HTTP 200; failures are carried in the ``error`` member.
"""

import json
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from ..services.dispatcher import ToolDispatcher
from ..services.errors import INVALID_REQUEST, METHOD_NOT_FOUND, DocmostMCPError, ProtocolError
from .dependencies import get_dispatcher, read_json_body
from .models import CallToolResult, InitializeResult, RPCError, RPCResponse, TextContent

router = APIRouter(tags=["rpc"])
logger = logging.getLogger(__name__)

RPC_PATHS = ("/", "/mcp", "/rpc", "/mcp/rpc")

# Accepted spellings, first match wins
TOOL_NAME_KEYS = ("name", "tool", "toolName")
TOOL_ARGUMENT_KEYS = ("arguments", "args", "params", "input")


def format_tool_result(result: Any) -> str:
    """Render a tool result as the text of a single content block."""
    if isinstance(result, str):
        return result
    try:
        return json.dumps(result, indent=2, ensure_ascii=False)
    except (TypeError, ValueError):
        return str(result)


def _first_present(params: Dict[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if params.get(key) is not None:
            return params[key]
    return None


async def _call_tool(dispatcher: ToolDispatcher, params: Dict[str, Any]) -> Dict[str, Any]:
    name = _first_present(params, TOOL_NAME_KEYS)
    if not name:
        raise ProtocolError("tools/call requires a tool name.")
    arguments = _first_present(params, TOOL_ARGUMENT_KEYS)
    result = await dispatcher.invoke(name, {} if arguments is None else arguments)
    return CallToolResult(content=[TextContent(text=format_tool_result(result))]).model_dump()


async def handle_rpc_method(dispatcher: ToolDispatcher, method: Any, params: Any) -> Any:
    """Execute one JSON-RPC method and return its ``result`` member.

    Raises:
        ProtocolError: For a missing, unknown or non-string method, or malformed params
        DocmostMCPError: Propagated from tool execution
    """
    if not isinstance(method, str) or not method:
        raise ProtocolError("JSON-RPC request requires a method name.")
    if params is None:
        params = {}
    if not isinstance(params, dict):
        raise ProtocolError("params must be an object.")

    if method == "initialize":
        return InitializeResult().model_dump()
    if method == "tools/list":
        return {"tools": [tool.model_dump() for tool in dispatcher.visible_tools().to_mcp()]}
    if method == "tools/call":
        return await _call_tool(dispatcher, params)
    if method == "ping":
        return {}
    if method in ("notifications/initialized", "initialized"):
        return {}
    raise ProtocolError(f"Method not found: {method}", code=METHOD_NOT_FOUND)


def to_rpc_error(error: Exception) -> RPCError:
    """Keep the error's own code when it has one, else the generic bad-request code."""
    if isinstance(error, DocmostMCPError):
        return RPCError(
            code=error.code if error.code is not None else INVALID_REQUEST,
            message=error.message,
            data={"type": type(error).__name__},
        )
    return RPCError(code=INVALID_REQUEST, message=str(error), data={"type": type(error).__name__})


async def rpc_endpoint(
    request: Request,
    dispatcher: ToolDispatcher = Depends(get_dispatcher),  # noqa: B008
) -> JSONResponse:
    """Handle one JSON-RPC request."""
    request_id = None
    method = None
    try:
        body = await read_json_body(request)
        if not isinstance(body, dict):
            raise ProtocolError("JSON-RPC request must be a JSON object.")
        request_id = body.get("id")
        method = body.get("method")
        result = await handle_rpc_method(dispatcher, method, body.get("params"))
        response = RPCResponse(id=request_id, result=result)
    except DocmostMCPError as e:
        logger.info(f"RPC {method} failed ({type(e).__name__}): {e.message}")
        response = RPCResponse(id=request_id, error=to_rpc_error(e))
    except Exception as e:
        logger.exception(f"Unexpected error during RPC {method}: {e}")
        response = RPCResponse(id=request_id, error=to_rpc_error(e))
    return JSONResponse(status_code=200, content=response.to_wire())


for _path in RPC_PATHS:
    router.add_api_route(
        _path,
        rpc_endpoint,
        methods=["POST"],
        operation_id=f"rpc_{_path.strip('/').replace('/', '_') or 'root'}",
    )
