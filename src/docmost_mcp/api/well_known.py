"""Self-description endpoint for MCP clients"""

from typing import Any

from fastapi import APIRouter, Request

from .models import HTTP_PROTOCOL, INSTRUCTIONS, PROTOCOL_VERSION, ServerInfo, capabilities

router = APIRouter(tags=["discovery"])


def external_base_url(request: Request) -> str:
    """Scheme and host as seen by the caller, honouring reverse-proxy headers."""
    headers = request.headers
    # Proxies may append several values; the first one is the client-facing hop
    proto = headers.get("x-forwarded-proto", "").split(",")[0].strip() or request.url.scheme
    host = (
        headers.get("x-forwarded-host", "").split(",")[0].strip()
        or headers.get("host")
        or request.url.netloc
    )
    return f"{proto}://{host}"


@router.get("/.well-known/mcp", operation_id="describe_server")
@router.get("/mcp/.well-known", include_in_schema=False)
async def describe_server(request: Request) -> dict[str, Any]:
    """Protocol, identity, transport and endpoint URLs of this server."""
    base = external_base_url(request)
    return {
        "protocol": HTTP_PROTOCOL,
        "protocolVersion": PROTOCOL_VERSION,
        "serverInfo": ServerInfo().model_dump(),
        "instructions": INSTRUCTIONS,
        "transport": {"type": "http", "endpoint": f"{base}/mcp"},
        "capabilities": capabilities(),
        "endpoints": {
            "tools": f"{base}/mcp/tools",
            "call": f"{base}/mcp/tool-call",
            "rpc": f"{base}/mcp",
            "health": f"{base}/health",
        },
    }
