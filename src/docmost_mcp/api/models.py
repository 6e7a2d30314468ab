# API request/response models
# Pydantic models for the direct and JSON-RPC wire shapes

from typing import Any

from pydantic import BaseModel, Field

from .. import __version__

SERVER_NAME = "docmost-mcp"
PROTOCOL_VERSION = "2024-11-05"
HTTP_PROTOCOL = "mcp-http-1"
INSTRUCTIONS = (
    "Tools for a Docmost wiki: list spaces and pages, read and search pages, "
    "resolve parents, children and browser URLs, and download or upload attachments. "
    "Page creation, updates and uploads are unavailable when the server is read-only."
)


class ServerInfo(BaseModel):
    name: str = SERVER_NAME
    version: str = __version__


def capabilities() -> dict[str, Any]:
    return {"tools": {"listChanged": False}}


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str


class ToolCatalogResponse(BaseModel):
    """Visible tools in the compact catalog shape."""

    tools: list[dict[str, Any]]


class BannerResponse(ToolCatalogResponse):
    message: str


class ToolCallResponse(BaseModel):
    """Successful direct tool call."""

    result: Any


class ToolCallError(BaseModel):
    """Failed direct tool call. Only the message survives."""

    error: str


class InitializeResult(BaseModel):
    protocolVersion: str = PROTOCOL_VERSION  # noqa: N815
    serverInfo: ServerInfo = Field(default_factory=ServerInfo)  # noqa: N815
    capabilities: dict[str, Any] = Field(default_factory=capabilities)
    instructions: str = INSTRUCTIONS


class TextContent(BaseModel):
    type: str = "text"
    text: str


class CallToolResult(BaseModel):
    content: list[TextContent]


class RPCError(BaseModel):
    code: int
    message: str
    data: dict[str, Any] | None = None


class RPCResponse(BaseModel):
    jsonrpc: str = "2.0"
    id: Any = None
    result: Any = None
    error: RPCError | None = None

    def to_wire(self) -> dict[str, Any]:
        """Exactly one of result / error is emitted."""
        if self.error is not None:
            return self.model_dump(exclude={"result"})
        return self.model_dump(exclude={"error"})
