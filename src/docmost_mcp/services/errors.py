"""Error taxonomy shared by the Docmost client, the dispatcher and both protocol adapters."""

from typing import Any, Dict, Optional

# JSON-RPC error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602


class DocmostMCPError(Exception):
    """Base exception class for every failure surfaced to a tool caller."""
    def __init__(self, message: str, code: Optional[int] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(DocmostMCPError):
    """A required parameter is missing or invalid. Raised before any network call."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, INVALID_PARAMS, details)


class PolicyError(DocmostMCPError):
    """A mutating tool was invoked while the server runs read-only."""


class UnknownToolError(DocmostMCPError):
    """The tool name does not resolve to a registered tool."""
    def __init__(self, tool_name: str):
        super().__init__(f"Unknown tool: {tool_name}", details={"tool": tool_name})
        self.tool_name = tool_name


class BackendError(DocmostMCPError):
    """Docmost answered with a non-success status or with HTML instead of JSON."""
    def __init__(self, message: str, status_code: Optional[int] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details=details)
        self.status_code = status_code


class AuthError(DocmostMCPError):
    """Login response did not carry the expected session cookie."""


class ResolutionError(DocmostMCPError):
    """A derived tool could not obtain the fields it needs from backend data."""


class ProtocolError(DocmostMCPError):
    """Malformed envelope, unparseable body or unknown RPC method."""
    def __init__(self, message: str, code: int = INVALID_REQUEST, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code, details)
