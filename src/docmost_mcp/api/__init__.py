# API package
# Contains the direct, JSON-RPC and discovery routers

from . import rpc, tool_call, well_known

__all__ = ["rpc", "tool_call", "well_known"]
