"""
Docmost MCP Test Suite

Covers the Docmost client's response normalization and pagination, the tool
registry and its read-only view, dispatcher policy and name resolution, and
both HTTP envelopes (direct tool-call and JSON-RPC) end to end.
"""
