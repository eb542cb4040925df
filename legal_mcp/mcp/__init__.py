"""MCP transport package for the Legal MCP Server.

Transports:
- streamable HTTP (``http_transport``): stateless calls, in-memory sessions, SSE responses
- stdio (``server``): single persistent connection via the SDK low-level server

Both expose the tools of a shared ``ToolRegistry``.
"""
