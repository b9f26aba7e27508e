"""MCP server adapting a remote knowledge-graph memory API to tool calls."""

__version__ = "1.0.0"
