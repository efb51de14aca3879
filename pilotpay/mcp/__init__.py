"""Pilot Pay MCP server."""
