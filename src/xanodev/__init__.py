"""Xano developer MCP server: documentation lookup and XanoScript validation."""
