"""Core business logic: prompts, provider clients, consensus scoring, and data models.

This module is framework-agnostic. It has no dependency on MCP, FastAPI,
or the database. Both the MCP server and the HTTP API import from here.
"""
