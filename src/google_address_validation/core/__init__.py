"""Core logic: request building, the API client, and response interpretation.

This module is framework-agnostic. It has no dependency on MCP or on the
cache storage backends; the server and any other caller import from here.
"""
