"""Inbound search entry point shared by HTTP handlers and the CLI."""

from src.api.schools import handle_search_request, parse_search_params, search

__all__ = ["handle_search_request", "parse_search_params", "search"]
