"""I/O utilities for exporting search results."""

from src.io.export import colleges_to_frame, write_results

__all__ = ["colleges_to_frame", "write_results"]
