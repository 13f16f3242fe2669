"""MCP tool definitions for the massing server."""

from .massing_tools import (
    MassingRequest,
    MassingResponse,
    SectionSummary,
)

__all__ = [
    "MassingRequest",
    "MassingResponse",
    "SectionSummary",
]
