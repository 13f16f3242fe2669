"""Massing MCP Server - Automated building massing for development sites.

This package provides:
- Single- vs multi-building massing decisions from a developable area
- Multi-building placement with separation and containment repair
- Step-back (setback) composition of tall buildings
- GeoJSON export with overlap-free labels
- MCP tools for massing generation

Core functionality can be imported without MCP server dependencies:
    from massing.pipeline import calculate_building_config
    from massing.models import SiteParameters

To get the MCP server instance:
    from massing import get_mcp
    mcp = get_mcp()
"""

__version__ = "0.1.0"


def get_mcp():
    """Get the MCP server instance (lazy import to avoid coupling).

    Returns:
        FastMCP: The configured MCP server instance.
    """
    from .server import mcp
    return mcp


__all__ = ["get_mcp", "__version__"]
