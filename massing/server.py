"""FastMCP server for building massing.

Exposes MCP tools for generating building massing from a developable area
and for browsing the parameter rulesets.
"""

import logging
import sys
from typing import Any

from mcp.server.fastmcp import FastMCP

from .models.parameters import SiteParameters
from .pipeline import generate_massing
from .rules.loader import UnknownParameterError, get_ruleset, list_rulesets, ruleset_names
from .tools.massing_tools import MassingRequest

# stdout carries the MCP JSON-RPC stream, so logs go to stderr
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

mcp = FastMCP(
    name="massing_mcp",
    instructions="Generate automated building massing for a developable area. "
    "Use massing_generate to compute building footprints, floors and step-backs, "
    "and ruleset_list/ruleset_get to inspect the available parameter rulesets.",
)


def _failure(error: Exception, suggestion: str) -> dict[str, Any]:
    return {
        "isError": True,
        "status": "failed",
        "error": str(error),
        "suggestion": suggestion,
        "building_count": 0,
        "sections": [],
    }


@mcp.tool(
    annotations={
        "readOnlyHint": True,  # Pure computation, nothing is stored
        "destructiveHint": False,
        "idempotentHint": True,  # Same inputs produce the same massing
        "openWorldHint": False,  # Pure geometry, no network access
    }
)
async def massing_generate(
    developable_area: dict[str, Any],
    ruleset: str = "default",
    parameters_override: dict[str, Any] | None = None,
    road_boundary: dict[str, Any] | None = None,
    include_geojson: bool = True,
    include_labels: bool = True,
) -> dict[str, Any]:
    """Generate building massing for a developable area.

    Chooses between one building and several, places and sizes the
    buildings, and steps back floors above the fourth.

    Args:
        developable_area: GeoJSON Polygon/MultiPolygon (or Feature) in lon/lat
        ruleset: Parameter ruleset name (use ruleset_list to see options)
        parameters_override: Overrides such as max_building_height,
            site_efficiency_ratio, min_building_separation, max_building_depth
        road_boundary: Optional GeoJSON LineString building depth is measured from
        include_geojson: Include a GeoJSON FeatureCollection of the sections
        include_labels: Include building label points in the GeoJSON

    Returns:
        Dict with status, building_count, sections, heights, GFA and optional geojson
    """
    try:
        request = MassingRequest(
            developable_area=developable_area,
            ruleset=ruleset,
            parameters_override=parameters_override,
            road_boundary=road_boundary,
            include_geojson=include_geojson,
            include_labels=include_labels,
        )
        response = generate_massing(request)
        return response.model_dump()

    except FileNotFoundError as e:
        return _failure(e, "Use ruleset_list to see available rulesets")
    except UnknownParameterError as e:
        return _failure(e, "Use ruleset_get to see valid parameter names")
    except Exception as e:
        logger.exception("Massing generation failed")
        return _failure(
            e,
            "Check developable_area is a closed lon/lat polygon and overrides are in range",
        )


@mcp.tool(
    annotations={
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": False,
    }
)
async def massing_generate_from_request(
    request: dict[str, Any],
) -> dict[str, Any]:
    """Generate building massing from a complete MassingRequest object.

    Alternative to massing_generate that accepts the full request schema.

    Args:
        request: MassingRequest with developable_area, ruleset,
            parameters_override, road_boundary, include_geojson, include_labels

    Returns:
        Dict with status, building_count, sections, heights, GFA and optional geojson

    Example request:
        {
            "developable_area": {"type": "Polygon", "coordinates": [[[151.2, -33.87], ...]]},
            "ruleset": "default",
            "parameters_override": {"maxBuildingHeight": 40}
        }
    """
    try:
        massing_request = MassingRequest(**request)
        return generate_massing(massing_request).model_dump()

    except FileNotFoundError as e:
        return _failure(e, "Use ruleset_list to see available rulesets")
    except UnknownParameterError as e:
        return _failure(e, "Use ruleset_get to see valid parameter names")
    except Exception as e:
        logger.exception("Massing generation failed")
        return _failure(e, "Validate request matches MassingRequest schema")


@mcp.tool(
    annotations={
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": False,
    }
)
async def ruleset_list() -> dict[str, Any]:
    """List the packaged massing parameter rulesets.

    Returns:
        Dict with rulesets array of summaries (name, description, height
        limit, max floors, site efficiency, max depth)
    """
    rulesets = list_rulesets()
    return {
        "rulesets": rulesets,
        "count": len(rulesets),
    }


@mcp.tool(
    annotations={
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": False,
    }
)
async def ruleset_get(
    name: str = "default",
) -> dict[str, Any]:
    """Get a ruleset's massing parameters and the parameter JSON schema.

    Use the schema's property names (snake_case or camelCase) as keys in
    parameters_override.

    Args:
        name: Ruleset name (use ruleset_list to see available options)

    Returns:
        Dict with the ruleset summary, parameters and schema
    """
    try:
        ruleset = get_ruleset(name)
    except FileNotFoundError as e:
        return {
            "isError": True,
            "error": str(e),
            "available": ruleset_names(),
            "suggestion": "Use ruleset_list to see available rulesets",
        }
    except ValueError as e:
        logger.exception(f"Ruleset '{name}' is invalid")
        return {
            "isError": True,
            "error": str(e),
            "suggestion": "Fix the ruleset YAML values",
        }

    return {
        **ruleset.summary(),
        "parameters": ruleset.parameters.model_dump(mode="json"),
        "schema": SiteParameters.model_json_schema(),
    }


def run_server():
    """Run the MCP server (stdio transport)."""
    mcp.run()


def main():
    """Main entry point.

    Runs the MCP stdio server; pass --debug for verbose solver logging.
    """
    if "--debug" in sys.argv[1:]:
        logging.getLogger("massing").setLevel(logging.DEBUG)
    run_server()


if __name__ == "__main__":
    main()
