"""Tests for the MCP tool surface.

Calls the tool coroutines directly, as an MCP client would through the
server, and checks both the success payloads and the isError failures.
"""

import pytest
from shapely.geometry import mapping

from massing import get_mcp
from massing.server import (
    massing_generate,
    massing_generate_from_request,
    mcp,
    ruleset_get,
    ruleset_list,
)

from conftest import rect_site


@pytest.fixture
def site_geojson():
    return mapping(rect_site(30, 30))


class TestMassingGenerate:
    """massing_generate tool."""

    @pytest.mark.asyncio
    async def test_completed(self, site_geojson):
        result = await massing_generate(
            developable_area=site_geojson,
            parameters_override={"maxBuildingHeight": 15.5, "siteEfficiencyRatio": 0.5},
        )
        assert "isError" not in result
        assert result["status"] == "completed"
        assert result["building_count"] == 1
        assert result["max_allowed_floors"] == 5
        assert result["geojson"]["type"] == "FeatureCollection"

    @pytest.mark.asyncio
    async def test_unknown_ruleset(self, site_geojson):
        result = await massing_generate(developable_area=site_geojson, ruleset="missing")
        assert result["isError"] is True
        assert result["status"] == "failed"
        assert "ruleset_list" in result["suggestion"]
        assert result["building_count"] == 0
        assert result["sections"] == []

    @pytest.mark.asyncio
    async def test_unknown_parameter(self, site_geojson):
        result = await massing_generate(
            developable_area=site_geojson,
            parameters_override={"maxHeight": 20},
        )
        assert result["isError"] is True
        assert "maxHeight" in result["error"]
        assert "ruleset_get" in result["suggestion"]

    @pytest.mark.asyncio
    async def test_invalid_area(self):
        result = await massing_generate(
            developable_area={"type": "LineString", "coordinates": [[0, 0], [1, 1]]},
        )
        assert result["isError"] is True
        assert "developable_area" in result["suggestion"]

    @pytest.mark.asyncio
    async def test_unavailable_is_not_an_error(self):
        degenerate = {
            "type": "Polygon",
            "coordinates": [[[151.2, -33.87], [151.201, -33.87], [151.202, -33.87], [151.2, -33.87]]],
        }
        result = await massing_generate(developable_area=degenerate)
        assert "isError" not in result
        assert result["status"] == "unavailable"


class TestMassingGenerateFromRequest:
    """massing_generate_from_request tool."""

    @pytest.mark.asyncio
    async def test_completed(self, site_geojson):
        result = await massing_generate_from_request({
            "developable_area": site_geojson,
            "ruleset": "low_rise",
            "include_geojson": False,
        })
        assert result["status"] == "completed"
        assert result["ruleset"] == "low_rise"
        assert result["geojson"] is None

    @pytest.mark.asyncio
    async def test_missing_area_rejected(self):
        result = await massing_generate_from_request({"ruleset": "default"})
        assert result["isError"] is True
        assert "MassingRequest" in result["suggestion"]


class TestRulesetTools:
    """ruleset_list and ruleset_get tools."""

    @pytest.mark.asyncio
    async def test_list(self):
        result = await ruleset_list()
        names = [r["name"] for r in result["rulesets"]]
        assert result["count"] == len(names)
        assert "default" in names
        assert all("max_floors" in r for r in result["rulesets"])

    @pytest.mark.asyncio
    async def test_get(self):
        result = await ruleset_get("high_density")
        assert result["name"] == "high_density"
        assert result["parameters"]["max_building_height"] == 120.0
        assert result["max_floors"] == 38
        assert "maxBuildingHeight" not in result["parameters"]
        assert "max_building_height" in result["schema"]["properties"]

    @pytest.mark.asyncio
    async def test_get_missing(self):
        result = await ruleset_get("missing")
        assert result["isError"] is True
        assert "default" in result["available"]


class TestServerInstance:
    """Lazy server access."""

    def test_get_mcp(self):
        assert get_mcp() is mcp
        assert mcp.name == "massing_mcp"
