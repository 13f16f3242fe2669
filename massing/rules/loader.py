"""Catalog of packaged massing parameter rulesets.

Rulesets are read-only YAML files shipped in ``massing/rulesets``. The
first line of each is a ``# description`` comment; the body holds
SiteParameters fields in snake_case or camelCase. Keys that don't name a
parameter are rejected, both in the files and in request overrides, so a
misspelt height limit never silently falls back to the default.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from ..models.parameters import SiteParameters, to_snake_case

logger = logging.getLogger(__name__)

RULESETS_DIR = Path(__file__).parent.parent / "rulesets"

RULESET_NAME_PATTERN = re.compile(r"^[a-z0-9_]+$")


class UnknownParameterError(ValueError):
    """Raised when a ruleset or override uses a key SiteParameters doesn't have."""

    def __init__(self, keys: list[str], source: str):
        self.keys = keys
        self.source = source
        super().__init__(f"Unknown massing parameter(s) {', '.join(keys)} in {source}")


@dataclass(frozen=True)
class Ruleset:
    """A named, described set of massing parameters."""

    name: str
    description: str
    parameters: SiteParameters

    @property
    def max_floors(self) -> int:
        return self.parameters.max_floors_from_height

    def summary(self) -> dict[str, Any]:
        """Headline figures for choosing between rulesets."""
        return {
            "name": self.name,
            "description": self.description,
            "max_building_height": self.parameters.max_building_height,
            "max_floors": self.max_floors,
            "site_efficiency_ratio": self.parameters.site_efficiency_ratio,
            "max_building_depth": self.parameters.max_building_depth,
        }


def normalize_parameter_keys(data: dict[str, Any], source: str) -> dict[str, Any]:
    """Map camelCase keys to SiteParameters field names.

    Raises:
        UnknownParameterError: If any key isn't a SiteParameters field
    """
    unknown = sorted(
        key for key in data if to_snake_case(key) not in SiteParameters.model_fields
    )
    if unknown:
        raise UnknownParameterError(unknown, source)
    return {to_snake_case(key): value for key, value in data.items()}


def _ruleset_file(name: str) -> Path:
    if not RULESET_NAME_PATTERN.match(name):
        raise FileNotFoundError(f"Ruleset name '{name}' is not a valid ruleset name")
    path = RULESETS_DIR / f"{name}.yaml"
    if not path.is_file():
        raise FileNotFoundError(f"Ruleset '{name}' not found in {RULESETS_DIR}")
    return path


def _parse(name: str, text: str) -> Ruleset:
    first_line = text.lstrip().splitlines()[0] if text.strip() else ""
    description = (
        first_line.lstrip("#").strip()
        if first_line.startswith("#")
        else f"Massing parameters '{name}'"
    )

    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Ruleset '{name}' must be a mapping of parameters")

    parameters = SiteParameters(**normalize_parameter_keys(data, f"ruleset '{name}'"))
    return Ruleset(name=name, description=description, parameters=parameters)


def ruleset_names() -> list[str]:
    """Names of the packaged rulesets, sorted."""
    if not RULESETS_DIR.is_dir():
        logger.warning(f"Rulesets directory not found: {RULESETS_DIR}")
        return []
    return sorted(path.stem for path in RULESETS_DIR.glob("*.yaml"))


def get_ruleset(name: str = "default") -> Ruleset:
    """Read and validate one packaged ruleset.

    Raises:
        FileNotFoundError: If no ruleset has this name
        UnknownParameterError: If the file uses an unknown key
        ValueError: If a value is out of range
    """
    return _parse(name, _ruleset_file(name).read_text())


def list_rulesets() -> list[dict[str, Any]]:
    """Summaries of every packaged ruleset that parses.

    Broken files are logged and left out rather than hiding the others.
    """
    summaries = []
    for name in ruleset_names():
        try:
            summaries.append(get_ruleset(name).summary())
        except (yaml.YAMLError, ValueError) as e:
            logger.warning(f"Skipping invalid ruleset '{name}': {e}")
    return summaries


def load_ruleset(name: str = "default", override: dict | None = None) -> SiteParameters:
    """Parameters of a ruleset with request overrides applied.

    Args:
        name: Ruleset name
        override: Parameter values keyed by snake_case or camelCase field name

    Returns:
        SiteParameters

    Raises:
        FileNotFoundError: If no ruleset has this name
        UnknownParameterError: If the override uses an unknown key
    """
    parameters = get_ruleset(name).parameters
    if override:
        parameters = parameters.merge_override(normalize_parameter_keys(override, "override"))
        logger.debug(f"Applied {len(override)} override(s) to ruleset '{name}'")
    return parameters
