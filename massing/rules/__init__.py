"""Massing parameter rulesets."""

from .loader import (
    Ruleset,
    UnknownParameterError,
    get_ruleset,
    list_rulesets,
    load_ruleset,
    normalize_parameter_keys,
    ruleset_names,
)

__all__ = [
    "Ruleset",
    "UnknownParameterError",
    "get_ruleset",
    "list_rulesets",
    "load_ruleset",
    "normalize_parameter_keys",
    "ruleset_names",
]
