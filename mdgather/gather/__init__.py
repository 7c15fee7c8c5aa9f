"""Gathering strategies and their selection by keyword."""

from .context import GatherContext, GenAnchor, Link, LinkageOverride
from .dispatch import (
    DEFAULT_GATHER_METHOD,
    DEFAULT_METHOD_WITHOUT_KEYWORD,
    KEYWORDS,
    STRATEGIES,
    GatherMethod,
    parse_boundary_shape,
    parse_gather_method,
    parse_pbc_arguments,
)

__all__ = [
    "GatherContext",
    "GenAnchor",
    "Link",
    "LinkageOverride",
    "GatherMethod",
    "STRATEGIES",
    "KEYWORDS",
    "DEFAULT_GATHER_METHOD",
    "DEFAULT_METHOD_WITHOUT_KEYWORD",
    "parse_boundary_shape",
    "parse_gather_method",
    "parse_pbc_arguments",
]
