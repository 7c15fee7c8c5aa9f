"""Mapping of gathering keywords to strategies."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from enum import Enum
from typing import TYPE_CHECKING

from ..exceptions import UnknownBoundaryShapeError, UnknownGatherMethodError
from ..system.box import BoxShape
from . import strategies

if TYPE_CHECKING:
    from ..bound import Boundary
    from .context import GatherContext

LOGGER = logging.getLogger(__name__)


class GatherMethod(Enum):
    """Gathering policies, valued by their long keyword."""

    NOGATHER = "nogather"
    GATHER = "gather"
    GATHERGR = "gathergr"
    GATHERMGR = "gathermgr"
    COGGATHER = "coggather"
    GENGATHER = "gengather"
    CRSGATHER = "crsgather"
    SEQGATHER = "seqgather"
    BONDGATHER = "bondgather"
    REFGATHER = "refgather"
    GATHERLIST = "gatherlist"
    GATHERTIME = "gathertime"
    GATHERREF = "gatherref"
    GATHERLTIME = "gatherltime"
    GATHERRTIME = "gatherrtime"
    GATHERBOND = "gatherbond"


Strategy = Callable[["Boundary", "GatherContext"], None]

STRATEGIES: dict[GatherMethod, Strategy] = {
    GatherMethod.NOGATHER: strategies.nogather,
    GatherMethod.GATHER: strategies.gather,
    GatherMethod.GATHERGR: strategies.gathergr,
    GatherMethod.GATHERMGR: strategies.gathermgr,
    GatherMethod.COGGATHER: strategies.coggather,
    GatherMethod.GENGATHER: strategies.gengather,
    GatherMethod.CRSGATHER: strategies.crsgather,
    GatherMethod.SEQGATHER: strategies.seqgather,
    GatherMethod.BONDGATHER: strategies.bondgather,
    GatherMethod.REFGATHER: strategies.refgather,
    GatherMethod.GATHERLIST: strategies.gatherlist,
    GatherMethod.GATHERTIME: strategies.gathertime,
    GatherMethod.GATHERREF: strategies.gatherref,
    GatherMethod.GATHERLTIME: strategies.gatherltime,
    GatherMethod.GATHERRTIME: strategies.gatherrtime,
    GatherMethod.GATHERBOND: strategies.gatherbond,
}

# short keyword and numeric code of each method; long names are accepted too
KEYWORDS: dict[str, GatherMethod] = {
    "nog": GatherMethod.NOGATHER,
    "g": GatherMethod.GATHER,
    "ggr": GatherMethod.GATHERGR,
    "mgr": GatherMethod.GATHERMGR,
    "cog": GatherMethod.COGGATHER,
    "gen": GatherMethod.GENGATHER,
    "crs": GatherMethod.CRSGATHER,
    "seq": GatherMethod.SEQGATHER,
    "bg": GatherMethod.BONDGATHER,
    "refg": GatherMethod.REFGATHER,
    "1": GatherMethod.GATHERLIST,
    "2": GatherMethod.GATHERTIME,
    "3": GatherMethod.GATHERREF,
    "4": GatherMethod.GATHERLTIME,
    "5": GatherMethod.GATHERRTIME,
    "6": GatherMethod.GATHERBOND,
}
KEYWORDS.update({method.value: method for method in GatherMethod})

SHAPE_LETTERS: dict[str, BoxShape] = {
    "r": BoxShape.RECTANGULAR,
    "t": BoxShape.TRUNCATED_OCTAHEDRON,
    "c": BoxShape.TRICLINIC,
    "v": BoxShape.VACUUM,
}

# used when the pbc argument is absent or malformed
DEFAULT_GATHER_METHOD = GatherMethod.GATHERLIST
# used when a shape letter is given without a method keyword
DEFAULT_METHOD_WITHOUT_KEYWORD = GatherMethod.COGGATHER


def parse_gather_method(keyword: str) -> GatherMethod:
    """
    Look up a gathering keyword.

    Raises:
        UnknownGatherMethodError: If the keyword is not known.
    """
    try:
        return KEYWORDS[keyword.strip()]
    except (KeyError, AttributeError):
        known = ", ".join(k for k in KEYWORDS if not k.isdigit())
        raise UnknownGatherMethodError(
            f"Gathering method {keyword!r} unknown. Known gathering methods are "
            f"{known} and the codes 1-6"
        ) from None


def parse_boundary_shape(letter: str) -> BoxShape:
    """
    Look up a boundary shape letter (``r``, ``t``, ``c`` or ``v``).

    Raises:
        UnknownBoundaryShapeError: If the letter is not known.
    """
    try:
        return SHAPE_LETTERS[letter.strip().lower()]
    except (KeyError, AttributeError):
        raise UnknownBoundaryShapeError(
            f"Boundary type {letter!r} unknown. Known types are "
            f"{', '.join(SHAPE_LETTERS)}"
        ) from None


def parse_pbc_arguments(
    tokens: Sequence[str] | str | None,
) -> tuple[str | None, GatherMethod]:
    """
    Split a ``<shape-letter> [<method>]`` argument.

    ``tokens`` is a list of tokens or one whitespace-separated string.

    The two defaults are kept apart on purpose:

    * argument absent (``None``) or empty -> ``DEFAULT_GATHER_METHOD``
      (``gatherlist``), and the shape letter is None;
    * shape letter without a method -> ``DEFAULT_METHOD_WITHOUT_KEYWORD``
      (``coggather``).

    Returns:
        Tuple of (shape letter or None, method).

    Raises:
        UnknownBoundaryShapeError: For an unknown shape letter.
        UnknownGatherMethodError: For an unknown method keyword.
    """
    if isinstance(tokens, str):
        tokens = tokens.split()
    tokens = [t for t in (tokens or []) if t and t.strip()]
    if not tokens:
        LOGGER.debug("No gathering method given, using %s", DEFAULT_GATHER_METHOD.value)
        return None, DEFAULT_GATHER_METHOD

    letter = tokens[0]
    parse_boundary_shape(letter)
    if len(tokens) == 1:
        return letter, DEFAULT_METHOD_WITHOUT_KEYWORD
    if len(tokens) > 2:
        LOGGER.warning("Ignoring extra pbc arguments %s", tokens[2:])
    return letter, parse_gather_method(tokens[1])
