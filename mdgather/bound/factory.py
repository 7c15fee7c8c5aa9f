"""Selection of a boundary by cell shape."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ..gather.dispatch import (
    GatherMethod,
    parse_boundary_shape,
    parse_gather_method,
    parse_pbc_arguments,
)
from ..system.box import BoxShape
from .base import Boundary
from .rectbox import RectBox, rectangular_image
from .triclinic import Triclinic, triclinic_image
from .truncoct import TruncOct, truncated_octahedron_image
from .vacuum import Vacuum, vacuum_image

if TYPE_CHECKING:
    from ..gather.context import GatherContext
    from ..system import Box, Snapshot

LOGGER = logging.getLogger(__name__)

BOUNDARIES: dict[BoxShape, type[Boundary]] = {
    BoxShape.RECTANGULAR: RectBox,
    BoxShape.TRUNCATED_OCTAHEDRON: TruncOct,
    BoxShape.TRICLINIC: Triclinic,
    BoxShape.VACUUM: Vacuum,
}

_IMAGES = {
    BoxShape.RECTANGULAR: rectangular_image,
    BoxShape.TRUNCATED_OCTAHEDRON: truncated_octahedron_image,
    BoxShape.TRICLINIC: triclinic_image,
    BoxShape.VACUUM: vacuum_image,
}


def nearest_image(r1: ArrayLike, r2: ArrayLike, box: Box) -> NDArray[np.floating]:
    """
    Periodic image of ``r2`` closest to ``r1``, for any cell shape.

    Args:
        r1: Reference position(s), shape (3,) or (..., 3).
        r2: Position(s) to image, broadcastable against ``r1``.
        box: Periodic cell; its shape selects the algorithm.

    Returns:
        Image(s) of ``r2``.
    """
    return _IMAGES[box.shape](r1, r2, box)


def make_boundary(
    snapshot: Snapshot,
    shape: BoxShape | str | None = None,
    context: GatherContext | None = None,
) -> Boundary:
    """
    Create the boundary for a frame.

    Args:
        snapshot: Frame to gather.
        shape: Cell shape, or a shape letter (``r``, ``t``, ``c``, ``v``).
            If None, the shape of the frame's own box is used; this is
            how triclinic cells are picked up.
        context: Pre-built gather context.

    Returns:
        New Boundary instance.
    """
    if isinstance(shape, str):
        shape = parse_boundary_shape(shape)
    if shape is None:
        shape = snapshot.box.shape if snapshot.has_box else BoxShape.VACUUM
    return BOUNDARIES[shape](snapshot, context)


def boundary_from_arguments(
    snapshot: Snapshot,
    tokens: Sequence[str] | str | None,
    context: GatherContext | None = None,
) -> tuple[Boundary, GatherMethod]:
    """
    Build boundary and gathering method from ``<shape-letter> [<method>]``.

    Without tokens the boundary follows the frame's own box.
    """
    letter, method = parse_pbc_arguments(tokens)
    boundary = make_boundary(snapshot, letter, context)
    LOGGER.debug("Boundary %s, gathering method %s", type(boundary).__name__, method.value)
    return boundary, method


def gather(
    snapshot: Snapshot,
    method: GatherMethod | str = GatherMethod.GATHER,
    boundary: Boundary | None = None,
    context: GatherContext | None = None,
) -> Boundary:
    """
    Gather a frame in place.

    The method is resolved before anything else, so an unknown keyword
    leaves the positions untouched.

    Args:
        snapshot: Frame to gather.
        method: Gathering method or keyword.
        boundary: Boundary to reuse across frames. If None, one is made
            from the frame's box.
        context: Context to use instead of the boundary's own.

    Returns:
        The boundary used, for reuse on the next frame.
    """
    if not isinstance(method, GatherMethod):
        method = parse_gather_method(method)
    if boundary is None:
        boundary = make_boundary(snapshot, context=context)
    elif boundary.sys is not snapshot:
        raise ValueError("boundary was created for a different snapshot")
    boundary.run(method, context)
    return boundary
