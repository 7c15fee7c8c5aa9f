"""Base interface for periodic boundaries."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, ClassVar

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ..exceptions import MissingBoxError
from ..gather.context import GatherContext
from ..gather.dispatch import STRATEGIES, GatherMethod, parse_gather_method

if TYPE_CHECKING:
    from ..system import Box, BoxShape, Snapshot

LOGGER = logging.getLogger(__name__)


class Boundary(ABC):
    """
    Abstract base class for the periodic boundaries of a frame.

    A boundary borrows a snapshot and reconnects its molecules across
    the cell faces. On construction the position of atom 0 of every
    molecule is stored as that molecule's reference; the references are
    kept in a ``GatherContext`` and stay frozen until ``set_reference``
    overwrites them.

    The set of shapes is closed: ``Vacuum``, ``RectBox``, ``TruncOct``
    and ``Triclinic``.

    Example:
        pbc = RectBox(snapshot)
        for frame in frames:
            pbc.gathergr()
    """

    shape: ClassVar[BoxShape]

    def __init__(self, snapshot: Snapshot, context: GatherContext | None = None) -> None:
        """
        Initialize boundary.

        Args:
            snapshot: Frame to gather; it is modified in place.
            context: Pre-built context. If None, one is captured from
                the current positions of ``snapshot``.
        """
        self._sys = snapshot
        self.context = context if context is not None else GatherContext.capture(snapshot)

    @staticmethod
    @abstractmethod
    def image(
        r1: ArrayLike, r2: ArrayLike, box: Box
    ) -> NDArray[np.floating]:
        """
        Periodic image of ``r2`` closest to ``r1``.

        Args:
            r1: Reference position(s), shape (3,) or (..., 3).
            r2: Position(s) to image, broadcastable against ``r1``.
            box: Periodic cell.

        Returns:
            Image(s) of ``r2``.
        """
        ...

    @property
    def sys(self) -> Snapshot:
        """Return the borrowed snapshot."""
        return self._sys

    def reference(self, i: int) -> NDArray[np.floating]:
        """Return the reference position of molecule ``i``."""
        return self.context.anchor(i)

    def set_reference(self, i: int, position: ArrayLike) -> None:
        """Set the reference position of molecule ``i``."""
        self.context.set_anchor(i, position)

    def nearest_image(
        self, r1: ArrayLike, r2: ArrayLike, box: Box | None = None
    ) -> NDArray[np.floating]:
        """Periodic image of ``r2`` closest to ``r1`` in the cell of ``sys``."""
        return self.image(r1, r2, box if box is not None else self._sys.box)

    def check_box(self) -> None:
        """
        Make sure the frame has a usable cell.

        Raises:
            MissingBoxError: If the frame has no box block.
            DegenerateBoxError: If an edge of the box is zero or the cell is
                flat, whatever the shape tag of the box.
        """
        if not self._sys.has_box:
            raise MissingBoxError("System does not contain Box block")
        self._sys.box.validate()

    def run(
        self, method: GatherMethod | str, context: GatherContext | None = None
    ) -> None:
        """
        Gather the frame with ``method``.

        Args:
            method: Gathering method or keyword.
            context: Context to use instead of the boundary's own.
        """
        if not isinstance(method, GatherMethod):
            method = parse_gather_method(method)
        context = context if context is not None else self.context
        context.check(self._sys)
        if method is not GatherMethod.NOGATHER:
            self.check_box()
        LOGGER.debug("Gathering with %s (%s)", method.value, type(self).__name__)
        STRATEGIES[method](self, context)

    def nogather(self, context: GatherContext | None = None) -> None:
        """Leave the positions as they are."""
        self.run(GatherMethod.NOGATHER, context)

    def gather(self, context: GatherContext | None = None) -> None:
        """Chain every molecule, anchored on the reference of molecule 0."""
        self.run(GatherMethod.GATHER, context)

    def gathergr(self, context: GatherContext | None = None) -> None:
        """Chain every molecule, anchored on its own reference."""
        self.run(GatherMethod.GATHERGR, context)

    def gathermgr(self, context: GatherContext | None = None) -> None:
        """``gathergr`` followed by moving each molecule's cog into the cell."""
        self.run(GatherMethod.GATHERMGR, context)

    def coggather(self, context: GatherContext | None = None) -> None:
        """Gather everything around the cog of molecule 0."""
        self.run(GatherMethod.COGGATHER, context)

    def gengather(self, context: GatherContext | None = None) -> None:
        """Gather molecules by nearest-neighbour chaining of their cogs."""
        self.run(GatherMethod.GENGATHER, context)

    def crsgather(self, context: GatherContext | None = None) -> None:
        """``gathergr`` that carries the references over to the next frame."""
        self.run(GatherMethod.CRSGATHER, context)

    def seqgather(self, context: GatherContext | None = None) -> None:
        """Chain the whole solute as one sequence of atoms."""
        self.run(GatherMethod.SEQGATHER, context)

    def bondgather(self, context: GatherContext | None = None) -> None:
        """Reconnect every molecule along its bonds."""
        self.run(GatherMethod.BONDGATHER, context)

    def refgather(self, context: GatherContext | None = None) -> None:
        """Image every atom next to the same atom of the reference frame."""
        self.run(GatherMethod.REFGATHER, context)

    def gatherlist(self, context: GatherContext | None = None) -> None:
        """Chain molecules along the linkage table."""
        self.run(GatherMethod.GATHERLIST, context)

    def gathertime(self, context: GatherContext | None = None) -> None:
        """``gatherlist`` against the first frame of the trajectory."""
        self.run(GatherMethod.GATHERTIME, context)

    def gatherref(self, context: GatherContext | None = None) -> None:
        """``gatherlist`` with molecules placed next to a reference frame."""
        self.run(GatherMethod.GATHERREF, context)

    def gatherltime(self, context: GatherContext | None = None) -> None:
        """``gathertime`` honouring the linkage override."""
        self.run(GatherMethod.GATHERLTIME, context)

    def gatherrtime(self, context: GatherContext | None = None) -> None:
        """``gatherref`` for frame 1, then against frame 1."""
        self.run(GatherMethod.GATHERRTIME, context)

    def gatherbond(self, context: GatherContext | None = None) -> None:
        """``gatherlist`` with bond-driven reconnection inside molecules."""
        self.run(GatherMethod.GATHERBOND, context)
