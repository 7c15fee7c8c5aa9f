"""Per-trajectory state consumed by the gathering strategies."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, NamedTuple

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ..exceptions import InconsistentLinkageTableError, StaleContextError

if TYPE_CHECKING:
    from ..io import ReferenceStore
    from ..system import Snapshot


class Link(NamedTuple):
    """Anchor of a molecule on an atom of an earlier molecule."""

    local_atom: int
    linked_molecule: int
    linked_atom: int


class GenAnchor(Enum):
    """How ``gengather`` places the next centre of geometry."""

    # image closest to the previous cog or to the running average, whichever is nearer
    CLOSEST = "closest"
    # always the image nearest to the running average of placed cogs
    AVERAGE = "average"


class LinkageOverride:
    """
    Which atom of which earlier molecule each molecule is anchored to.

    Molecules without an entry use the default link: their atom 0 is
    placed next to atom 0 of the preceding molecule. Molecule 0 is
    always anchored to its stored reference position, so it cannot
    carry an entry.

    Example:
        # atom 4 of molecule 2 sits next to atom 7 of molecule 0
        linkage = LinkageOverride({2: (4, 0, 7)})
    """

    def __init__(self, entries: Mapping[int, tuple[int, int, int]] | None = None) -> None:
        self._entries: dict[int, Link] = {}
        for molecule, entry in (entries or {}).items():
            link = Link(*(int(v) for v in entry))
            molecule = int(molecule)
            if min(molecule, *link) < 0:
                raise InconsistentLinkageTableError(
                    f"negative index in linkage entry for molecule {molecule}: {tuple(link)}"
                )
            if link.linked_molecule >= molecule:
                raise InconsistentLinkageTableError(
                    f"molecule {molecule} is linked to molecule {link.linked_molecule}; "
                    "links must point to an earlier molecule"
                )
            self._entries[molecule] = link

    @classmethod
    def from_atom_pairs(cls, pairs: Iterable[tuple[int, int]]) -> LinkageOverride:
        """
        Build from a flat list of (molecule, atom) specifiers.

        Specifiers are read two at a time: the first names the atom to
        anchor, the second the atom it is anchored to.
        """
        pairs = list(pairs)
        if len(pairs) % 2 != 0:
            raise InconsistentLinkageTableError(
                f"atom list for gathering needs an even number of atoms, got {len(pairs)}"
            )
        entries = {}
        for (mol, atom), (linked_mol, linked_atom) in zip(pairs[::2], pairs[1::2]):
            entries[mol] = (atom, linked_mol, linked_atom)
        return cls(entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, molecule: int) -> bool:
        return molecule in self._entries

    def entry(self, molecule: int) -> Link:
        """Return the link of ``molecule``, or the default one."""
        if molecule in self._entries:
            return self._entries[molecule]
        return Link(0, molecule - 1, 0)

    def resolve(self, molecule: int, snapshot: Snapshot) -> Link | None:
        """
        Return the link used for ``molecule`` when gathering ``snapshot``.

        An explicit entry is returned as is. The default link goes to atom 0
        of the closest earlier molecule that has atoms; None means there is
        no such molecule.
        """
        if molecule in self._entries:
            return self.entry(molecule)
        for linked in range(molecule - 1, -1, -1):
            if snapshot.molecules[linked].n_atoms > 0:
                return Link(0, linked, 0)
        return None

    def validate(self, snapshot: Snapshot) -> None:
        """
        Check every link (explicit and default) against a frame.

        Raises:
            InconsistentLinkageTableError: If a link names a molecule or
                atom that does not exist.
        """
        n_molecules = snapshot.n_molecules
        for molecule in self._entries:
            if molecule >= n_molecules:
                raise InconsistentLinkageTableError(
                    f"linkage entry for molecule {molecule}, "
                    f"but the system has {n_molecules} molecules"
                )
        for molecule in range(1, n_molecules):
            n_atoms = snapshot.molecules[molecule].n_atoms
            link = self.resolve(molecule, snapshot)
            if n_atoms == 0 or link is None:
                continue
            if link.local_atom >= n_atoms:
                raise InconsistentLinkageTableError(
                    f"molecule {molecule} has {n_atoms} atoms, "
                    f"cannot anchor atom {link.local_atom}"
                )
            n_linked = snapshot.molecules[link.linked_molecule].n_atoms
            if link.linked_atom >= n_linked:
                raise InconsistentLinkageTableError(
                    f"molecule {molecule} is linked to atom {link.linked_atom} of "
                    f"molecule {link.linked_molecule}, which has {n_linked} atoms"
                )


@dataclass
class GatherContext:
    """
    Everything a gathering strategy needs besides the frame itself.

    The anchors are atom 0 of every molecule at the time of capture.
    They do not follow later changes of the positions; use
    ``set_anchor`` (or recapture) to move them.

    Attributes:
        anchors: Reference position of every molecule, shape (N_mol, 3).
        linkage: Inter-molecule links for list-driven methods.
        reference: Externally supplied, already gathered frame.
        store: File keeping the first gathered frame of a trajectory.
        gen_anchor: Placement rule used by ``gengather``.
    """

    anchors: NDArray[np.floating]
    linkage: LinkageOverride = field(default_factory=LinkageOverride)
    reference: Snapshot | None = None
    store: ReferenceStore | None = None
    gen_anchor: GenAnchor = GenAnchor.CLOSEST

    def __post_init__(self) -> None:
        """Validate and convert arrays."""
        self.anchors = np.array(self.anchors, dtype=np.float64).reshape(-1, 3)
        self.gen_anchor = GenAnchor(self.gen_anchor)

    @classmethod
    def capture(
        cls,
        snapshot: Snapshot,
        linkage: LinkageOverride | None = None,
        reference: Snapshot | None = None,
        store: ReferenceStore | None = None,
        gen_anchor: GenAnchor | str = GenAnchor.CLOSEST,
    ) -> GatherContext:
        """
        Record atom 0 of every molecule of ``snapshot`` as its anchor.

        Args:
            snapshot: Frame to take the anchors from.
            linkage: Inter-molecule links; validated against ``snapshot``.
            reference: Already gathered reference frame.
            store: Reference file for time-based gathering.
            gen_anchor: Placement rule used by ``gengather``.

        Returns:
            New GatherContext instance.
        """
        anchors = [
            m.positions[0] if m.n_atoms > 0 else np.zeros(3) for m in snapshot.molecules
        ]
        if linkage is None:
            linkage = LinkageOverride()
        else:
            linkage.validate(snapshot)
        return cls(
            anchors=np.array(anchors, dtype=np.float64).reshape(-1, 3),
            linkage=linkage,
            reference=reference,
            store=store,
            gen_anchor=gen_anchor,
        )

    @property
    def n_molecules(self) -> int:
        return len(self.anchors)

    def anchor(self, i: int) -> NDArray[np.floating]:
        """Return the anchor of molecule ``i``."""
        return self.anchors[i]

    def set_anchor(self, i: int, position: ArrayLike) -> None:
        """Overwrite the anchor of molecule ``i``."""
        self.anchors[i] = np.asarray(position, dtype=np.float64)

    def global_anchor(self) -> NDArray[np.floating]:
        """Anchor of molecule 0, or the origin for a solvent-only frame."""
        if len(self.anchors) == 0:
            return np.zeros(3)
        return self.anchors[0]

    def check(self, snapshot: Snapshot) -> None:
        """
        Make sure this context still describes ``snapshot``.

        Raises:
            StaleContextError: If the number of molecules changed.
        """
        if snapshot.n_molecules != self.n_molecules:
            raise StaleContextError(
                f"gather context holds {self.n_molecules} anchors but the system "
                f"has {snapshot.n_molecules} molecules; recapture the context"
            )
