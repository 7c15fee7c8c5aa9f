"""
Gathering strategies.

Every strategy takes a boundary (which supplies the frame as
``boundary.sys`` and the nearest-image function) and a gather context,
and rewrites the positions of the frame in place.

Reconnecting a chain of atoms
=============================

Atom k is put at the image of its stored position closest to the
already placed atom k-1. Because the nearest image is unchanged by
lattice translations of either argument, the translation applied to
atom k is the translation applied to atom k-1 plus the one that brings
the *stored* atom k next to the *stored* atom k-1. All per-bond
translations can therefore be computed at once and summed along the
chain, instead of walking the chain one atom at a time.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ..exceptions import MissingReferenceError
from .context import GenAnchor, LinkageOverride

if TYPE_CHECKING:
    from ..bound import Boundary
    from ..io import ReferenceStore
    from ..system import Molecule, Snapshot
    from .context import GatherContext

LOGGER = logging.getLogger(__name__)


def _chained(
    boundary: Boundary, blocks: NDArray[np.floating], anchors: ArrayLike
) -> NDArray[np.floating]:
    """
    Reconnect atom chains.

    Args:
        boundary: Supplies the nearest-image function.
        blocks: Positions, shape (n_chains, n_atoms, 3).
        anchors: Position next to which atom 0 of each chain is put,
            shape (3,) or (n_chains, 3).

    Returns:
        Gathered positions, same shape as ``blocks``.
    """
    if blocks.size == 0:
        return blocks.copy()
    shifts = np.empty_like(blocks)
    shifts[:, 0] = boundary.nearest_image(anchors, blocks[:, 0]) - blocks[:, 0]
    shifts[:, 1:] = boundary.nearest_image(blocks[:, :-1], blocks[:, 1:]) - blocks[:, 1:]
    return blocks + np.cumsum(shifts, axis=1)


def _gather_molecule(boundary: Boundary, molecule: Molecule, anchor: ArrayLike) -> None:
    molecule.positions[:] = _chained(boundary, molecule.positions[np.newaxis], anchor)[0]


def _gather_solvent(boundary: Boundary, snapshot: Snapshot, anchor: ArrayLike) -> None:
    """Chain every solvent molecule, its first atom next to ``anchor``."""
    for solvent in snapshot.solvents:
        blocks = solvent.positions.reshape(-1, solvent.atoms_per_molecule, 3)
        solvent.positions[:] = _chained(boundary, blocks, anchor).reshape(-1, 3)


def _gather_along(
    boundary: Boundary,
    molecule: Molecule,
    anchor: ArrayLike,
    order: list[tuple[int, int]],
) -> None:
    """
    Reconnect a molecule following an explicit visiting order.

    Args:
        boundary: Supplies the nearest-image function.
        molecule: Molecule to gather.
        anchor: Position next to which the first visited atom is put.
        order: (atom, parent) pairs; the first pair is the root with
            parent -1, every other parent is visited before its atom.
    """
    positions = molecule.positions
    root = order[0][0]
    atoms = np.array([atom for atom, _ in order[1:]], dtype=np.intp)
    parents = np.array([parent for _, parent in order[1:]], dtype=np.intp)

    shift = np.zeros_like(positions)
    shift[root] = boundary.nearest_image(anchor, positions[root]) - positions[root]
    if len(atoms) > 0:
        steps = boundary.nearest_image(positions[parents], positions[atoms]) - positions[atoms]
        for atom, parent, step in zip(atoms, parents, steps):
            shift[atom] = shift[parent] + step
    positions += shift


def _index_order(n_atoms: int, root: int) -> list[tuple[int, int]]:
    """Chain outwards from ``root`` along the atom numbering, both ways."""
    order = [(root, -1)]
    order.extend((j, j - 1) for j in range(root + 1, n_atoms))
    order.extend((j, j + 1) for j in range(root - 1, -1, -1))
    return order


def _bond_order(molecule: Molecule, root: int) -> list[tuple[int, int]]:
    topology = molecule.topology
    if topology is None or topology.n_bonds == 0:
        return _index_order(molecule.n_atoms, root)
    return topology.traversal(root)


def _place_cog(boundary: Boundary, positions: NDArray[np.floating], target: ArrayLike) -> None:
    """Rigidly move ``positions`` so their cog is the image closest to ``target``."""
    if len(positions) == 0:
        return
    cog = positions.mean(axis=0)
    positions += boundary.nearest_image(target, cog) - cog


def _require_reference(reference: Snapshot | None, snapshot: Snapshot) -> Snapshot:
    if reference is None:
        raise MissingReferenceError("gathering method needs a reference frame")
    if not snapshot.same_layout(reference):
        raise MissingReferenceError(
            "reference frame does not have the same molecules and solvent as the system"
        )
    return reference


def _require_store(context: GatherContext) -> ReferenceStore:
    if context.store is None:
        raise MissingReferenceError(
            "time-based gathering needs a reference store on the gather context"
        )
    return context.store


def nogather(boundary: Boundary, context: GatherContext) -> None:
    """Leave the positions as they are."""
    pass


def gather(boundary: Boundary, context: GatherContext) -> None:
    """
    Chain every molecule, anchored on the reference of molecule 0.

    Atom 0 of every molecule and the first atom of every solvent
    molecule are put next to the frozen reference of molecule 0; every
    further atom is put next to the atom before it.
    """
    snapshot = boundary.sys
    anchor = context.global_anchor()
    for molecule in snapshot.molecules:
        _gather_molecule(boundary, molecule, anchor)
    _gather_solvent(boundary, snapshot, anchor)


def gathergr(boundary: Boundary, context: GatherContext) -> None:
    """
    Chain every molecule, anchored on its own reference.

    Molecules that have nothing to do with molecule 0 stay where their
    own reference puts them. Solvent is not touched.
    """
    for i, molecule in enumerate(boundary.sys.molecules):
        _gather_molecule(boundary, molecule, context.anchor(i))


def gathermgr(boundary: Boundary, context: GatherContext) -> None:
    """``gathergr``, then the cog of each molecule is moved into the cell."""
    gathergr(boundary, context)
    snapshot = boundary.sys
    centre = snapshot.box.center if snapshot.has_box else np.zeros(3)
    for molecule in snapshot.molecules:
        _place_cog(boundary, molecule.positions, centre)


def coggather(boundary: Boundary, context: GatherContext) -> None:
    """
    Gather everything around the cog of molecule 0.

    Molecule 0 is chained starting next to the origin. Every other
    molecule and every solvent molecule is chained starting next to the
    cog of molecule 0, giving one compact cluster.
    """
    snapshot = boundary.sys
    cog = np.zeros(3)
    if snapshot.molecules:
        first = snapshot.molecules[0]
        _gather_molecule(boundary, first, cog)
        if first.n_atoms > 0:
            cog = first.cog()
    for molecule in snapshot.molecules[1:]:
        _gather_molecule(boundary, molecule, cog)
    _gather_solvent(boundary, snapshot, cog)


def gengather(boundary: Boundary, context: GatherContext) -> None:
    """
    Gather molecules by nearest-neighbour chaining of their cogs.

    For solutes made of several independent molecules whose numbering
    says nothing about where they are. Every molecule is first chained
    on its own reference. Starting from molecule 0, the unplaced
    molecule whose cog is closest (minimum image) to the last placed
    cog is taken next, and its cog is put either next to the last
    placed cog or next to the average of all placed cogs, as selected
    by ``context.gen_anchor``. Each molecule is then translated by the
    lattice vector its cog was moved by, and the solvent is gathered
    around the average cog.
    """
    gathergr(boundary, context)
    snapshot = boundary.sys
    molecules = [m for m in snapshot.molecules if m.n_atoms > 0]
    if not molecules:
        _gather_solvent(boundary, snapshot, context.global_anchor())
        return

    cogs = np.array([m.cog() for m in molecules])
    placed = cogs.copy()
    order = list(range(len(molecules)))
    total = placed[0].copy()

    for k in range(len(molecules) - 1):
        current = placed[order[k]]
        remaining = order[k + 1 :]
        images = boundary.nearest_image(current, cogs[remaining])
        closest = k + 1 + int(np.argmin(np.linalg.norm(images - current, axis=1)))
        order[k + 1], order[closest] = order[closest], order[k + 1]
        following = order[k + 1]

        average = total / (k + 1)
        to_previous = boundary.nearest_image(current, cogs[following])
        to_average = boundary.nearest_image(average, cogs[following])
        if context.gen_anchor is GenAnchor.CLOSEST and np.linalg.norm(
            to_previous - current
        ) < np.linalg.norm(to_average - average):
            placed[following] = to_previous
        else:
            placed[following] = to_average
        total += placed[following]

    LOGGER.debug("gengather molecule order %s", order)
    for molecule, cog, target in zip(molecules, cogs, placed):
        molecule.translate(target - cog)
    _gather_solvent(boundary, snapshot, total / len(molecules))


def crsgather(boundary: Boundary, context: GatherContext) -> None:
    """
    ``gathergr`` whose references follow the trajectory.

    After gathering, the reference of every molecule is moved to its
    new atom 0, so the next frame is gathered next to this one. Solvent
    is gathered around the solute cog.
    """
    gathergr(boundary, context)
    snapshot = boundary.sys
    for i, molecule in enumerate(snapshot.molecules):
        if molecule.n_atoms > 0:
            context.set_anchor(i, molecule.positions[0])
    _gather_solvent(boundary, snapshot, snapshot.solute_cog())


def seqgather(boundary: Boundary, context: GatherContext) -> None:
    """
    Chain the whole solute as one sequence of atoms.

    Only molecule 0 uses its reference; the first atom of every later
    molecule is put next to the last atom of the molecule before it.
    Solvent is gathered around the solute cog.
    """
    snapshot = boundary.sys
    anchor = context.global_anchor()
    for molecule in snapshot.molecules:
        if molecule.n_atoms == 0:
            continue
        _gather_molecule(boundary, molecule, anchor)
        anchor = molecule.positions[-1].copy()
    _gather_solvent(boundary, snapshot, snapshot.solute_cog())


def bondgather(boundary: Boundary, context: GatherContext) -> None:
    """
    Reconnect every molecule along its bonds.

    Atom 0 is put next to the molecule's reference and the rest follows
    the bond graph breadth first, so rings and branches are rebuilt from
    real bonds rather than from atom numbering. Molecules without a
    topology are chained by atom number. Solvent is gathered around the
    solute cog.
    """
    snapshot = boundary.sys
    for i, molecule in enumerate(snapshot.molecules):
        if molecule.n_atoms > 0:
            _gather_along(boundary, molecule, context.anchor(i), _bond_order(molecule, 0))
    _gather_solvent(boundary, snapshot, snapshot.solute_cog())


def refgather(boundary: Boundary, context: GatherContext) -> None:
    """
    Image every atom next to the same atom of the reference frame.

    With a gathered reference from a nearby frame this carries the
    reconnection along a trajectory.
    """
    snapshot = boundary.sys
    reference = _require_reference(context.reference, snapshot)
    for molecule, ref in zip(snapshot.molecules, reference.molecules):
        molecule.positions[:] = boundary.nearest_image(ref.positions, molecule.positions)
    for solvent, ref in zip(snapshot.solvents, reference.solvents):
        solvent.positions[:] = boundary.nearest_image(ref.positions, solvent.positions)


def _gather_list(
    boundary: Boundary, context: GatherContext, linkage: LinkageOverride, bonds: bool = False
) -> None:
    snapshot = boundary.sys
    linkage.validate(snapshot)
    for i, molecule in enumerate(snapshot.molecules):
        if molecule.n_atoms == 0:
            continue
        link = linkage.resolve(i, snapshot) if i > 0 else None
        if link is None:
            root, anchor = 0, context.anchor(i)
        else:
            root = link.local_atom
            anchor = snapshot.molecules[link.linked_molecule].positions[link.linked_atom]
        order = _bond_order(molecule, root) if bonds else _index_order(molecule.n_atoms, root)
        _gather_along(boundary, molecule, anchor, order)
    _gather_solvent(boundary, snapshot, snapshot.solute_cog())


def _gather_ref(
    boundary: Boundary,
    context: GatherContext,
    reference: Snapshot,
    linkage: LinkageOverride,
) -> None:
    snapshot = boundary.sys
    _require_reference(reference, snapshot)
    _gather_list(boundary, context, linkage)
    for molecule, ref in zip(snapshot.molecules, reference.molecules):
        _place_cog(boundary, molecule.positions, ref.positions.mean(axis=0))
    for solvent, ref in zip(snapshot.solvents, reference.solvents):
        n = solvent.atoms_per_molecule
        for chunk, ref_chunk in zip(solvent.chunks(), ref.positions.reshape(-1, n, 3)):
            _place_cog(boundary, chunk, ref_chunk.mean(axis=0))


def _gather_time(boundary: Boundary, context: GatherContext, linkage: LinkageOverride) -> None:
    store = _require_store(context)
    if not store.exists():
        _gather_list(boundary, context, linkage)
        store.save(boundary.sys)
    else:
        _gather_ref(boundary, context, store.load(), linkage)


def gatherlist(boundary: Boundary, context: GatherContext) -> None:
    """
    Chain molecules along the linkage table.

    Molecule 0 starts next to its reference. Every later molecule i has
    its linked atom put next to the named atom of an earlier, already
    gathered molecule (by default atom 0 of the closest earlier molecule
    with atoms), and is
    chained outwards from there in both directions. Solvent is gathered
    around the solute cog.
    """
    _gather_list(boundary, context, context.linkage)


def gathertime(boundary: Boundary, context: GatherContext) -> None:
    """
    ``gatherlist`` made consistent over a trajectory.

    The first frame is gathered with the default links and written to
    the context's reference store; later frames are gathered with
    ``gatherref`` against that stored frame. The linkage override is not
    used (see ``gatherltime``).
    """
    if len(context.linkage) > 0:
        LOGGER.warning("gathertime ignores the linkage override; use gatherltime")
    _gather_time(boundary, context, LinkageOverride())


def gatherref(boundary: Boundary, context: GatherContext) -> None:
    """
    ``gatherlist``, then every molecule placed next to the reference frame.

    Each molecule (and each solvent molecule) is translated by the
    lattice vector that puts its cog closest to the cog of the same
    molecule in ``context.reference``.
    """
    _gather_ref(boundary, context, context.reference, context.linkage)


def gatherltime(boundary: Boundary, context: GatherContext) -> None:
    """``gathertime`` using the linkage override."""
    _gather_time(boundary, context, context.linkage)


def gatherrtime(boundary: Boundary, context: GatherContext) -> None:
    """
    ``gatherref`` made consistent over a trajectory.

    The first frame is gathered against ``context.reference`` and
    written to the reference store; later frames are gathered against
    the stored frame.
    """
    store = _require_store(context)
    if not store.exists():
        _gather_ref(boundary, context, context.reference, context.linkage)
        store.save(boundary.sys)
    else:
        _gather_ref(boundary, context, store.load(), context.linkage)


def gatherbond(boundary: Boundary, context: GatherContext) -> None:
    """``gatherlist`` with molecules rebuilt along their bonds from the linked atom."""
    _gather_list(boundary, context, context.linkage, bonds=True)
