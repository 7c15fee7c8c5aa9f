"""
mdgather - reconnection of molecules split by periodic boundaries.

Trajectory frames store every atom inside the periodic cell, which
tears molecules apart at the cell faces. Before distances, angles or
RMSDs can be computed the molecules have to be gathered back into
contiguous images.

Quick Start:
    >>> from mdgather import Box, Snapshot, gather
    >>> frame = Snapshot.create([[[0.1, 0.1, 0.1], [2.05, 0.1, 0.1]]], box=Box.cubic(2.0))
    >>> pbc = gather(frame, "g")
    >>> frame.molecules[0].positions[1].round(2).tolist()
    [0.05, 0.1, 0.1]
"""

__version__ = "0.1.0"

from .bound import (
    Boundary,
    RectBox,
    Triclinic,
    TruncOct,
    Vacuum,
    boundary_from_arguments,
    gather,
    make_boundary,
    nearest_image,
)
from .exceptions import (
    DegenerateBoxError,
    GatherError,
    InconsistentLinkageTableError,
    MissingBoxError,
    MissingReferenceError,
    ReferenceFileError,
    StaleContextError,
    UnknownBoundaryShapeError,
    UnknownGatherMethodError,
)
from .gather import GatherContext, GatherMethod, GenAnchor, LinkageOverride
from .io import ReferenceStore
from .system import Box, BoxShape, Molecule, Snapshot, Solvent
from .topology import MoleculeTopology

__all__ = [
    "Box",
    "BoxShape",
    "Molecule",
    "Solvent",
    "Snapshot",
    "MoleculeTopology",
    "Boundary",
    "Vacuum",
    "RectBox",
    "TruncOct",
    "Triclinic",
    "make_boundary",
    "boundary_from_arguments",
    "nearest_image",
    "gather",
    "GatherContext",
    "GatherMethod",
    "GenAnchor",
    "LinkageOverride",
    "ReferenceStore",
    "GatherError",
    "MissingBoxError",
    "DegenerateBoxError",
    "UnknownBoundaryShapeError",
    "UnknownGatherMethodError",
    "InconsistentLinkageTableError",
    "StaleContextError",
    "MissingReferenceError",
    "ReferenceFileError",
]
