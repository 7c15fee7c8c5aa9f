"""On-disk reference frame for trajectory-consistent gathering."""

from __future__ import annotations

import gzip
import hashlib
import logging
import pickle
import struct
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

import numpy as np
from numpy.typing import NDArray

from ..exceptions import ReferenceFileError
from ..system import Box, BoxShape, Molecule, Snapshot, Solvent

LOGGER = logging.getLogger(__name__)

# Reference format version for compatibility checking
REFERENCE_VERSION = 1
REFERENCE_MAGIC = b"MDGR"

DEFAULT_REFERENCE_FILE = "REFERENCE.gref"

_HEADER_SIZE = 4 + 4 + 32


@dataclass
class ReferenceFrame:
    """
    Stored copy of a gathered frame.

    Only positions and the box are kept; topology objects stay with
    the live snapshot.

    Attributes:
        version: Reference format version.
        timestamp: When the frame was written.
        molecule_positions: One (N_i, 3) array per solute molecule.
        solvent_positions: One (M_j, 3) array per solvent block.
        atoms_per_solvent: Atoms per solvent molecule, per block.
        box_vectors: Box vectors (3x3), or None.
        box_shape: Name of the box shape, or None.
        metadata: User-defined metadata.
    """

    version: int
    timestamp: str
    molecule_positions: list[NDArray[np.floating]]
    solvent_positions: list[NDArray[np.floating]]
    atoms_per_solvent: list[int]
    box_vectors: NDArray[np.floating] | None
    box_shape: str | None
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_snapshot(
        cls, snapshot: Snapshot, metadata: dict[str, Any] | None = None
    ) -> ReferenceFrame:
        """Capture the positions of a snapshot."""
        return cls(
            version=REFERENCE_VERSION,
            timestamp=datetime.now().isoformat(),
            molecule_positions=[m.positions.copy() for m in snapshot.molecules],
            solvent_positions=[s.positions.copy() for s in snapshot.solvents],
            atoms_per_solvent=[s.atoms_per_molecule for s in snapshot.solvents],
            box_vectors=snapshot.box.vectors.copy() if snapshot.box is not None else None,
            box_shape=snapshot.box.shape.value if snapshot.box is not None else None,
            metadata=metadata or {},
        )

    def to_snapshot(self) -> Snapshot:
        """Rebuild a Snapshot holding the stored positions."""
        box = None
        if self.box_vectors is not None:
            box = Box(self.box_vectors, BoxShape(self.box_shape))
        return Snapshot(
            molecules=[Molecule(positions=p) for p in self.molecule_positions],
            solvents=[
                Solvent(positions=p, atoms_per_molecule=n)
                for p, n in zip(self.solvent_positions, self.atoms_per_solvent)
            ],
            box=box,
        )


class ReferenceStore:
    """
    File holding the reference frame of a trajectory.

    The first frame gathered by a time-based method is written here and
    every later frame is gathered against it. The file layout follows a
    checkpoint: magic bytes, format version, SHA-256 checksum, pickled
    payload, optionally gzip compressed.

    Example:
        store = ReferenceStore(tmp_dir / "REFERENCE.gref")
        if not store.exists():
            store.save(snapshot)
        reference = store.load()
    """

    def __init__(self, path: str | Path = DEFAULT_REFERENCE_FILE, compress: bool = True) -> None:
        """
        Initialize reference store.

        Args:
            path: Reference file path.
            compress: Whether to gzip compress the file.
        """
        self.path = Path(path)
        self.compress = compress
        self._cached: Snapshot | None = None

    def exists(self) -> bool:
        """Whether a reference frame has been written."""
        return self.path.exists()

    def save(self, snapshot: Snapshot, metadata: dict[str, Any] | None = None) -> Path:
        """
        Write ``snapshot`` as the reference frame.

        Args:
            snapshot: Gathered frame to keep.
            metadata: Additional metadata to store.

        Returns:
            Path to the written file.
        """
        frame = ReferenceFrame.from_snapshot(snapshot, metadata)
        data = self._serialize(frame)
        checksum = hashlib.sha256(data).digest()

        self.path.parent.mkdir(parents=True, exist_ok=True)
        open_func = gzip.open if self.compress else open
        with open_func(self.path, "wb") as f:
            f.write(REFERENCE_MAGIC)
            f.write(struct.pack("<I", REFERENCE_VERSION))
            f.write(checksum)
            f.write(data)

        self._cached = frame.to_snapshot()
        LOGGER.info("Wrote reference frame to %s", self.path)
        return self.path

    def load(self) -> Snapshot:
        """
        Read the reference frame.

        Returns:
            Snapshot with the stored positions.

        Raises:
            FileNotFoundError: If no reference frame was written.
            ReferenceFileError: If the file is invalid or corrupted.
        """
        if self._cached is not None:
            return self._cached
        if not self.path.exists():
            raise FileNotFoundError(f"Reference frame not found: {self.path}")

        try:
            open_func = gzip.open if self.compress else open
            with open_func(self.path, "rb") as f:
                content = f.read()
        except gzip.BadGzipFile:
            with open(self.path, "rb") as f:
                content = f.read()

        if len(content) < _HEADER_SIZE:
            raise ReferenceFileError(f"Invalid reference file {self.path} (too small)")

        if content[:4] != REFERENCE_MAGIC:
            raise ReferenceFileError(f"Invalid reference file {self.path} (bad magic)")

        version = struct.unpack("<I", content[4:8])[0]
        stored_checksum = content[8:_HEADER_SIZE]
        data = content[_HEADER_SIZE:]

        if hashlib.sha256(data).digest() != stored_checksum:
            raise ReferenceFileError(
                f"Reference file {self.path} corrupted (checksum mismatch)"
            )
        if version > REFERENCE_VERSION:
            raise ReferenceFileError(
                f"Reference version {version} not supported "
                f"(max supported: {REFERENCE_VERSION})"
            )

        self._cached = self._deserialize(data).to_snapshot()
        LOGGER.info("Loaded reference frame from %s", self.path)
        return self._cached

    def clear(self) -> None:
        """Remove the reference file and forget the cached frame."""
        self._cached = None
        if self.path.exists():
            self.path.unlink()

    def _serialize(self, frame: ReferenceFrame) -> bytes:
        """Serialize reference frame to bytes."""
        data = {
            "version": frame.version,
            "timestamp": frame.timestamp,
            "molecule_positions": frame.molecule_positions,
            "solvent_positions": frame.solvent_positions,
            "atoms_per_solvent": frame.atoms_per_solvent,
            "box_vectors": frame.box_vectors,
            "box_shape": frame.box_shape,
            "metadata": frame.metadata,
        }
        return pickle.dumps(data, protocol=pickle.HIGHEST_PROTOCOL)

    def _deserialize(self, data: bytes) -> ReferenceFrame:
        """Deserialize reference frame from bytes."""
        loaded = pickle.loads(data)
        return ReferenceFrame(
            version=loaded["version"],
            timestamp=loaded["timestamp"],
            molecule_positions=[np.asarray(p) for p in loaded["molecule_positions"]],
            solvent_positions=[np.asarray(p) for p in loaded["solvent_positions"]],
            atoms_per_solvent=list(loaded["atoms_per_solvent"]),
            box_vectors=(
                np.asarray(loaded["box_vectors"])
                if loaded["box_vectors"] is not None
                else None
            ),
            box_shape=loaded.get("box_shape"),
            metadata=loaded.get("metadata", {}),
        )
