"""Frame data: periodic cell, molecules and solvent."""

from .box import Box, BoxShape
from .snapshot import Molecule, Snapshot, Solvent

__all__ = ["Box", "BoxShape", "Molecule", "Snapshot", "Solvent"]
