"""Periodic boundaries and nearest-image conventions."""

from .base import Boundary
from .factory import BOUNDARIES, boundary_from_arguments, gather, make_boundary, nearest_image
from .rectbox import RectBox
from .triclinic import Triclinic
from .truncoct import TruncOct
from .vacuum import Vacuum

__all__ = [
    "Boundary",
    "BOUNDARIES",
    "RectBox",
    "TruncOct",
    "Triclinic",
    "Vacuum",
    "boundary_from_arguments",
    "gather",
    "make_boundary",
    "nearest_image",
]
