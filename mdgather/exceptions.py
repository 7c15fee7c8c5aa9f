"""Errors raised while reconnecting periodic images."""


class GatherError(Exception):
    """Base class for all gathering failures."""

    pass


class MissingBoxError(GatherError):
    """Raised when a snapshot without a box block is gathered."""

    pass


class DegenerateBoxError(GatherError):
    """Raised when a periodic box has an edge of zero length."""

    pass


class UnknownBoundaryShapeError(GatherError):
    """Raised for a boundary shape letter that is not recognized."""

    pass


class UnknownGatherMethodError(GatherError):
    """Raised for a gathering keyword that is not recognized."""

    pass


class InconsistentLinkageTableError(GatherError):
    """Raised when a linkage entry points outside the snapshot."""

    pass


class StaleContextError(GatherError):
    """Raised when a context was captured for a different molecule layout."""

    pass


class MissingReferenceError(GatherError):
    """Raised when a reference-driven method has no usable reference frame."""

    pass


class ReferenceFileError(GatherError):
    """Raised when a stored reference frame cannot be read back."""

    pass
