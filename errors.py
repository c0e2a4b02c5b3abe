"""
Error kinds raised by the polygon split engine.

All errors derive from ValueError so callers that only care about "bad input"
can catch that, while the CLI and tests can distinguish the individual kinds.
"""


class PolySplitError(ValueError):
    """Base class for all polygon split errors."""


class InvalidParameter(PolySplitError):
    """Bad side count, radius, or a lone split-point coordinate."""


class DegeneratePolygon(PolySplitError):
    """Polygon with zero area given to sampling or splitting."""


class InvalidPolygon(PolySplitError):
    """Ring that is not simple (self-intersecting, folded back or too short)."""


class DegenerateCut(PolySplitError):
    """
    Cut segment of zero length after clipping.

    Raised while building the planar graph and handled there by dropping the
    cut; never propagated to the caller of split_polygon().
    """
