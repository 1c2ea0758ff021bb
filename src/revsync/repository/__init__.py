"""Origin, destination and transformation contracts."""

from .origin import O, Origin, Reader, VisitResult
from .destination import D, Destination, Writer
from .transformation import Metadata, Transformation, TransformResult, TransformWork

__all__ = [
    'O',
    'Origin',
    'Reader',
    'VisitResult',
    'D',
    'Destination',
    'Writer',
    'Metadata',
    'Transformation',
    'TransformResult',
    'TransformWork',
]
