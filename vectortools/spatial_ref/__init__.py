from .spatial_reference import SpatialReference
from .coordinate_transformation import CoordinateTransformation

__all__ = [
    'SpatialReference',
    'CoordinateTransformation'
]
