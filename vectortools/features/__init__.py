from .field_definition import FieldType, FieldDefinition, GeometryFieldDefinition, FeatureDefinition
from .feature import Feature

__all__ = [
    'FieldType',
    'FieldDefinition',
    'GeometryFieldDefinition',
    'FeatureDefinition',
    'Feature'
]
