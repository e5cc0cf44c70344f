# %% === Import necessary modules
import logging
from enum import IntEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..engine import GeometryType, geometry_type_to_name
from ..spatial_ref import SpatialReference
from ..utilities.logging_utils import log_and_error

logger = logging.getLogger(__name__)

# %% === Field types
class FieldType(IntEnum):
    """Attribute field types (OGR codes)."""
    INTEGER = 0
    INTEGER_LIST = 1
    REAL = 2
    REAL_LIST = 3
    STRING = 4
    STRING_LIST = 5
    WIDE_STRING = 6
    WIDE_STRING_LIST = 7
    BINARY = 8
    DATE = 9
    TIME = 10
    DATE_TIME = 11
    INTEGER64 = 12
    INTEGER64_LIST = 13

# %% === Field definitions
class FieldDefinition(BaseModel):
    """Name and type of an attribute field. The type is a raw code, possibly not a FieldType."""
    name: str
    type: int = Field(default=FieldType.STRING)
    width: int = Field(default=0, ge=0)
    precision: int = Field(default=0, ge=0)
    nullable: bool = Field(default=True)
    default: Any = Field(default=None)

    # === Name validation ===
    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("Field name cannot be empty")
        return v

    @property
    def type_name(self) -> str:
        try:
            return FieldType(self.type).name
        except ValueError:
            return f"Unknown: {self.type}"

    def as_json(self) -> dict:
        return {
            'name': self.name,
            'type': self.type_name,
            'width': self.width,
            'precision': self.precision,
            'nullable': self.nullable,
            'default': self.default
        }


class GeometryFieldDefinition(BaseModel):
    """Name, kind and spatial reference of a geometry field."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str = Field(default='')
    type: int = Field(default=GeometryType.UNKNOWN)
    spatial_reference: SpatialReference | None = Field(default=None)
    nullable: bool = Field(default=True)

    def as_json(self) -> dict:
        return {
            'name': self.name,
            'type': geometry_type_to_name(self.type),
            'spatial_reference': self.spatial_reference.authority_code if self.spatial_reference is not None else None,
            'nullable': self.nullable
        }

# %% === Feature definition
class FeatureDefinition:
    """
    Schema of a set of features: the attribute fields and the geometry fields.

    A new definition has a single unnamed geometry field of kind UNKNOWN,
    unless geometry field definitions are given.
    """

    def __init__(
            self,
            name: str = '',
            field_definitions: list[FieldDefinition] = None,
            geometry_field_definitions: list[GeometryFieldDefinition] = None
        ):
        self.name = name
        self._field_definitions = list(field_definitions or [])
        if geometry_field_definitions is None:
            geometry_field_definitions = [GeometryFieldDefinition()]
        self._geometry_field_definitions = list(geometry_field_definitions)

    # === Attribute fields
    @property
    def field_count(self) -> int:
        return len(self._field_definitions)

    def field_definition(self, index: int) -> FieldDefinition:
        if not 0 <= index < self.field_count:
            log_and_error(f"Field index {index} out of range (definition '{self.name}' has {self.field_count} fields)", IndexError, logger)
        return self._field_definitions[index]

    @property
    def field_definitions(self) -> list[FieldDefinition]:
        return list(self._field_definitions)

    def add_field_definition(self, field_definition: FieldDefinition) -> None:
        if self.field_index(field_definition.name) is not None:
            log_and_error(f"Field '{field_definition.name}' already exists in definition '{self.name}'", ValueError, logger)
        self._field_definitions.append(field_definition)

    def field_index(self, name: str) -> int | None:
        for idx, field_definition in enumerate(self._field_definitions):
            if field_definition.name.lower() == name.lower():
                return idx
        return None

    def field_definition_by_name(self, name: str) -> FieldDefinition | None:
        index = self.field_index(name)
        if index is None:
            return None
        return self._field_definitions[index]

    # === Geometry fields
    @property
    def geometry_field_count(self) -> int:
        return len(self._geometry_field_definitions)

    def geometry_field_definition(self, index: int) -> GeometryFieldDefinition:
        if not 0 <= index < self.geometry_field_count:
            log_and_error(f"Geometry field index {index} out of range (definition '{self.name}' has {self.geometry_field_count} geometry fields)", IndexError, logger)
        return self._geometry_field_definitions[index]

    @property
    def geometry_field_definitions(self) -> list[GeometryFieldDefinition]:
        return list(self._geometry_field_definitions)

    def add_geometry_field_definition(self, geometry_field_definition: GeometryFieldDefinition) -> None:
        self._geometry_field_definitions.append(geometry_field_definition)

    def geometry_field_index(self, name: str) -> int | None:
        for idx, geometry_field_definition in enumerate(self._geometry_field_definitions):
            if geometry_field_definition.name.lower() == name.lower():
                return idx
        return None

    def geometry_field_definition_by_name(self, name: str) -> GeometryFieldDefinition | None:
        index = self.geometry_field_index(name)
        if index is None:
            return None
        return self._geometry_field_definitions[index]

    @property
    def geometry_type(self) -> GeometryType:
        """Kind of the first geometry field (NONE if there is no geometry field)."""
        if not self._geometry_field_definitions:
            return GeometryType.NONE
        return GeometryType.from_code(self._geometry_field_definitions[0].type)

    def as_json(self) -> dict:
        return {
            'name': self.name,
            'field_count': self.field_count,
            'field_definitions': [f.as_json() for f in self._field_definitions],
            'geometry_field_count': self.geometry_field_count,
            'geometry_field_definitions': [g.as_json() for g in self._geometry_field_definitions],
            'geometry_type': geometry_type_to_name(self.geometry_type)
        }
