# %% === Import necessary modules
import datetime as dt
import json
import logging
from collections.abc import Iterator
from typing import Any

from dateutil import parser

from ..geometries import Geometry, factory
from ..utilities.exceptions import UnsupportedFieldType
from ..utilities.logging_utils import log_and_error
from .field_definition import FieldType, FieldDefinition, GeometryFieldDefinition, FeatureDefinition

logger = logging.getLogger(__name__)

# %% === Helper functions for field values
def _as_date_time(value, field_type: int):
    if isinstance(value, str):
        value = parser.parse(value)
    if field_type == FieldType.DATE and isinstance(value, dt.datetime):
        return value.date()
    if field_type == FieldType.TIME and isinstance(value, dt.datetime):
        return value.time()
    return value

def _convert_field_value(value, field_type: int, field_name: str):
    """
    Convert a stored value to the Python type of its field.

    Args:
        value (Any): The stored value (never None).
        field_type (int): The raw type code of the field.
        field_name (str): The field name, used in error messages.

    Returns:
        Any: int, float, str, bytes, date/time/datetime, or a list of them.

    Raises:
        UnsupportedFieldType: If the type code is not mapped to a Python type.
    """
    if field_type in (FieldType.INTEGER, FieldType.INTEGER64):
        return int(value)
    elif field_type in (FieldType.INTEGER_LIST, FieldType.INTEGER64_LIST):
        return [int(v) for v in value]
    elif field_type == FieldType.REAL:
        return float(value)
    elif field_type == FieldType.REAL_LIST:
        return [float(v) for v in value]
    elif field_type in (FieldType.STRING, FieldType.WIDE_STRING):
        return str(value)
    elif field_type in (FieldType.STRING_LIST, FieldType.WIDE_STRING_LIST):
        return [str(v) for v in value]
    elif field_type == FieldType.BINARY:
        return bytes(value)
    elif field_type in (FieldType.DATE, FieldType.TIME, FieldType.DATE_TIME):
        return _as_date_time(value, field_type)
    else:
        raise UnsupportedFieldType(f"Don't know how to fetch field '{field_name}' of field type: {field_type}")

# %% === Feature
class Feature:
    """
    Attribute values and geometries described by a FeatureDefinition.

    The feature owns its geometries: set_geometry_field stores a copy, and the
    geometries returned by geometry_field are views released with the feature.
    """

    def __init__(
            self,
            definition: FeatureDefinition,
            fid: int = None
        ):
        self.definition = definition
        self.fid = fid
        self.style_string = None
        self._values = [None] * definition.field_count
        self._geometries: list[Geometry | None] = [None] * definition.geometry_field_count

    # === Attribute fields
    @property
    def field_count(self) -> int:
        return self.definition.field_count

    def field_definition(self, index: int) -> FieldDefinition:
        return self.definition.field_definition(index)

    def _index(self, index_or_name: int | str) -> int:
        if isinstance(index_or_name, str):
            index = self.definition.field_index(index_or_name)
            if index is None:
                log_and_error(f"Field '{index_or_name}' not found in definition '{self.definition.name}'", KeyError, logger)
            return index
        self.definition.field_definition(index_or_name)
        return index_or_name

    def set_field(self, index_or_name: int | str, value: Any) -> None:
        """
        Set the value of a field, checking that it converts to the field type.

        Args:
            index_or_name (int | str): Index or name of the field.
            value (Any): The value (None unsets the field).

        Raises:
            UnsupportedFieldType: If the field type is not mapped to a Python type.
            ValueError: If the value can't be converted to the field type.
        """
        index = self._index(index_or_name)
        if value is not None:
            field_definition = self.definition.field_definition(index)
            value = _convert_field_value(value, field_definition.type, field_definition.name)
        self._values[index] = value

    def field(self, index_or_name: int | str) -> Any:
        """Value of a field, typed by its definition (None if unset)."""
        index = self._index(index_or_name)
        value = self._values[index]
        field_definition = self.definition.field_definition(index)
        if value is None:
            if field_definition.type not in {t.value for t in FieldType}:
                raise UnsupportedFieldType(f"Don't know how to fetch field '{field_definition.name}' of field type: {field_definition.type}")
            return None
        return _convert_field_value(value, field_definition.type, field_definition.name)

    def each_field(self) -> Iterator[Any]:
        for index in range(self.field_count):
            yield self.field(index)

    @property
    def fields(self) -> list[Any]:
        return list(self.each_field())

    # === Geometry fields
    @property
    def geometry_field_count(self) -> int:
        return self.definition.geometry_field_count

    def geometry_field_definition(self, index: int) -> GeometryFieldDefinition:
        return self.definition.geometry_field_definition(index)

    def each_geometry_field_definition(self) -> Iterator[GeometryFieldDefinition]:
        for index in range(self.geometry_field_count):
            yield self.geometry_field_definition(index)

    @property
    def geometry_field_definitions(self) -> list[GeometryFieldDefinition]:
        return list(self.each_geometry_field_definition())

    def set_geometry_field(self, index: int, geometry: Geometry | None) -> None:
        """Store a copy of geometry in the geometry field at index (None clears the field)."""
        self.definition.geometry_field_definition(index)
        previous = self._geometries[index]
        self._geometries[index] = None if geometry is None else geometry.clone()
        if previous is not None:
            previous.destroy()

    def geometry_field(self, index: int) -> Geometry | None:
        """Geometry of the field at index, as a view owned by the feature."""
        self.definition.geometry_field_definition(index)
        geometry = self._geometries[index]
        if geometry is None:
            return None
        return factory(geometry.handle, owned=False, engine=geometry.engine)

    def each_geometry_field(self) -> Iterator[Geometry | None]:
        for index in range(self.geometry_field_count):
            yield self.geometry_field(index)

    @property
    def geometry_fields(self) -> list[Geometry | None]:
        return list(self.each_geometry_field())

    @property
    def geometry(self) -> Geometry | None:
        """Geometry of the first geometry field."""
        if self.geometry_field_count == 0:
            return None
        return self.geometry_field(0)

    @geometry.setter
    def geometry(self, geometry: Geometry | None) -> None:
        self.set_geometry_field(0, geometry)

    # === Lifetime and export
    def destroy(self) -> None:
        """Release the geometries owned by the feature."""
        for index, geometry in enumerate(self._geometries):
            if geometry is not None:
                geometry.destroy()
                self._geometries[index] = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.destroy()

    def as_json(self) -> dict:
        geometry = self.geometry
        fields = []
        for index, value in enumerate(self.each_field()):
            if isinstance(value, (dt.date, dt.time)):
                value = value.isoformat()
            elif isinstance(value, bytes):
                value = value.hex()
            fields.append({'field_definition': self.field_definition(index).as_json(), 'value': value})
        return {
            'definition': self.definition.as_json(),
            'fid': self.fid,
            'field_count': self.field_count,
            'fields': fields,
            'geometry': geometry.as_json() if geometry is not None else None,
            'geometry_field_count': self.geometry_field_count,
            'geometry_field_definitions': [g.as_json() for g in self.each_geometry_field_definition()],
            'style_string': self.style_string
        }

    def to_json(self, **kwargs) -> str:
        return json.dumps(self.as_json(), **kwargs)

    def __repr__(self):
        return f"<Feature fid={self.fid} ({self.field_count} fields, {self.geometry_field_count} geometry fields)>"
