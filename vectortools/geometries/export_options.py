# %% === Import necessary modules
from pydantic import BaseModel, Field, field_validator

from config.default_params import ENGINE_CONFIG

# %% === Export option models
class GmlExportOptions(BaseModel):
    """Options of Geometry.to_gml."""
    format: str = Field(default=ENGINE_CONFIG['gml_format'])
    gml3_linestring_element: str | None = Field(default=None)
    gml3_longsrs: bool = Field(default=True)
    gmlid: str | None = Field(default=None)

    # === Format validation ===
    @field_validator('format')
    @classmethod
    def validate_format(cls, v):
        """Accept GML2 and GML3, whatever the case."""
        v = str(v).upper()
        if v not in ('GML2', 'GML3'):
            raise ValueError(f"format must be 'GML2' or 'GML3', got {v!r}")
        return v

    @field_validator('gml3_linestring_element')
    @classmethod
    def validate_linestring_element(cls, v):
        if v is None:
            return v
        v = str(v).lower()
        if v != 'curve':
            raise ValueError(f"gml3_linestring_element can only be 'curve', got {v!r}")
        return v

    def to_engine_options(self) -> dict:
        return {
            'gml_format': self.format,
            'gml3_linestring_element': self.gml3_linestring_element,
            'gml3_longsrs': self.gml3_longsrs,
            'gmlid': self.gmlid
        }


class GeoJsonExportOptions(BaseModel):
    """Options of Geometry.to_geo_json_ex."""
    coordinate_precision: int | None = Field(default=None, ge=0)
    significant_figures: int | None = Field(default=None, ge=1)

    def to_engine_options(self) -> dict:
        return {
            'coordinate_precision': self.coordinate_precision,
            'significant_figures': self.significant_figures
        }
